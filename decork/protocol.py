# decork/protocol.py
"""
HTTP CONNECT framing for the proxy handshake.

Request format (HTTP/1.0, no body):

    CONNECT <host:port> HTTP/1.0\r\n
    [Proxy-Authorization: Basic <base64(credential)>\r\n]
    \r\n

Response format: a status line, zero or more header lines and an empty line
(either "\r\n" or a bare "\n"). There is no Content-Length framing; the end
of the head is found structurally, and any bytes received after it belong
to the tunnelled stream.
"""

import base64
import collections
import logging
import socket

from .errors import ConnectError, TunnelRejectedError

CONNECT_VERSION = "HTTP/1.0"
SUCCESS_TOKEN = "200"
RECV_SIZE = 8192
MAX_HEAD_SIZE = 64 * 1024

logger = logging.getLogger(__name__)

HandshakeResponse = collections.namedtuple(
    "HandshakeResponse", ["status_line", "headers", "leftover"]
)


def encode_basic_credentials(credential):
    """Return the base64 token for a Basic Proxy-Authorization header."""
    return base64.b64encode(credential.encode("utf-8")).decode("ascii")


def build_connect_request(destination, auth=None):
    """
    Build the CONNECT request head.
    
    Args:
        destination: "host:port" string, passed through verbatim
        auth: Optional "user:password" (or bare "user") credential
    
    Returns:
        bytes: The complete request, ready for a single sendall()
    """
    request = f"CONNECT {destination} {CONNECT_VERSION}\r\n"
    if auth is not None:
        request += f"Proxy-Authorization: Basic {encode_basic_credentials(auth)}\r\n"
    request += "\r\n"
    return request.encode("utf-8")


def is_success_status(status_line):
    """Check if a proxy status line reports success."""
    return SUCCESS_TOKEN in status_line


def _decode_line(line):
    return line.decode("latin-1").rstrip("\r\n")


def read_response_head(sock, recv_size=RECV_SIZE, max_size=MAX_HEAD_SIZE):
    """
    Read the proxy's response head from a connected socket.
    
    The status line is validated as soon as it is complete, so a rejection
    is reported without waiting for the rest of the head.
    
    Args:
        sock: Socket the CONNECT request was sent on
        recv_size: Maximum bytes per recv() call
        max_size: Largest head accepted before giving up
    
    Returns:
        HandshakeResponse: status line, header lines, and the bytes received
        after the blank line (possibly empty)
    
    Raises:
        TunnelRejectedError: non-200 status, EOF or read error before the
        blank line, or a head larger than max_size
    """
    buffer = bytearray()
    status_line = None
    headers = []
    pos = 0

    while True:
        newline = buffer.find(b"\n", pos)
        if newline < 0:
            partial = status_line if status_line is not None else _decode_line(bytes(buffer))
            if len(buffer) >= max_size:
                raise TunnelRejectedError(partial, f"response head exceeds {max_size} bytes")
            try:
                chunk = sock.recv(recv_size)
            except OSError as e:
                raise TunnelRejectedError(partial, f"read error: {e}") from e
            if not chunk:
                raise TunnelRejectedError(partial, "connection closed before end of response head")
            buffer += chunk
            continue

        line = bytes(buffer[pos:newline + 1])
        pos = newline + 1

        if status_line is None:
            status_line = _decode_line(line)
            logger.debug(f"Proxy status: {format_http_message(line)}")
            if not is_success_status(status_line):
                raise TunnelRejectedError(status_line)
        elif line in (b"\r\n", b"\n"):
            leftover = bytes(buffer[pos:])
            if leftover:
                logger.debug(f"{len(leftover)} bytes received past response head")
            return HandshakeResponse(status_line, headers, leftover)
        else:
            headers.append(_decode_line(line))


def create_tcp_connection(host, port, timeout=30):
    """
    Create a TCP connection, raising ConnectError on failure.
    
    The timeout applies to the connect only; the returned socket is blocking
    with no timeout.
    
    Args:
        host: Target hostname/IP
        port: Target port
        timeout: Connection timeout in seconds (None waits indefinitely)
    
    Returns:
        socket: Connected socket
    """
    address = f"{host}:{port}"
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except socket.gaierror as e:
        raise ConnectError(address, f"name resolution failed: {e}") from e
    except ConnectionRefusedError as e:
        raise ConnectError(address, "connection refused") from e
    except UnicodeError as e:
        raise ConnectError(address, f"invalid host name: {e}") from e
    except socket.timeout as e:
        raise ConnectError(address, "timed out") from e
    except OSError as e:
        raise ConnectError(address, e) from e
    sock.settimeout(None)
    logger.info(f"Connected to {address}")
    return sock


def close_connection(sock):
    """
    Safely close a socket connection.
    
    Args:
        sock: Socket to close (None is ignored)
    """
    if sock is None:
        return
    try:
        sock.close()
        logger.debug("Connection closed")
    except OSError as e:
        logger.error(f"Error closing connection: {e}")


def format_http_message(data, max_length=200):
    """
    Format a protocol line or message for logging (truncate if too long).
    
    Args:
        data: Message bytes
        max_length: Maximum length to display
    
    Returns:
        str: Formatted message for logging
    """
    decoded = data.decode("latin-1").rstrip("\r\n")
    if len(decoded) > max_length:
        return decoded[:max_length] + '...'
    return decoded
