# decork/tunnel.py
"""
Tunnel establishment through an HTTP forward proxy.

establish_tunnel() connects to the proxy, sends a CONNECT request and
consumes the response head. The socket it returns carries only destination
traffic; bytes the proxy pushed right after its response head are kept in
Tunnel.leftover and must be emitted before anything read from the socket.
"""

import collections
import logging

from .errors import ConfigurationError, TunnelRejectedError
from .protocol import (
    build_connect_request,
    close_connection,
    create_tcp_connection,
    read_response_head,
)

logger = logging.getLogger(__name__)

Tunnel = collections.namedtuple("Tunnel", ["sock", "leftover"])


def parse_address(address):
    """Split "host:port" (or "[v6]:port") into (host, port)."""
    host, sep, port = address.rpartition(':')
    if not sep or not host or not port.isdigit():
        raise ConfigurationError(f"Expected host:port, got {address!r}")
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    return host, int(port)


def establish_tunnel(proxy_address, destination, auth=None, timeout=30):
    """
    Open a CONNECT tunnel to destination through proxy_address.
    
    Args:
        proxy_address: Proxy "host:port"
        destination: Destination "host:port", sent verbatim
        auth: Optional plain-text credential for Basic auth
        timeout: TCP connect timeout in seconds
    
    Returns:
        Tunnel: negotiated socket and any bytes read past the response head
    
    Raises:
        ConnectError: proxy unreachable
        TunnelRejectedError: non-200 status or truncated response
    """
    host, port = parse_address(proxy_address)
    sock = create_tcp_connection(host, port, timeout=timeout)

    try:
        request = build_connect_request(destination, auth)
        logger.info(f"CONNECT {destination} via {proxy_address}"
                    f"{' (with credentials)' if auth is not None else ''}")
        try:
            sock.sendall(request)
        except OSError as e:
            raise TunnelRejectedError(None, f"write error: {e}") from e

        response = read_response_head(sock)
    except Exception:
        close_connection(sock)
        raise

    logger.info(f"Tunnel established: {response.status_line}")
    for header in response.headers:
        logger.debug(f"Proxy header: {header}")

    return Tunnel(sock, response.leftover)


def open_direct(destination, timeout=30):
    """Connect straight to destination; used when no proxy is configured."""
    host, port = parse_address(destination)
    logger.info(f"No proxy configured, connecting directly to {destination}")
    return Tunnel(create_tcp_connection(host, port, timeout=timeout), b"")
