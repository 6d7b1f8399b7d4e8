# decork/relay.py
"""
Bidirectional byte relay between local streams and a remote socket.

Two threads run for the lifetime of the relay:

    remote->local   socket reader  -> local output (stdout)
    local->remote   local input    -> socket writer

Each thread owns one read endpoint and one write endpoint, so nothing is
shared and no locking is needed. Every chunk is written and flushed as soon
as it is read, which keeps interactive sessions responsive.
"""

import collections
import logging
import socket
import threading
from enum import Enum

from .errors import RelayIoError

BUFFER_SIZE = 8192

logger = logging.getLogger(__name__)


class DirectionState(Enum):
    RUNNING = "running"
    CLOSED = "closed"
    FAILED = "failed"


RelayResult = collections.namedtuple("RelayResult", ["downstream", "upstream"])


class RemoteReader:
    """Read-only half of a connected socket."""

    def __init__(self, sock):
        self._sock = sock

    def read(self, size):
        return self._sock.recv(size)


class RemoteWriter:
    """Write-only half of a connected socket."""

    def __init__(self, sock):
        self._sock = sock

    def write(self, data):
        self._sock.sendall(data)

    def flush(self):
        pass

    def close(self):
        """Half-close the socket so the peer sees end of input."""
        try:
            self._sock.shutdown(socket.SHUT_WR)
        except OSError as e:
            logger.debug(f"Ignoring error on half-close: {e}")


def split_connection(sock):
    """Return (reader, writer) halves that both reference sock."""
    return RemoteReader(sock), RemoteWriter(sock)


def _read_chunk(stream, size):
    # read1() returns whatever is available instead of waiting for size bytes
    read = getattr(stream, 'read1', None) or stream.read
    return read(size)


class RelayDirection:
    """
    Copies one direction of the relay on its own thread.
    
    The state moves from RUNNING to CLOSED on end-of-stream, or to FAILED on
    an I/O error. Errors are recorded, not raised.
    """

    def __init__(self, name, source, sink, prefix=b"", on_eof=None,
                 buffer_size=BUFFER_SIZE):
        self.name = name
        self.source = source
        self.sink = sink
        self.prefix = prefix
        self.on_eof = on_eof
        self.buffer_size = buffer_size
        self.state = DirectionState.RUNNING
        self.bytes_copied = 0
        self.error = None
        self.thread = threading.Thread(target=self.run, name=name, daemon=True)

    def start(self):
        self.thread.start()

    def join(self, timeout=None):
        self.thread.join(timeout)

    def _write(self, data):
        try:
            self.sink.write(data)
            self.sink.flush()
        except (OSError, ValueError) as e:
            raise RelayIoError(self.name, f"write failed: {e}") from e
        self.bytes_copied += len(data)

    def copy(self):
        """Copy until the source reports EOF. Raises RelayIoError."""
        if self.prefix:
            self._write(self.prefix)
        while True:
            try:
                data = _read_chunk(self.source, self.buffer_size)
            except (OSError, ValueError) as e:
                raise RelayIoError(self.name, f"read failed: {e}") from e
            if not data:
                return
            self._write(data)

    def run(self):
        try:
            self.copy()
        except RelayIoError as e:
            self.error = e
            self.state = DirectionState.FAILED
            logger.debug(f"Relay direction ended with error: {e}")
        else:
            self.state = DirectionState.CLOSED
            logger.debug(f"[{self.name}] End of stream")
            if self.on_eof is not None:
                self.on_eof()
        logger.info(f"[{self.name}] {self.state.value} after {self.bytes_copied} bytes")


def relay(local_input, local_output, remote, leftover=b"", buffer_size=BUFFER_SIZE):
    """
    Relay bytes between local streams and a remote socket until both
    directions have finished.
    
    Args:
        local_input: Binary stream read for upstream traffic (e.g. stdin)
        local_output: Binary stream written with downstream traffic (e.g. stdout)
        remote: Connected socket
        leftover: Bytes already received from the remote, written to
            local_output before anything else
        buffer_size: Maximum bytes per read
    
    Returns:
        RelayResult: the two finished RelayDirection objects
    """
    reader, writer = split_connection(remote)
    downstream = RelayDirection(
        "remote->local", reader, local_output,
        prefix=leftover, buffer_size=buffer_size,
    )
    upstream = RelayDirection(
        "local->remote", local_input, writer,
        on_eof=writer.close, buffer_size=buffer_size,
    )

    downstream.start()
    upstream.start()
    logger.debug("Relay threads started")

    downstream.join()
    upstream.join()
    return RelayResult(downstream, upstream)
