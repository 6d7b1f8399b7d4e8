# decork/errors.py
"""
Exception types raised by the decork client.

TunnelError and its subclasses are fatal: the client logs them and exits
non-zero. RelayIoError only ends one relay direction and never reaches the
caller of relay().
"""


class DecorkError(Exception):
    """Base class for all decork errors."""


class ConfigurationError(DecorkError, ValueError):
    """Invalid address, proxy URL or credential source."""


class TunnelError(DecorkError):
    """The remote connection could not be established."""


class ConnectError(TunnelError):
    """The proxy or destination could not be reached."""

    def __init__(self, address, reason=None):
        self.address = address
        self.reason = reason
        message = f"Cannot connect to {address}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class TunnelRejectedError(TunnelError):
    """The proxy refused the CONNECT request or sent a malformed response."""

    def __init__(self, status_line, detail=None):
        self.status_line = status_line
        message = f"Proxy failed: {status_line or '<empty response>'}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class RelayIoError(DecorkError):
    """A read or write failed in one relay direction."""

    def __init__(self, direction, reason):
        self.direction = direction
        super().__init__(f"[{direction}] {reason}")
