# decork/__init__.py
"""
decork - stdin/stdout relay to a TCP destination through an HTTP proxy.

Main Components:
- tunnel.py: CONNECT handshake with the proxy (establish_tunnel)
- relay.py: two-thread duplex copy between local streams and the tunnel
- protocol.py: CONNECT request framing and response-head parsing
- client.py: command line, configuration, logging and exit status

Usage:
    decork --proxy proxy.local:8080 example.com:443
    python -m decork example.com:22
"""

from .errors import (
    DecorkError,
    ConfigurationError,
    TunnelError,
    ConnectError,
    TunnelRejectedError,
    RelayIoError,
)
from .tunnel import Tunnel, establish_tunnel, open_direct
from .relay import relay, RelayResult, DirectionState

__version__ = "1.0.0"

__all__ = [
    'DecorkError',
    'ConfigurationError',
    'TunnelError',
    'ConnectError',
    'TunnelRejectedError',
    'RelayIoError',
    'Tunnel',
    'establish_tunnel',
    'open_direct',
    'relay',
    'RelayResult',
    'DirectionState',
]
