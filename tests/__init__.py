# tests/__init__.py
"""
Test Suite for decork

Test Modules:
- test_protocol.py: CONNECT request framing and response-head parsing
- test_tunnel.py: tunnel establishment against a local CONNECT proxy
- test_relay.py: duplex relay over socket pairs
- test_client.py: configuration resolution and end-to-end runs of `python -m decork`

Helpers:
- connect_proxy.py: local CONNECT proxy and echo destination servers

Usage:
    pytest tests/
    pytest tests/test_relay.py -v
"""

import sys
import os

# Add project root to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Test configuration constants
TEST_CONFIG = {
    'DEFAULT_TIMEOUT': 10,
    'LARGE_PAYLOAD_SIZE': 256 * 1024,
}

__all__ = ['TEST_CONFIG']
