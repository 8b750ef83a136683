"""
netcup API access.

This package contains the envelope codec, the HTTP transport, the session
client and public IP discovery.
"""

from .netcup_client import AuthenticatedClient, UnauthenticatedClient
from .public_ip import discover_public_addresses
from .transport import JSONTransport

__all__ = [
    "AuthenticatedClient",
    "UnauthenticatedClient",
    "JSONTransport",
    "discover_public_addresses",
]
