"""
netcup DDNS - Dynamic DNS updates through the netcup CCP API

Keeps the A and AAAA records of configured subdomains pointed at the
host's current public IPv4 and IPv6 addresses.
"""

__version__ = "1.0.0"
__author__ = "netcup DDNS Team"
__description__ = "Dynamic DNS updater for domains hosted at netcup"

from .core.dns_manager import DNSManager
from .core.record_manager import RecordManager
from .providers.netcup_client import AuthenticatedClient, UnauthenticatedClient

__all__ = [
    "DNSManager",
    "RecordManager",
    "UnauthenticatedClient",
    "AuthenticatedClient",
]
