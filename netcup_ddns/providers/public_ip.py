"""
Public IP discovery.

Asks the OpenDNS resolvers for the special name ``myip.opendns.com``,
which they answer with the address the query came from. The IPv4 and
IPv6 lookups are independent and run side by side.
"""

import ipaddress
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import dns.exception
import dns.resolver

from ..core.models import IPAddress

logger = logging.getLogger(__name__)

MYIP_NAME = "myip.opendns.com"
OPENDNS_IPV4_RESOLVERS = ["208.67.222.222", "208.67.220.220"]
OPENDNS_IPV6_RESOLVERS = ["2620:119:35::35", "2620:119:53::53"]


def _initialize_dns_resolver(nameservers: List[str], timeout: float) -> dns.resolver.Resolver:
    resolver = dns.resolver.Resolver(configure=False)
    resolver.nameservers = nameservers
    resolver.timeout = timeout
    resolver.lifetime = timeout
    return resolver


def lookup_address(
    record_type: str, nameservers: List[str], timeout: float = 5.0
) -> Optional[IPAddress]:
    """Resolve our own public address of one family, None if unavailable."""
    resolver = _initialize_dns_resolver(nameservers, timeout)
    try:
        answers = resolver.resolve(MYIP_NAME, record_type)
    except (dns.exception.DNSException, OSError) as e:
        logger.debug(f"Public {record_type} lookup failed: {e}")
        return None

    version = 4 if record_type == "A" else 6
    for answer in answers:
        try:
            address = ipaddress.ip_address(answer.to_text())
        except ValueError:
            address = None
        if address is not None and address.version == version:
            return address
        logger.warning(f"Unexpected answer for {MYIP_NAME} {record_type}: {answer}")
    return None


def discover_public_addresses(timeout: float = 5.0) -> List[IPAddress]:
    """
    Discover the public IPv4 and IPv6 address of this host.

    Returns:
        Zero, one or two addresses, IPv4 first
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        ipv4 = executor.submit(lookup_address, "A", OPENDNS_IPV4_RESOLVERS, timeout)
        ipv6 = executor.submit(lookup_address, "AAAA", OPENDNS_IPV6_RESOLVERS, timeout)
        addresses = [address for address in (ipv4.result(), ipv6.result()) if address]

    for address in addresses:
        logger.info(f"Got IP {address}")
    if not addresses:
        logger.warning("Could not discover any public IP address")
    return addresses
