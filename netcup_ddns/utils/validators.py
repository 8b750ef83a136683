"""
Validators - Input validation for configured domains and hosts

This module provides validation functions for zone names, host labels and
IP addresses to keep bad configuration away from the provider API.
"""

import ipaddress
import logging
import re
from typing import Optional

from ..core.models import IPAddress

logger = logging.getLogger(__name__)

SPECIAL_HOSTS = ("@", "*")


def validate_zone_name(zone: str) -> bool:
    """
    Validate a DNS zone (domain) name.

    Args:
        zone: The zone name to validate

    Returns:
        True if valid, False otherwise
    """
    if not zone or not isinstance(zone, str):
        return False

    if zone.endswith("."):
        logger.warning(f"Zone name ends with dot: {zone}")
        return False

    if len(zone) > 253:
        logger.warning(f"Zone name too long: {zone}")
        return False

    labels = zone.split(".")

    if len(labels) < 2:
        logger.warning(f"Zone name must have at least 2 labels: {zone}")
        return False

    if any(not _validate_label(label) for label in labels):
        logger.warning(f"Invalid label in zone name: {zone}")
        return False

    if parse_ip_address(zone) is not None:
        return False

    return True


def validate_host_label(host: str) -> bool:
    """
    Validate a host as used in the provider's record list.

    "@" stands for the zone apex and "*" for the wildcard record. Multi
    label hosts such as "www.dev" and a leading wildcard ("*.dev") are
    accepted.
    """
    if not host or not isinstance(host, str):
        return False

    if host in SPECIAL_HOSTS:
        return True

    labels = host.split(".")
    if labels[0] == "*":
        labels = labels[1:]

    for label in labels:
        if not _validate_label(label):
            logger.warning(f"Invalid label '{label}' in host: {host}")
            return False

    return True


def _validate_label(label: str) -> bool:
    """
    Validate a single domain label.

    Labels can contain letters, digits, hyphens and underscores, and may
    neither start nor end with a hyphen.
    """
    if len(label) == 0 or len(label) > 63:
        return False

    return bool(re.match(r"^[a-zA-Z0-9_]([a-zA-Z0-9_-]*[a-zA-Z0-9_])?$", label))


def parse_ip_address(value: str) -> Optional[IPAddress]:
    """Parse an IPv4 or IPv6 address, None if the value is not one."""
    if not value or not isinstance(value, str):
        return None

    try:
        return ipaddress.ip_address(value.strip())
    except ValueError:
        return None


def sanitize_host(host: str) -> str:
    """Normalize a configured host label: trim whitespace and dots, lowercase."""
    if not host:
        return host

    host = host.strip().strip(".")
    if host in SPECIAL_HOSTS:
        return host
    return host.lower()
