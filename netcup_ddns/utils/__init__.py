"""
Utility functions and helpers.

This package contains validation helpers for configured domains, hosts
and addresses.
"""

from .validators import parse_ip_address, validate_host_label, validate_zone_name

__all__ = ["parse_ip_address", "validate_host_label", "validate_zone_name"]
