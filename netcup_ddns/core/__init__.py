"""
Core DNS management functionality.

This package contains the data model, the reconciliation logic and the
orchestration of an update run.
"""

from .dns_manager import DNSManager
from .record_manager import RecordManager

__all__ = ["DNSManager", "RecordManager"]
