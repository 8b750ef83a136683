"""
Configuration parsers.
"""

from .domains import DomainsParser

__all__ = ["DomainsParser"]
