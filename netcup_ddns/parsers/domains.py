import logging
from typing import Iterable, List, Union

from ..core.models import DnsEntry
from ..utils.validators import sanitize_host, validate_host_label, validate_zone_name

logger = logging.getLogger(__name__)


class DomainsParser:
    """Parses "domain: sub, sub; other.domain: @" style domain lists."""

    def __init__(self, source: Union[str, Iterable[str]]):
        self.source = source

    def parse(self) -> List[DnsEntry]:
        """Parse and validate every configured domain entry."""
        if isinstance(self.source, str):
            raw_entries = self.source.split(";")
        else:
            raw_entries = list(self.source)

        entries = []
        for raw in raw_entries:
            raw = raw.strip()
            if not raw:
                continue

            entry = self.parse_entry(raw)
            if entry is None:
                continue
            entries.append(entry)

        logger.info(f"Successfully parsed {len(entries)} domain entries")
        return entries

    @staticmethod
    def parse_entry(raw: str) -> Union[DnsEntry, None]:
        domain, _, subdomains = raw.partition(":")
        domain = domain.strip().lower()

        if not validate_zone_name(domain):
            logger.warning(f"Invalid domain '{domain}', skipping")
            return None

        hosts = []
        for host in subdomains.split(","):
            host = sanitize_host(host)
            if not host:
                continue
            if not validate_host_label(host):
                logger.warning(f"Invalid subdomain '{host}' for {domain}, skipping")
                continue
            if host not in hosts:
                hosts.append(host)

        if not hosts:
            logger.warning(f"No subdomains configured for {domain}")

        return DnsEntry(domain=domain, subdomains=hosts)
