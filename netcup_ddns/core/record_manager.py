"""
Record Manager - Core logic for DNS record reconciliation

This module compares the current records of a zone with the host's public
addresses and decides, per managed subdomain, which records to create,
update or leave alone. Records of other types are never touched.
"""

import logging
from typing import Dict, List, Optional

from .models import DnsRecord, IPAddress, RecordType, Zone

logger = logging.getLogger(__name__)

MAX_DYNAMIC_TTL = 300

MANAGED_TYPES = (RecordType.A, RecordType.AAAA)


class RecordManager:
    """Plans zone and record mutations for one domain at a time."""

    def analyze_zone(self, zone: Zone, desired_ttl: Optional[int]) -> Optional[Zone]:
        """
        Decide whether the zone TTL needs adjusting.

        Args:
            zone: Current zone settings
            desired_ttl: Configured TTL, None to leave the TTL alone

        Returns:
            The zone with its new TTL, or None when no update is needed
        """
        if zone.ttl <= MAX_DYNAMIC_TTL:
            return None

        logger.warning(
            f"TTL of {zone.name} is {zone.ttl} and should be {MAX_DYNAMIC_TTL} or less"
        )
        if desired_ttl is None:
            return None

        logger.info(f"Changing TTL of {zone.name} to {desired_ttl}")
        return zone.with_ttl(desired_ttl)

    def analyze_changes(
        self,
        current_records: List[DnsRecord],
        subdomains: List[str],
        addresses: List[IPAddress],
    ) -> Dict:
        """
        Analyze changes between the current records and the public addresses.

        Args:
            current_records: Every record of the zone as returned by the provider
            subdomains: Host labels to manage ("@" for the apex)
            addresses: Discovered public addresses, at most one per family

        Returns:
            Dictionary containing categorized changes
        """
        logger.info("Analyzing DNS record changes...")

        creates = []
        updates = []
        no_changes = []
        conflicts = []
        untouched = []

        for subdomain in subdomains:
            found_records = self._find_managed_records(current_records, subdomain)
            logger.debug(f"Found records for {subdomain!r}: {found_records}")

            if len(found_records) == 0:
                logger.info(f"No DNS record found for {subdomain!r}, creating one")
                for address in addresses:
                    creates.append(DnsRecord.for_address(subdomain, address))
                    logger.info(f"Create needed: {subdomain} -> {address}")

            elif len(found_records) == 1:
                record = found_records[0]
                self._plan_single_record(
                    record, addresses, creates, updates, no_changes, untouched
                )

            else:
                conflicts.append({"subdomain": subdomain, "records": found_records})
                logger.error(
                    f"Too many DNS records ({len(found_records)}) found for "
                    f"{subdomain!r}, please resolve manually"
                )

        total_changes = len(creates) + len(updates)

        changes = {
            "creates": creates,
            "updates": updates,
            "no_changes": no_changes,
            "conflicts": conflicts,
            "untouched": untouched,
            "total_changes": total_changes,
        }

        logger.info(
            f"Change analysis complete: {len(creates)} creates, {len(updates)} updates, "
            f"{len(no_changes)} no changes, {len(conflicts)} conflicts"
        )

        return changes

    def _plan_single_record(
        self,
        record: DnsRecord,
        addresses: List[IPAddress],
        creates: List[DnsRecord],
        updates: List[DnsRecord],
        no_changes: List[DnsRecord],
        untouched: List[DnsRecord],
    ):
        """Update the record with the address of its own family, add the other family."""
        family = 4 if record.record_type is RecordType.A else 6
        matching = [address for address in addresses if address.version == family]
        others = [address for address in addresses if address.version != family]

        if matching:
            address = matching[0]
            if record.address == address:
                no_changes.append(record)
                logger.info(f"No change needed: {record.host} -> {address}")
            else:
                updates.append(record.with_destination(address))
                logger.info(
                    f"Update needed: {record.host} {record.destination} -> {address}"
                )
        else:
            untouched.append(record)
            logger.warning(
                f"No public IPv{family} address found, leaving "
                f"{record.host} {record.type_name} -> {record.destination} untouched"
            )

        for address in others:
            creates.append(DnsRecord.for_address(record.host, address))
            logger.info(f"Create needed: {record.host} -> {address}")

    @staticmethod
    def _find_managed_records(records: List[DnsRecord], subdomain: str) -> List[DnsRecord]:
        return [
            record
            for record in records
            if record.host == subdomain and record.record_type in MANAGED_TYPES
        ]

    @staticmethod
    def pending_records(changes: Dict) -> List[DnsRecord]:
        """Records to send in a single updateDnsRecords call."""
        return list(changes["creates"]) + list(changes["updates"])
