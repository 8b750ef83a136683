"""
DNS Manager - Dynamic DNS updates for netcup hosted domains

Logs into the netcup API, discovers the host's public addresses and
reconciles the A/AAAA records of every configured subdomain, then logs
out again. Each domain is handled on its own; a failing domain is logged
and skipped.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from ..parsers.domains import DomainsParser
from ..providers.netcup_client import AuthenticatedClient, UnauthenticatedClient
from ..providers.public_ip import discover_public_addresses
from ..providers.transport import DEFAULT_API_URL, DEFAULT_TIMEOUT, JSONTransport
from .exceptions import (
    DecodeFailure,
    NetcupError,
    ReconciliationConflict,
    RecordFailure,
    ZoneFailure,
)
from .models import Credentials, DnsEntry, IPAddress, Zone
from .record_manager import RecordManager

console = Console()
logger = logging.getLogger(__name__)

LOGOUT_DELAY = 2


class DNSManager:
    """Main DNS management class that orchestrates the entire process."""

    def __init__(
        self,
        config: Dict,
        client: Optional[UnauthenticatedClient] = None,
        discover_addresses: Optional[Callable[[], List[IPAddress]]] = None,
    ):
        """Initialize the DNS manager with configuration."""
        self.config = config
        self.desired_ttl = config.get("ttl")
        self.logout_delay = config.get("logout_delay", LOGOUT_DELAY)
        self.entries = self._load_entries(config.get("domains", []))
        self.client = client or self._create_client()
        self.discover_addresses = discover_addresses or (
            lambda: discover_public_addresses(config.get("ip_timeout", 5.0))
        )
        self.record_manager = RecordManager()
        self.results = {}

    def _create_client(self) -> UnauthenticatedClient:
        credentials = Credentials(
            customer_number=str(self.config["customer_number"]),
            api_key=self.config["api_key"],
            api_password=self.config["api_password"],
        )
        transport = JSONTransport(timeout=self.config.get("timeout", DEFAULT_TIMEOUT))
        return UnauthenticatedClient(
            credentials, self.config.get("api_url") or DEFAULT_API_URL, transport
        )

    @staticmethod
    def _load_entries(domains) -> List[DnsEntry]:
        if domains and all(isinstance(entry, DnsEntry) for entry in domains):
            return list(domains)
        return DomainsParser(domains).parse()

    def run(self, dry_run: bool = False, output_file: Optional[str] = None) -> bool:
        """
        Run one update cycle.

        Returns:
            True when every domain was processed, False on any failure
        """
        try:
            session = self.client.login()
        except NetcupError as e:
            logger.error(f"Login failed: {e}")
            console.print(f"[red]Login failed: {e}[/red]")
            return False

        try:
            success = self._process_domains(session, dry_run)
            if dry_run:
                console.print("[yellow]DRY RUN MODE - No changes were applied[/yellow]")
                if output_file:
                    self._save_dry_run_output(output_file)
                    console.print(f"[green]Dry run output saved to: {output_file}[/green]")
        except NetcupError as e:
            logger.error(f"Aborting run: {e}")
            console.print(f"[red]Error: {e}[/red]")
            success = False
        finally:
            time.sleep(self.logout_delay)
            self._logout(session)

        return success

    def _process_domains(self, session: AuthenticatedClient, dry_run: bool) -> bool:
        addresses = self.discover_addresses()
        success = True

        for entry in self.entries:
            logger.info(f"Looking at domain {entry.domain}")
            try:
                if not self._process_domain(session, entry, addresses, dry_run):
                    success = False
            except (ZoneFailure, RecordFailure, DecodeFailure) as e:
                logger.error(f"Skipping {entry.domain}: {e}")
                console.print(f"[red]Failed to update {entry.domain}: {e}[/red]")
                self.results[entry.domain] = {"error": str(e)}
                success = False

        return success

    def _process_domain(
        self,
        session: AuthenticatedClient,
        entry: DnsEntry,
        addresses: List[IPAddress],
        dry_run: bool,
    ) -> bool:
        domain = entry.domain
        success = True

        zone = session.read_zone(domain)
        zone_update = self.record_manager.analyze_zone(zone, self.desired_ttl)
        if zone_update is not None and not dry_run:
            success = self._apply_zone_update(session, domain, zone_update)

        logger.info(f"Getting all DNS records of {domain}")
        records = session.read_records(domain)
        changes = self.record_manager.analyze_changes(records, entry.subdomains, addresses)

        self.results[domain] = {"zone_update": zone_update, "changes": changes}
        self._display_changes_summary(domain, changes, zone, zone_update)

        for conflict in changes["conflicts"]:
            error = ReconciliationConflict(
                domain, conflict["subdomain"], len(conflict["records"])
            )
            logger.error(str(error))

        if dry_run:
            return success

        pending = self.record_manager.pending_records(changes)
        if not pending:
            console.print(
                f"[green]No changes required - {domain} records are up to date[/green]"
            )
            return success

        session.write_records(domain, pending)
        console.print(
            f"[green]Applied {len(pending)} DNS changes to {domain}[/green]"
        )
        return success

    def _apply_zone_update(
        self, session: AuthenticatedClient, domain: str, zone: Zone
    ) -> bool:
        try:
            updated = session.write_zone(domain, zone)
        except ZoneFailure as e:
            logger.error(f"Failed to update DNS zone {domain}: {e}")
            return False
        logger.info(f"Updated DNS zone {domain}, TTL is now {updated.ttl}")
        return True

    def _logout(self, session: AuthenticatedClient):
        try:
            session.logout()
        except NetcupError as e:
            # The provider expires idle sessions on its own.
            logger.error(f"Logout failed: {e}")

    def _display_changes_summary(
        self, domain: str, changes: Dict, zone: Zone, zone_update: Optional[Zone]
    ):
        """Display a summary of planned changes."""
        table = Table(title=f"DNS Changes Summary - {domain}")
        table.add_column("Operation", style="cyan")
        table.add_column("Count", style="magenta")
        table.add_column("Details", style="white")

        if zone_update is not None:
            table.add_row("Zone TTL", "1", f"{zone.ttl} -> {zone_update.ttl}")

        if changes["creates"]:
            table.add_row(
                "Create",
                str(len(changes["creates"])),
                ", ".join(f"{r.host} {r.type_name} {r.destination}" for r in changes["creates"]),
            )

        if changes["updates"]:
            table.add_row(
                "Update",
                str(len(changes["updates"])),
                ", ".join(f"{r.host} {r.type_name} {r.destination}" for r in changes["updates"]),
            )

        if changes["no_changes"]:
            table.add_row(
                "No Change",
                str(len(changes["no_changes"])),
                ", ".join(f"{r.host} {r.type_name}" for r in changes["no_changes"]),
            )

        if changes["conflicts"]:
            table.add_row(
                "Conflict",
                str(len(changes["conflicts"])),
                ", ".join(c["subdomain"] for c in changes["conflicts"]),
            )

        console.print(table)

    def _save_dry_run_output(self, output_file: str):
        """Save dry run output to a file."""
        try:
            with open(output_file, "w") as f:
                f.write("=" * 60 + "\n")
                f.write("NETCUP DDNS - DRY RUN SUMMARY\n")
                f.write("=" * 60 + "\n\n")
                f.write(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")

                for domain, result in self.results.items():
                    f.write(f"DOMAIN: {domain}\n")
                    f.write("-" * 20 + "\n")

                    if "error" in result:
                        f.write(f"  ! {result['error']}\n\n")
                        continue

                    zone_update = result["zone_update"]
                    if zone_update is not None:
                        f.write(f"  ~ TTL -> {zone_update.ttl}\n")

                    changes = result["changes"]
                    for record in changes["creates"]:
                        f.write(f"  + {record.host:<20} {record.type_name:<5} -> {record.destination}\n")
                    for record in changes["updates"]:
                        f.write(f"  ~ {record.host:<20} {record.type_name:<5} -> {record.destination}\n")
                    for record in changes["no_changes"]:
                        f.write(f"  = {record.host:<20} {record.type_name}\n")
                    for conflict in changes["conflicts"]:
                        f.write(f"  ! {conflict['subdomain']:<20} ambiguous, resolve manually\n")
                    f.write("\n")

                f.write("=" * 60 + "\n")
                f.write("END OF DRY RUN SUMMARY\n")
                f.write("=" * 60 + "\n")

            logger.info(f"Dry run output saved to: {output_file}")
        except OSError as e:
            logger.error(f"Failed to save dry run output to {output_file}: {e}")
            console.print(f"[red]Warning: Failed to save dry run output to {output_file}: {e}[/red]")
