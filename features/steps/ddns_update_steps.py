"""
Step definitions for netcup DDNS acceptance tests.
"""

import ipaddress

from behave import given, when, then

from netcup_ddns.core.dns_manager import DNSManager
from netcup_ddns.core.models import Credentials
from netcup_ddns.providers.netcup_client import UnauthenticatedClient


@given('the netcup API has a zone "{domain}" with TTL {ttl:d}')
def step_impl(context, domain, ttl):
    """Register a zone with the fake netcup API."""
    context.api.add_zone(domain, ttl)


@given('the host has the public address "{address}"')
def step_impl(context, address):
    """Add a discovered public address."""
    context.addresses.append(ipaddress.ip_address(address))


@given('"{domain}" has a "{record_type}" record for "{host}" pointing to "{destination}"')
def step_impl(context, domain, record_type, host, destination):
    """Create an existing DNS record."""
    context.api.add_record(domain, host, record_type, destination)


@given('I manage "{domains}"')
def step_impl(context, domains):
    """Configure the managed domains."""
    context.domains = domains


@given("I configure a TTL of {ttl:d}")
def step_impl(context, ttl):
    """Configure the desired zone TTL."""
    context.ttl = ttl


@given('I use the API password "{password}"')
def step_impl(context, password):
    """Use different credentials for the login."""
    context.api_password_used = password


@given("the netcup API is rate limiting")
def step_impl(context):
    """Make the fake API answer every login with a validation error."""
    context.api.rate_limited = True


def _run(context, dry_run):
    credentials = Credentials(
        context.customer_number, context.api_key, context.api_password_used
    )
    client = UnauthenticatedClient(credentials, "https://netcup.invalid", context.api)
    config = {"domains": context.domains, "ttl": context.ttl, "logout_delay": 0}
    manager = DNSManager(config, client=client, discover_addresses=lambda: context.addresses)
    context.result = manager.run(dry_run=dry_run)


@when("I run the DNS updater")
def step_impl(context):
    """Run one update cycle."""
    _run(context, dry_run=False)


@when("I run the DNS updater in dry run mode")
def step_impl(context):
    """Run one update cycle without applying changes."""
    _run(context, dry_run=True)


@then("the run should succeed")
def step_impl(context):
    assert context.result is True, "DNS update run failed"


@then("the run should fail")
def step_impl(context):
    assert context.result is False, "DNS update run should have failed"


@then('"{domain}" should have a "{record_type}" record for "{host}" pointing to "{destination}"')
def step_impl(context, domain, record_type, host, destination):
    """Verify a record exists in the fake zone."""
    matches = [
        r
        for r in context.api.records[domain]
        if r["hostname"] == host and r["type"] == record_type
    ]
    assert len(matches) == 1, f"Expected one {record_type} record for {host}, got {matches}"
    assert matches[0]["destination"] == destination, (
        f"{host} points to {matches[0]['destination']}, expected {destination}"
    )


@then('"{domain}" should have {count:d} records')
def step_impl(context, domain, count):
    actual = len(context.api.records[domain])
    assert actual == count, f"Expected {count} records in {domain}, got {actual}"


@then('the zone "{domain}" should have TTL {ttl:d}')
def step_impl(context, domain, ttl):
    actual = context.api.zones[domain]["ttl"]
    assert actual == str(ttl), f"Zone {domain} has TTL {actual}, expected {ttl}"


@then("no records should have been written")
def step_impl(context):
    actions = context.api.actions()
    assert "updateDnsRecords" not in actions, f"Unexpected record update: {actions}"


@then("the session should be closed")
def step_impl(context):
    actions = context.api.actions()
    assert actions[-1] == "logout", f"Last action was {actions[-1]}, expected logout"
    assert actions.count("logout") == 1


@then("only a login should have been attempted")
def step_impl(context):
    actions = context.api.actions()
    assert actions == ["login"], f"Unexpected actions: {actions}"
