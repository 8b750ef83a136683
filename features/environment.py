"""
Behave environment configuration for netcup DDNS acceptance tests.

The netcup endpoint is replaced by an in-memory fake that speaks the same
JSON envelope, so the scenarios exercise the full client and orchestrator.
"""

import json
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SESSION_ID = "SUPERSECRETAPISESSIONID"


class FakeNetcupAPI:
    """In-memory stand-in for the netcup CCP JSON endpoint."""

    def __init__(self, customer_number, api_key, api_password):
        self.customer_number = customer_number
        self.api_key = api_key
        self.api_password = api_password
        self.zones = {}
        self.records = {}
        self.requests = []
        self.rate_limited = False
        self.next_id = 1000

    def add_zone(self, domain, ttl):
        self.zones[domain] = {
            "name": domain,
            "ttl": str(ttl),
            "serial": "2022071101",
            "refresh": "28800",
            "retry": "7200",
            "expire": "1209600",
            "dnssecstatus": False,
        }
        self.records.setdefault(domain, [])

    def add_record(self, domain, host, record_type, destination):
        self.next_id += 1
        self.records[domain].append(
            {
                "id": str(self.next_id),
                "hostname": host,
                "type": record_type,
                "priority": "0",
                "destination": destination,
                "deleterecord": False,
                "state": "yes",
            }
        )

    def actions(self):
        return [request["action"] for request in self.requests]

    def post(self, url, payload):
        self.requests.append(payload)
        action = payload["action"]
        param = payload["param"]
        handler = getattr(self, f"_handle_{action}")
        return json.dumps(handler(action, param))

    def _envelope(self, action, statuscode=2000, responsedata="", message="Request successful"):
        return {
            "serverrequestid": "SERVERREQUESTID",
            "clientrequestid": "",
            "action": action if statuscode != 4013 else "",
            "status": "success" if statuscode == 2000 else "error",
            "statuscode": statuscode,
            "shortmessage": message,
            "longmessage": message,
            "responsedata": responsedata,
        }

    def _authorized(self, param):
        return (
            param.get("customernumber") == self.customer_number
            and param.get("apikey") == self.api_key
            and param.get("apisessionid") == SESSION_ID
        )

    def _handle_login(self, action, param):
        if self.rate_limited:
            return self._envelope(action, 4013, message="More than 180 requests per minute.")
        if (
            param.get("customernumber") != self.customer_number
            or param.get("apikey") != self.api_key
            or param.get("apipassword") != self.api_password
        ):
            return self._envelope(action, 4001, message="Login failed")
        return self._envelope(action, responsedata={"apisessionid": SESSION_ID})

    def _handle_logout(self, action, param):
        if not self._authorized(param):
            return self._envelope(action, 4001, message="Invalid session")
        return self._envelope(action, message="Logout successful")

    def _handle_infoDnsZone(self, action, param):
        zone = self.zones.get(param.get("domainname"))
        if not self._authorized(param) or zone is None:
            return self._envelope(action, 4001, message="DNS zone not found")
        return self._envelope(action, responsedata=zone)

    def _handle_updateDnsZone(self, action, param):
        domain = param.get("domainname")
        if not self._authorized(param) or domain not in self.zones:
            return self._envelope(action, 4001, message="DNS zone not found")
        self.zones[domain] = dict(self.zones[domain], ttl=param["dnszone"]["ttl"])
        return self._envelope(action, responsedata=self.zones[domain])

    def _handle_infoDnsRecords(self, action, param):
        domain = param.get("domainname")
        if not self._authorized(param) or domain not in self.records:
            return self._envelope(action, 4001, message="DNS records not found")
        return self._envelope(action, responsedata={"dnsrecords": self.records[domain]})

    def _handle_updateDnsRecords(self, action, param):
        domain = param.get("domainname")
        if not self._authorized(param) or domain not in self.records:
            return self._envelope(action, 4001, message="DNS records not found")

        for record in param["dnsrecordset"]["dnsrecords"]:
            if "id" in record:
                existing = [r for r in self.records[domain] if r["id"] == record["id"]]
                existing[0].update(record)
            else:
                self.add_record(domain, record["hostname"], record["type"], record["destination"])

        return self._envelope(action, responsedata={"dnsrecords": self.records[domain]})


def before_all(context):
    """Set up test environment before all tests."""
    context.customer_number = "12345"
    context.api_key = "APIKEY"
    context.api_password = "APIPASSWORD"
    logger.info("Test environment setup complete")


def before_scenario(context, scenario):
    """Set up each test scenario."""
    context.api = FakeNetcupAPI(
        context.customer_number, context.api_key, context.api_password
    )
    context.addresses = []
    context.domains = []
    context.ttl = None
    context.api_password_used = context.api_password
    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Clean up after each test scenario."""
    logger.info(f"Completed scenario: {scenario.name}")
