#!/usr/bin/env python3
"""
Test suite for the netcup API layer

Covers the envelope codec, the HTTP transport and the session client.
"""

import ipaddress
import json
import unittest
from unittest.mock import Mock, patch

import dns.exception
import dns.resolver
import requests

from netcup_ddns.core.exceptions import (
    DecodeFailure,
    LoginFailure,
    LogoutFailure,
    RateLimited,
    RecordsNotFound,
    RecordsRejected,
    SessionIdMissing,
    TransportFailure,
    ZoneNotFound,
    ZoneRejected,
)
from netcup_ddns.core.models import Credentials, DnsRecord, LoginData, RecordSet, RecordType, Zone
from netcup_ddns.providers.envelope import (
    Action,
    Status,
    StatusCode,
    decode_response,
    encode_request,
)
from netcup_ddns.providers.netcup_client import AuthenticatedClient, UnauthenticatedClient
from netcup_ddns.providers.public_ip import discover_public_addresses, lookup_address
from netcup_ddns.providers.transport import JSONTransport

ZONE_DATA = {
    "name": "example.com",
    "ttl": "86400",
    "serial": "2022071101",
    "refresh": "28800",
    "retry": "7200",
    "expire": "1209600",
    "dnssecstatus": False,
}

RECORDS_DATA = {
    "dnsrecords": [
        {
            "id": "1001",
            "hostname": "www",
            "type": "A",
            "priority": "0",
            "destination": "5.6.7.8",
            "deleterecord": False,
            "state": "yes",
        },
        {
            "id": "1002",
            "hostname": "@",
            "type": "MX",
            "priority": "10",
            "destination": "mail.example.com",
            "deleterecord": False,
            "state": "yes",
        },
    ]
}


def envelope(
    action="infoDnsZone",
    statuscode=2000,
    status="success",
    responsedata="",
    shortmessage="Request successful",
    longmessage="The request was successful.",
):
    return json.dumps(
        {
            "serverrequestid": "SUPERSECRETSERVERREQUESTID",
            "clientrequestid": "",
            "action": action,
            "status": status,
            "statuscode": statuscode,
            "shortmessage": shortmessage,
            "longmessage": longmessage,
            "responsedata": responsedata,
        }
    )


class FakeTransport:
    """Replays canned response bodies and records every request."""

    def __init__(self, *bodies):
        self.bodies = list(bodies)
        self.requests = []

    def post(self, url, payload):
        self.requests.append(payload)
        return self.bodies.pop(0)


class TestEnvelopeCodec(unittest.TestCase):
    """Test request encoding and response decoding."""

    def test_encode_request(self):
        request = encode_request(Action.INFO_DNS_RECORDS, {"domainname": "example.com"})
        self.assertEqual(
            request, {"action": "infoDnsRecords", "param": {"domainname": "example.com"}}
        )

    def test_action_wire_names(self):
        self.assertEqual(
            [action.value for action in Action],
            [
                "login",
                "logout",
                "infoDnsZone",
                "updateDnsZone",
                "infoDnsRecords",
                "updateDnsRecords",
            ],
        )

    def test_decode_successful_zone(self):
        response = decode_response(envelope(responsedata=ZONE_DATA), Zone)

        self.assertEqual(response.server_request_id, "SUPERSECRETSERVERREQUESTID")
        self.assertIsNone(response.client_request_id)
        self.assertEqual(response.action, Action.INFO_DNS_ZONE)
        self.assertEqual(response.status, Status.SUCCESS)
        self.assertEqual(response.status_code, StatusCode.SUCCESS)
        self.assertTrue(response.is_success)
        self.assertEqual(
            response.response_data,
            Zone(
                name="example.com",
                ttl=86400,
                serial=2022071101,
                refresh=28800,
                retry=7200,
                expire=1209600,
                dnssec_status=False,
            ),
        )

    def test_decode_generic_error_has_no_payload(self):
        response = decode_response(
            envelope(
                statuscode=4001,
                status="error",
                shortmessage="Api session id in invalid format",
                longmessage="The session id is not in a valid format.",
            ),
            Zone,
        )

        self.assertEqual(response.status, Status.ERROR)
        self.assertEqual(response.status_code, StatusCode.GENERIC_ERROR)
        self.assertEqual(response.short_message, "Api session id in invalid format")
        self.assertEqual(response.long_message, "The session id is not in a valid format.")
        self.assertIsNone(response.response_data)

    def test_decode_validation_error_without_action(self):
        response = decode_response(
            envelope(action="", statuscode=4013, status="error"), LoginData
        )

        self.assertIsNone(response.action)
        self.assertEqual(response.status_code, StatusCode.VALIDATION_ERROR)
        self.assertIsNone(response.response_data)

    def test_error_response_ignores_payload_content(self):
        response = decode_response(
            envelope(statuscode=4001, status="error", responsedata=ZONE_DATA), Zone
        )
        self.assertIsNone(response.response_data)

    def test_empty_string_payload_is_none(self):
        response = decode_response(envelope(action="logout"), LoginData)
        self.assertIsNone(response.response_data)

    def test_action_without_payload_type(self):
        response = decode_response(envelope(action="logout", responsedata={"x": 1}))
        self.assertIsNone(response.response_data)

    def test_unknown_status_code_fails_closed(self):
        for code in (5000, 2001, "abc", None, True):
            with self.subTest(code=code):
                with self.assertRaises(DecodeFailure):
                    decode_response(envelope(statuscode=code), Zone)

    def test_status_code_as_string(self):
        response = decode_response(envelope(statuscode="2000", responsedata=ZONE_DATA), Zone)
        self.assertEqual(response.status_code, StatusCode.SUCCESS)

    def test_non_numeric_zone_field(self):
        data = dict(ZONE_DATA, ttl="one day")
        with self.assertRaises(DecodeFailure):
            decode_response(envelope(responsedata=data), Zone)

    def test_missing_zone_field(self):
        data = dict(ZONE_DATA)
        del data["serial"]
        with self.assertRaises(DecodeFailure):
            decode_response(envelope(responsedata=data), Zone)

    def test_payload_shape_mismatch(self):
        with self.assertRaises(DecodeFailure):
            decode_response(envelope(responsedata=["not", "an", "object"]), Zone)
        with self.assertRaises(DecodeFailure):
            decode_response(envelope(responsedata="garbage"), Zone)

    def test_invalid_json(self):
        with self.assertRaises(DecodeFailure):
            decode_response("<html>Bad Gateway</html>", Zone)

    def test_missing_envelope_fields(self):
        with self.assertRaises(DecodeFailure):
            decode_response(json.dumps({"status": "success", "statuscode": 2000}), Zone)

    def test_unknown_status(self):
        with self.assertRaises(DecodeFailure):
            decode_response(envelope(status="exploded"), Zone)

    def test_decode_records(self):
        response = decode_response(
            envelope(action="infoDnsRecords", responsedata=RECORDS_DATA), RecordSet
        )
        www, mx = response.response_data.records

        self.assertEqual(www.id, "1001")
        self.assertEqual(www.record_type, RecordType.A)
        self.assertEqual(www.destination, ipaddress.ip_address("5.6.7.8"))
        self.assertEqual(mx.record_type, RecordType.OTHER)
        self.assertEqual(mx.type_name, "MX")
        self.assertEqual(mx.destination, "mail.example.com")

    def test_record_item_not_an_object(self):
        for item in ("x", 42, None, ["www"]):
            with self.subTest(item=item):
                with self.assertRaises(DecodeFailure):
                    decode_response(
                        envelope(action="infoDnsRecords", responsedata={"dnsrecords": [item]}),
                        RecordSet,
                    )

    def test_records_not_a_list(self):
        with self.assertRaises(DecodeFailure):
            decode_response(
                envelope(action="infoDnsRecords", responsedata={"dnsrecords": "www"}),
                RecordSet,
            )


class TestModels(unittest.TestCase):
    """Test the wire representation of zones and records."""

    def test_zone_round_trip_keeps_wire_names(self):
        zone = Zone.from_dict(ZONE_DATA)
        self.assertEqual(zone.to_dict(), ZONE_DATA)

    def test_zone_with_ttl(self):
        zone = Zone.from_dict(ZONE_DATA).with_ttl(300)
        self.assertEqual(zone.ttl, 300)
        self.assertEqual(zone.serial, 2022071101)

    def test_zone_accepts_plain_integers(self):
        zone = Zone.from_dict(dict(ZONE_DATA, ttl=600))
        self.assertEqual(zone.ttl, 600)

    def test_zone_rejects_malformed_numbers(self):
        for ttl in ("-300", "8_6400", "+300", "3.5", True, -1, 2**32):
            with self.subTest(ttl=ttl):
                with self.assertRaises(DecodeFailure):
                    decode_response(envelope(responsedata=dict(ZONE_DATA, ttl=ttl)), Zone)

    def test_zone_dnssec_status_must_be_boolean(self):
        with self.assertRaises(DecodeFailure):
            decode_response(envelope(responsedata=dict(ZONE_DATA, dnssecstatus="no")), Zone)

    def test_new_record_has_no_id(self):
        record = DnsRecord.for_address("www", ipaddress.ip_address("2001:db8::1"))
        self.assertEqual(
            record.to_dict(),
            {"hostname": "www", "type": "AAAA", "destination": "2001:db8::1"},
        )

    def test_credentials_hide_password(self):
        credentials = Credentials("12345", "key", "secret")
        self.assertNotIn("secret", repr(credentials))


class TestJSONTransport(unittest.TestCase):
    """Test the HTTP transport."""

    def setUp(self):
        self.session = Mock()
        self.transport = JSONTransport(timeout=5, session=self.session)

    def test_post_returns_body(self):
        self.session.post.return_value = Mock(ok=True, status_code=200, text="{}")

        body = self.transport.post("https://api.example", {"action": "login"})

        self.assertEqual(body, "{}")
        self.session.post.assert_called_once_with(
            "https://api.example", json={"action": "login"}, timeout=5
        )

    def test_http_error_status(self):
        self.session.post.return_value = Mock(ok=False, status_code=502, text="")
        with self.assertRaises(TransportFailure):
            self.transport.post("https://api.example", {"action": "login"})

    def test_network_error(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(TransportFailure):
            self.transport.post("https://api.example", {"action": "login"})


class TestSessionClient(unittest.TestCase):
    """Test the login/logout lifecycle and the authenticated calls."""

    def setUp(self):
        self.credentials = Credentials("12345", "APIKEY", "APIPASSWORD")

    def login(self, *bodies):
        transport = FakeTransport(
            envelope(action="login", responsedata={"apisessionid": "SESSION"}), *bodies
        )
        client = UnauthenticatedClient(self.credentials, "https://api.example", transport)
        return client.login(), transport

    def test_unauthenticated_client_only_logs_in(self):
        client = UnauthenticatedClient(self.credentials, "https://api.example", FakeTransport())
        for name in ("read_zone", "write_zone", "read_records", "write_records", "logout"):
            with self.subTest(name=name):
                self.assertFalse(hasattr(client, name))

    def test_login_success(self):
        session, transport = self.login()

        self.assertIsInstance(session, AuthenticatedClient)
        self.assertEqual(
            transport.requests[0],
            {
                "action": "login",
                "param": {
                    "customernumber": "12345",
                    "apikey": "APIKEY",
                    "apipassword": "APIPASSWORD",
                },
            },
        )

    def test_login_bad_credentials(self):
        transport = FakeTransport(envelope(action="login", statuscode=4001, status="error"))
        client = UnauthenticatedClient(self.credentials, "https://api.example", transport)
        with self.assertRaises(LoginFailure):
            client.login()

    def test_login_rate_limited_keeps_long_message(self):
        message = "More than 180 requests per minute. Please wait and retry later."
        transport = FakeTransport(
            envelope(
                action="",
                statuscode=4013,
                status="error",
                shortmessage="Validation Error.",
                longmessage=message,
            )
        )
        client = UnauthenticatedClient(self.credentials, "https://api.example", transport)

        with self.assertRaises(RateLimited) as ctx:
            client.login()

        self.assertEqual(ctx.exception.long_message, message)
        self.assertIn(message, str(ctx.exception))

    def test_login_without_session_id(self):
        for responsedata in ("", {"apisessionid": ""}, {}):
            with self.subTest(responsedata=responsedata):
                transport = FakeTransport(envelope(action="login", responsedata=responsedata))
                client = UnauthenticatedClient(self.credentials, "https://api.example", transport)
                with self.assertRaises(SessionIdMissing):
                    client.login()

    def test_read_zone(self):
        session, transport = self.login(envelope(responsedata=ZONE_DATA))

        zone = session.read_zone("example.com")

        self.assertEqual(zone.ttl, 86400)
        self.assertEqual(
            transport.requests[1],
            {
                "action": "infoDnsZone",
                "param": {
                    "customernumber": "12345",
                    "apikey": "APIKEY",
                    "apisessionid": "SESSION",
                    "domainname": "example.com",
                },
            },
        )

    def test_read_zone_not_found(self):
        session, _ = self.login(envelope(statuscode=4001, status="error"))
        with self.assertRaises(ZoneNotFound) as ctx:
            session.read_zone("example.com")
        self.assertEqual(ctx.exception.domain, "example.com")

    def test_read_zone_rejected(self):
        session, _ = self.login(envelope(action="", statuscode=4013, status="error"))
        with self.assertRaises(ZoneRejected) as ctx:
            session.read_zone("example..com")
        self.assertEqual(ctx.exception.domain, "example..com")

    def test_read_zone_success_without_data(self):
        session, _ = self.login(envelope(responsedata=""))
        with self.assertRaises(DecodeFailure):
            session.read_zone("example.com")

    def test_write_zone(self):
        zone = Zone.from_dict(ZONE_DATA).with_ttl(300)
        session, transport = self.login(
            envelope(action="updateDnsZone", responsedata=zone.to_dict())
        )

        updated = session.write_zone("example.com", zone)

        self.assertEqual(updated.ttl, 300)
        param = transport.requests[1]["param"]
        self.assertEqual(transport.requests[1]["action"], "updateDnsZone")
        self.assertEqual(param["dnszone"]["ttl"], "300")
        self.assertEqual(param["apisessionid"], "SESSION")

    def test_read_records(self):
        session, _ = self.login(envelope(action="infoDnsRecords", responsedata=RECORDS_DATA))

        records = session.read_records("example.com")

        self.assertEqual([r.host for r in records], ["www", "@"])

    def test_read_records_failures(self):
        session, _ = self.login(
            envelope(action="infoDnsRecords", statuscode=4001, status="error"),
            envelope(action="infoDnsRecords", statuscode=4013, status="error"),
        )
        with self.assertRaises(RecordsNotFound):
            session.read_records("example.com")
        with self.assertRaises(RecordsRejected):
            session.read_records("example.com")

    def test_write_records(self):
        record = DnsRecord.for_address("www", ipaddress.ip_address("1.2.3.4"))
        session, transport = self.login(
            envelope(action="updateDnsRecords", responsedata=RECORDS_DATA)
        )

        self.assertIsNone(session.write_records("example.com", [record]))

        param = transport.requests[1]["param"]
        self.assertEqual(transport.requests[1]["action"], "updateDnsRecords")
        self.assertEqual(
            param["dnsrecordset"],
            {"dnsrecords": [{"hostname": "www", "type": "A", "destination": "1.2.3.4"}]},
        )

    def test_logout(self):
        session, transport = self.login(envelope(action="logout"))

        session.logout()

        self.assertEqual(transport.requests[1]["action"], "logout")
        self.assertEqual(transport.requests[1]["param"]["apisessionid"], "SESSION")
        self.assertNotIn("apipassword", transport.requests[1]["param"])

    def test_logout_failure(self):
        session, _ = self.login(envelope(action="logout", statuscode=4001, status="error"))
        with self.assertRaises(LogoutFailure):
            session.logout()

    def test_calls_after_logout_fail(self):
        session, transport = self.login(envelope(action="logout"))
        session.logout()

        with self.assertRaises(SessionIdMissing):
            session.read_zone("example.com")
        with self.assertRaises(SessionIdMissing):
            session.logout()
        self.assertEqual(len(transport.requests), 2)


def dns_answer(text):
    return Mock(**{"to_text.return_value": text})


class TestPublicIPDiscovery(unittest.TestCase):
    """Test the concurrent public address lookup."""

    def resolve(self, answers):
        def side_effect(name, record_type):
            self.assertEqual(name, "myip.opendns.com")
            result = answers[record_type]
            if isinstance(result, Exception):
                raise result
            return [dns_answer(text) for text in result]

        return patch.object(dns.resolver.Resolver, "resolve", side_effect=side_effect)

    def test_both_families_ipv4_first(self):
        with self.resolve({"A": ["1.2.3.4", "5.6.7.8"], "AAAA": ["2001:db8::1"]}):
            addresses = discover_public_addresses(timeout=1)

        self.assertEqual(
            addresses,
            [ipaddress.ip_address("1.2.3.4"), ipaddress.ip_address("2001:db8::1")],
        )

    def test_failed_family_yields_no_address(self):
        with self.resolve({"A": ["1.2.3.4"], "AAAA": dns.exception.Timeout()}):
            addresses = discover_public_addresses(timeout=1)

        self.assertEqual(addresses, [ipaddress.ip_address("1.2.3.4")])

    def test_no_address_discovered(self):
        with self.resolve(
            {"A": dns.resolver.NXDOMAIN(), "AAAA": dns.exception.Timeout()}
        ):
            self.assertEqual(discover_public_addresses(timeout=1), [])

    def test_non_ip_answer_is_skipped(self):
        with self.resolve({"A": ["not-an-ip", "1.2.3.4"]}):
            address = lookup_address("A", ["208.67.222.222"])

        self.assertEqual(address, ipaddress.ip_address("1.2.3.4"))

    def test_answer_of_wrong_family_is_skipped(self):
        with self.resolve({"AAAA": ["1.2.3.4"]}):
            self.assertIsNone(lookup_address("AAAA", ["2620:119:35::35"]))


if __name__ == "__main__":
    unittest.main(verbosity=2)
