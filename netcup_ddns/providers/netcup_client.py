"""
netcup session client.

Two client shapes model the session lifecycle: an UnauthenticatedClient can
only ``login()``, which is the sole way to obtain an AuthenticatedClient. Zone,
record and logout calls exist only on the authenticated shape.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from ..core.exceptions import (
    DecodeFailure,
    LoginFailure,
    LogoutFailure,
    RateLimited,
    RecordsNotFound,
    RecordsRejected,
    SessionIdMissing,
    ZoneNotFound,
    ZoneRejected,
)
from ..core.models import Credentials, DnsRecord, LoginData, RecordSet, Zone
from .envelope import Action, Response, StatusCode, decode_response, encode_request
from .transport import DEFAULT_API_URL, JSONTransport

logger = logging.getLogger(__name__)


class _BaseClient:
    """Shared request plumbing: encode, send once, decode."""

    def __init__(
        self,
        credentials: Credentials,
        api_url: str = DEFAULT_API_URL,
        transport: Optional[JSONTransport] = None,
    ):
        self.credentials = credentials
        self.api_url = api_url
        self.transport = transport or JSONTransport()

    def _request(
        self, action: Action, params: Dict[str, Any], payload_type: Optional[Type] = None
    ) -> Response:
        body = self.transport.post(self.api_url, encode_request(action, params))
        response = decode_response(body, payload_type)
        logger.debug(
            f"{action.value}: status={response.status.value} "
            f"code={response.status_code.value} message={response.short_message!r}"
        )
        return response

    def _credential_params(self) -> Dict[str, Any]:
        return {
            "customernumber": self.credentials.customer_number,
            "apikey": self.credentials.api_key,
        }


class UnauthenticatedClient(_BaseClient):
    """A client holding credentials but no session."""

    def login(self) -> "AuthenticatedClient":
        """Open an API session.

        Raises:
            LoginFailure: The provider rejected the credentials
            RateLimited: The provider answered with a validation error
            SessionIdMissing: The login succeeded without a session id
        """
        params = self._credential_params()
        params["apipassword"] = self.credentials.api_password

        response = self._request(Action.LOGIN, params, LoginData)

        if response.status_code is StatusCode.GENERIC_ERROR:
            raise LoginFailure(
                "Could not login into the netcup API",
                short_message=response.short_message,
                long_message=response.long_message,
            )
        if response.status_code is StatusCode.VALIDATION_ERROR:
            raise RateLimited(
                "Login was rejected, maybe too many requests",
                short_message=response.short_message,
                long_message=response.long_message,
            )

        if response.response_data is None or not response.response_data.api_session_id:
            raise SessionIdMissing(
                "Failed to retrieve the API session id",
                short_message=response.short_message,
                long_message=response.long_message,
            )

        logger.info("Login successful")
        logger.debug(f"API session id: {response.response_data.api_session_id}")
        return AuthenticatedClient(
            self.credentials,
            self.api_url,
            self.transport,
            response.response_data.api_session_id,
        )


class AuthenticatedClient(_BaseClient):
    """A client bound to an open API session.

    Only created by UnauthenticatedClient.login().
    """

    def __init__(
        self,
        credentials: Credentials,
        api_url: str,
        transport: JSONTransport,
        api_session_id: str,
    ):
        super().__init__(credentials, api_url, transport)
        self._api_session_id = api_session_id

    def _session_params(self, **extra) -> Dict[str, Any]:
        if not self._api_session_id:
            raise SessionIdMissing("The API session was closed by logout")
        params = self._credential_params()
        params["apisessionid"] = self._api_session_id
        params.update(extra)
        return params

    def logout(self) -> None:
        """End the API session. The client must not be used afterwards."""
        response = self._request(Action.LOGOUT, self._session_params())

        if response.status_code is StatusCode.GENERIC_ERROR:
            raise LogoutFailure(
                "Could not logout of the netcup API",
                short_message=response.short_message,
                long_message=response.long_message,
            )
        if response.status_code is StatusCode.VALIDATION_ERROR:
            raise RateLimited(
                "Logout was rejected, maybe too many requests",
                short_message=response.short_message,
                long_message=response.long_message,
            )

        self._api_session_id = None
        logger.info("Logout successful")

    def read_zone(self, domain: str) -> Zone:
        response = self._request(
            Action.INFO_DNS_ZONE, self._session_params(domainname=domain), Zone
        )
        self._check_zone_response(response, domain, "read")
        return self._require_payload(response, domain)

    def write_zone(self, domain: str, zone: Zone) -> Zone:
        response = self._request(
            Action.UPDATE_DNS_ZONE,
            self._session_params(domainname=domain, dnszone=zone.to_dict()),
            Zone,
        )
        self._check_zone_response(response, domain, "update")
        return self._require_payload(response, domain)

    def read_records(self, domain: str) -> List[DnsRecord]:
        response = self._request(
            Action.INFO_DNS_RECORDS, self._session_params(domainname=domain), RecordSet
        )
        self._check_records_response(response, domain, "read")
        return self._require_payload(response, domain).records

    def write_records(self, domain: str, records: List[DnsRecord]) -> None:
        record_set = RecordSet(records=list(records))
        response = self._request(
            Action.UPDATE_DNS_RECORDS,
            self._session_params(domainname=domain, dnsrecordset=record_set.to_dict()),
        )
        self._check_records_response(response, domain, "update")
        logger.info(f"Updated {len(records)} DNS records for {domain}")

    def _check_zone_response(self, response: Response, domain: str, operation: str):
        messages = {
            "short_message": response.short_message,
            "long_message": response.long_message,
        }
        if response.status_code is StatusCode.GENERIC_ERROR:
            raise ZoneNotFound(
                domain,
                f"Failed to {operation} DNS zone {domain}: not found or not authorized",
                **messages,
            )
        if response.status_code is StatusCode.VALIDATION_ERROR:
            raise ZoneRejected(
                domain, f"Failed to {operation} DNS zone {domain}: rejected", **messages
            )

    def _check_records_response(self, response: Response, domain: str, operation: str):
        messages = {
            "short_message": response.short_message,
            "long_message": response.long_message,
        }
        if response.status_code is StatusCode.GENERIC_ERROR:
            raise RecordsNotFound(
                domain,
                f"Failed to {operation} DNS records of {domain}: not found or not authorized",
                **messages,
            )
        if response.status_code is StatusCode.VALIDATION_ERROR:
            raise RecordsRejected(
                domain, f"Failed to {operation} DNS records of {domain}: rejected", **messages
            )

    @staticmethod
    def _require_payload(response: Response, domain: str):
        if response.response_data is None:
            raise DecodeFailure(
                f"Successful '{response.action.value if response.action else 'unknown'}' "
                f"response for {domain} carried no data"
            )
        return response.response_data
