"""
Exceptions - Error taxonomy for the netcup DNS updater

Exception Hierarchy:
    NetcupError (Base)
    ├─ TransportFailure       - HTTP/network failure sending or receiving
    ├─ DecodeFailure          - Malformed envelope or payload, unknown status code
    ├─ LoginFailure           - Provider rejected the credentials
    ├─ LogoutFailure          - Provider refused to end the session
    ├─ RateLimited            - Provider validation error (mostly request limits)
    ├─ SessionIdMissing       - Successful login without a session id
    ├─ ZoneFailure            - DNS zone call failed for a domain
    │  ├─ ZoneNotFound
    │  └─ ZoneRejected
    ├─ RecordFailure          - DNS record call failed for a domain
    │  ├─ RecordsNotFound
    │  └─ RecordsRejected
    └─ ReconciliationConflict - More than one record matches a subdomain
"""

from typing import Optional


class NetcupError(Exception):
    """Base exception for all netcup DNS updater errors."""

    def __init__(
        self,
        message: str,
        short_message: Optional[str] = None,
        long_message: Optional[str] = None,
    ):
        self.short_message = short_message
        self.long_message = long_message
        details = [part for part in (short_message, long_message) if part]
        if details:
            message = f"{message} ({' - '.join(details)})"
        super().__init__(message)


class TransportFailure(NetcupError):
    """Sending the request or receiving the response failed."""


class DecodeFailure(NetcupError):
    """The response envelope or its payload had an unexpected shape."""


class LoginFailure(NetcupError):
    """Could not login into the netcup API."""


class LogoutFailure(NetcupError):
    """Could not logout of the netcup API."""


class RateLimited(NetcupError):
    """The provider answered with a validation error."""


class SessionIdMissing(NetcupError):
    """Login succeeded but no API session id was returned."""


class DomainError(NetcupError):
    """Base for failures scoped to a single domain."""

    def __init__(self, domain: str, message: str, **kwargs):
        self.domain = domain
        super().__init__(message, **kwargs)


class ZoneFailure(DomainError):
    pass


class ZoneNotFound(ZoneFailure):
    pass


class ZoneRejected(ZoneFailure):
    pass


class RecordFailure(DomainError):
    pass


class RecordsNotFound(RecordFailure):
    pass


class RecordsRejected(RecordFailure):
    pass


class ReconciliationConflict(DomainError):
    """Several A/AAAA records match one subdomain; manual resolution required."""

    def __init__(self, domain: str, subdomain: str, count: int):
        self.subdomain = subdomain
        self.count = count
        super().__init__(
            domain,
            f"Too many DNS records ({count}) found for '{subdomain}' in {domain}, "
            "please resolve manually",
        )
