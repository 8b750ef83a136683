"""
Data model for the netcup DNS API.

Zones, records and credentials as exchanged with the provider. Payload
types are pydantic models whose aliases carry the wire names; ``from_dict``
and ``to_dict`` translate between the wire and the model.
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    field_serializer,
    field_validator,
)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

U32_MAX = 2**32 - 1


def _quoted_number(value: Any) -> Any:
    # The provider quotes its numbers; only plain ASCII digits are accepted.
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    if isinstance(value, str):
        value = value.strip()
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"must be an unsigned number, got {value!r}")
    return value


QuotedU32 = Annotated[int, BeforeValidator(_quoted_number), Field(ge=0, le=U32_MAX)]


def parse_destination(value: str) -> Union[IPAddress, str]:
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return value


def _optional_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (dict, list, bool)):
        raise ValueError(f"must be text, got {type(value).__name__}")
    return str(value)


@dataclass(frozen=True)
class Credentials:
    customer_number: str
    api_key: str
    api_password: str = field(repr=False)


class RecordType(Enum):
    A = "A"
    AAAA = "AAAA"
    OTHER = "OTHER"

    @classmethod
    def from_wire(cls, value: str) -> "RecordType":
        if value == "A":
            return cls.A
        if value == "AAAA":
            return cls.AAAA
        return cls.OTHER

    @classmethod
    def for_address(cls, address: IPAddress) -> "RecordType":
        return cls.A if address.version == 4 else cls.AAAA


class WireModel(BaseModel):
    """Base for payloads; constructed by field name or by wire alias."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Zone(WireModel):
    """DNS zone settings as returned by infoDnsZone."""

    name: str
    ttl: QuotedU32
    serial: QuotedU32
    refresh: QuotedU32
    retry: QuotedU32
    expire: QuotedU32
    dnssec_status: StrictBool = Field(alias="dnssecstatus")

    @field_serializer("ttl", "serial", "refresh", "retry", "expire")
    def _timer_as_string(self, value: int) -> str:
        # The provider hands the timers out as strings and accepts them back that way.
        return str(value)

    def with_ttl(self, ttl: int) -> "Zone":
        return self.model_copy(update={"ttl": ttl})


class DnsRecord(WireModel):
    """A single DNS record of a zone.

    ``type_name`` keeps the provider's type string so records of
    unmanaged types (MX, TXT, CNAME, ...) survive a round trip untouched.
    """

    host: str = Field(alias="hostname")
    type_name: str = Field(alias="type")
    destination: Union[IPAddress, str]
    id: Optional[str] = None
    priority: Optional[str] = None
    delete_record: Optional[StrictBool] = Field(default=None, alias="deleterecord")
    state: Optional[str] = None

    @field_validator("destination", mode="before")
    @classmethod
    def _parse_destination(cls, value):
        if isinstance(value, str):
            return parse_destination(value)
        return value

    @field_validator("id", "priority", "state", mode="before")
    @classmethod
    def _empty_as_none(cls, value):
        return _optional_text(value)

    @field_serializer("destination")
    def _destination_as_string(self, value) -> str:
        return str(value)

    @classmethod
    def for_address(cls, host: str, address: IPAddress) -> "DnsRecord":
        """Synthesize a not yet created record pointing ``host`` at ``address``."""
        return cls(
            host=host,
            type_name=RecordType.for_address(address).value,
            destination=address,
        )

    @property
    def record_type(self) -> RecordType:
        return RecordType.from_wire(self.type_name)

    @property
    def address(self) -> Optional[IPAddress]:
        if isinstance(self.destination, str):
            return None
        return self.destination

    def with_destination(self, address: IPAddress) -> "DnsRecord":
        return self.model_copy(update={"destination": address})


class RecordSet(WireModel):
    """Payload of infoDnsRecords and updateDnsRecords."""

    records: List[DnsRecord] = Field(alias="dnsrecords")


class LoginData(WireModel):
    api_session_id: str = Field(default="", alias="apisessionid")

    @field_validator("api_session_id", mode="before")
    @classmethod
    def _missing_as_empty(cls, value):
        return "" if value is None else value


@dataclass(frozen=True)
class DnsEntry:
    """One configured domain and the subdomains managed within it."""

    domain: str
    subdomains: List[str] = field(default_factory=list)
