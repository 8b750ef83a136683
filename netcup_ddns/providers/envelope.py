"""
Envelope codec for the netcup JSON API.

Every action shares one request shape ``{"action", "param"}`` and one
response shape. The response payload (``responsedata``) is either an
action-specific object or an empty string meaning "no data".
"""

import logging
from enum import Enum
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from ..core.exceptions import DecodeFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Action(Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    INFO_DNS_ZONE = "infoDnsZone"
    UPDATE_DNS_ZONE = "updateDnsZone"
    INFO_DNS_RECORDS = "infoDnsRecords"
    UPDATE_DNS_RECORDS = "updateDnsRecords"


class Status(Enum):
    ERROR = "error"
    STARTED = "started"
    PENDING = "pending"
    WARNING = "warning"
    SUCCESS = "success"


class StatusCode(Enum):
    SUCCESS = 2000
    GENERIC_ERROR = 4001
    VALIDATION_ERROR = 4013


class Response(BaseModel, Generic[T]):
    """One decoded response. All eight wire fields must be present."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    server_request_id: str = Field(alias="serverrequestid")
    client_request_id: Optional[str] = Field(alias="clientrequestid")
    action: Optional[Action]
    status: Status
    status_code: StatusCode = Field(alias="statuscode")
    short_message: str = Field(alias="shortmessage")
    long_message: Optional[str] = Field(alias="longmessage")
    response_data: Optional[T] = Field(alias="responsedata")

    @field_validator("client_request_id", "long_message", "action", mode="before")
    @classmethod
    def _empty_string_as_none(cls, value):
        return None if value == "" else value

    @field_validator("short_message", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("status_code", mode="before")
    @classmethod
    def _numeric_status_code(cls, value):
        if isinstance(value, bool):
            raise ValueError(f"unrecognized status code {value!r}")
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value

    @field_validator("response_data", mode="before")
    @classmethod
    def _payload_or_none(cls, value, info: ValidationInfo):
        # Only successful responses of actions with a payload type carry data.
        context = info.context or {}
        if not context.get("has_payload", True):
            return None
        if info.data.get("status_code") is not StatusCode.SUCCESS:
            return None
        if value is None or value == "":
            return None
        return value

    @property
    def is_success(self) -> bool:
        return self.status_code is StatusCode.SUCCESS


def encode_request(action: Action, params: Dict[str, Any]) -> Dict[str, Any]:
    """Build the request envelope for ``action``."""
    return {"action": action.value, "param": params}


def decode_response(
    body: Union[str, bytes, Dict[str, Any]], payload_type: Optional[Type[T]] = None
) -> Response[T]:
    """
    Decode a raw response body into a typed envelope.

    Args:
        body: Raw JSON text or an already parsed object
        payload_type: Payload model of the action, or None when the action
            carries no payload

    Returns:
        The decoded response envelope

    Raises:
        DecodeFailure: On malformed JSON, missing envelope fields, an
            unrecognized status code or a payload of the wrong shape
    """
    model = Response if payload_type is None else Response[payload_type]
    context = {"has_payload": payload_type is not None}
    try:
        if isinstance(body, (str, bytes)):
            return model.model_validate_json(body, context=context)
        return model.model_validate(body, context=context)
    except ValidationError as e:
        logger.debug(f"Undecodable response: {e}")
        raise DecodeFailure(f"Invalid response from the netcup API: {e}")
