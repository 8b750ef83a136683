"""
HTTP transport for the netcup JSON endpoint.

Posts one JSON document and hands back the raw response body. Nothing is
retried; any network or HTTP level problem becomes a TransportFailure.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..core.exceptions import TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://ccp.netcup.net/run/webservice/servers/endpoint.php?JSON"
DEFAULT_TIMEOUT = 30


class JSONTransport:
    """Send JSON, get JSON text back."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def post(self, url: str, payload: Dict[str, Any]) -> str:
        action = payload.get("action")
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Could not send '{action}' request: {e}")
            raise TransportFailure(f"Failed to send the '{action}' request to netcup: {e}")

        logger.debug(f"Received HTTP {response.status_code} for '{action}'")

        if not response.ok:
            logger.error(
                f"HTTP status code {response.status_code} while performing '{action}'"
            )
            raise TransportFailure(
                f"HTTP status code {response.status_code} while performing '{action}'"
            )

        return response.text

    def close(self):
        self.session.close()
