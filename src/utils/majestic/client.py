import json
import logging
from typing import Any, Dict, Optional, Union

import httpx

from src.utils.majestic.errors import ParseError, ProviderError, TransportError

MAJESTIC_API_URL = "https://api.majestic.com/api/json"
REQUEST_TIMEOUT = 30.0

ParamValue = Union[str, int, bool]

logger = logging.getLogger("majestic")


def encode_value(value: ParamValue) -> str:
    """Stringify a query value; Majestic expects flags as 1/0"""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class MajesticClient:
    """Issues single GET requests against the Majestic JSON API"""

    def __init__(
        self,
        api_key: str,
        base_url: str = MAJESTIC_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.transport = transport

    def build_query(self, command: str, params: Dict[str, ParamValue]) -> Dict[str, str]:
        query = {"app_api_key": self.api_key, "cmd": command}
        for key, value in params.items():
            query[key] = encode_value(value)
        return query

    async def call(self, command: str, params: Dict[str, ParamValue]) -> Dict[str, Any]:
        """Run a Majestic command and return the decoded envelope

        Raises:
            TransportError: the request failed or returned a non-2xx status
            ParseError: the body is not a JSON object
            ProviderError: the envelope Code is not OK
        """
        query = self.build_query(command, params)
        logger.info(f"Calling Majestic command {command} with {len(params)} parameters")

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(
                    self.base_url, params=query, timeout=REQUEST_TIMEOUT
                )
        except httpx.RequestError as e:
            logger.error(f"Error making request to Majestic API: {type(e).__name__}")
            raise TransportError(None, f"request failed ({type(e).__name__})") from e

        if not response.is_success:
            logger.error(
                f"HTTP error occurred: {response.status_code} - {response.reason_phrase}"
            )
            raise TransportError(response.status_code, response.reason_phrase)

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Majestic API returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ParseError(
                f"Majestic API returned {type(data).__name__}, expected a JSON object"
            )

        code = data.get("Code")
        if code != "OK":
            message = data.get("ErrorMessage") or code or "missing response Code"
            logger.error(f"Majestic command {command} failed: {message}")
            raise ProviderError(str(message), code)

        return data
