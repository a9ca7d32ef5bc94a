"""
Relays an OMDb query and normalizes the outcome.

Transport failures, upstream rejections and unparseable bodies never raise;
they come back as a failure envelope with a matching HTTP status.
"""
import json
import logging
import math
from typing import Any, Dict

import httpx
from pydantic import BaseModel

from moviescope.api_clients.omdb import OMDbClient, omdb_client
from moviescope.query import SearchQuery

logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch movie data"
INVALID_JSON = "Invalid JSON response from API"


def _reject_constant(token: str):
    # NaN and Infinity are not JSON and can't be re-serialized to the caller
    raise ValueError(f"Non-standard JSON constant: {token}")


def _finite_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {token}")
    return value


class RelayResult(BaseModel):
    status_code: int
    payload: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def failure_envelope(message: str) -> Dict[str, str]:
    return {"Response": "False", "Error": message}


def failure(message: str, status_code: int = 500) -> RelayResult:
    return RelayResult(status_code=status_code, payload=failure_envelope(message))


async def relay(query: SearchQuery, client: OMDbClient = omdb_client) -> RelayResult:
    logger.info(f"Fetching from URL: {client.redacted_url(query)}")

    try:
        response = await client.get(query)
    except httpx.HTTPError as e:
        logger.error(f"Error fetching movie data: {e!r}")
        return failure(FETCH_FAILED)

    if not response.is_success:
        status = f"{response.status_code} {response.reason_phrase}".strip()
        logger.error(f"API response not OK: {status}")
        logger.error(f"Response text: {response.text}")
        return failure(f"API error: {status}", status_code=response.status_code)

    text = response.text
    try:
        data = json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as e:
        logger.error(f"Error parsing JSON: {e}")
        logger.debug(f"Raw response: {text}")
        return failure(INVALID_JSON)

    return RelayResult(status_code=200, payload=data)
