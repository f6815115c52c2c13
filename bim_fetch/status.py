"""Status code validation.

Accepted statuses are 200 <= status < 310. The upper bound is deliberately
310 rather than 300, so 3xx responses up to 309 are decoded like successes.
"""

from __future__ import annotations

import json
import logging

import httpx

from bim_fetch.errors import StatusError

logger = logging.getLogger(__name__)

ACCEPTED_STATUS_MIN = 200
ACCEPTED_STATUS_MAX = 310  # exclusive


def is_accepted_status(status_code: int) -> bool:
    return ACCEPTED_STATUS_MIN <= status_code < ACCEPTED_STATUS_MAX


async def validate_status(response: httpx.Response, url: str, method: str) -> None:
    """Raise StatusError if ``response`` has a rejected status.

    The body is read only when the status is rejected; it is parsed as JSON
    and attached to the error. A non-JSON error body raises
    json.JSONDecodeError instead.

    Raises:
        StatusError: If the status is outside the accepted range.
    """
    if is_accepted_status(response.status_code):
        return

    content = await response.aread()
    payload = json.loads(content)
    logger.debug("%s %s rejected with status %d", method, url, response.status_code)
    raise StatusError(payload, url, method, response.status_code)
