"""Retry policy wrapping a single ITGlue HTTP call.

Two failure shapes are recovered locally:

- Rate limiting (HTTP 429): wait a fixed interval (or the server's
  Retry-After) and re-issue the identical request. Uncapped unless
  ``max_rate_limit_retries`` is set.
- Timeouts (a requests timeout, HTTP 408/504, or an error body that reports
  a timeout): re-issue up to ``timeout_retries`` times, then raise
  RequestTimeoutError so the caller can shrink the page size.

Every other response is handed back to the caller untouched; every other
exception propagates.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import requests

from itglue_tools.core.exceptions import RateLimitError, RequestTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT_WAIT = 60.0  # seconds
DEFAULT_TIMEOUT_RETRIES = 5
TIMEOUT_STATUSES = (408, 504)
TIMEOUT_MARKERS = ("timeout", "timed out")


class RetryPolicy:
    """Retry behaviour for one request.

    Attributes:
        rate_limit_wait: Seconds to sleep after a 429 without Retry-After
        max_rate_limit_retries: Cap on 429 retries, None for no cap
        timeout_retries: Retries after a timeout before giving up
    """

    provider_name = "itglue"

    def __init__(
        self,
        rate_limit_wait: float = DEFAULT_RATE_LIMIT_WAIT,
        max_rate_limit_retries: int | None = None,
        timeout_retries: int = DEFAULT_TIMEOUT_RETRIES,
    ) -> None:
        self.rate_limit_wait = rate_limit_wait
        self.max_rate_limit_retries = max_rate_limit_retries
        self.timeout_retries = timeout_retries

    def call(
        self,
        send: Callable[[], requests.Response],
        description: str = "request",
        retry_timeouts: bool = True,
    ) -> requests.Response:
        """Issue a request, retrying on rate limits and timeouts.

        Args:
            send: Zero-argument callable performing the HTTP request
            description: Label for log messages (e.g., 'GET /contacts')
            retry_timeouts: Whether timeouts are retried (False for writes)

        Returns:
            The first response that is neither rate limited nor a timeout

        Raises:
            RateLimitError: If the rate limit cap is exhausted
            RequestTimeoutError: If the request keeps timing out
        """
        rate_limited = 0
        timeouts = 0

        while True:
            try:
                response = send()
            except requests.exceptions.Timeout as e:
                timeouts += 1
                self._check_timeouts(timeouts, description, retry_timeouts, e)
                continue

            if response.status_code == 429:
                rate_limited += 1
                wait = self.retry_after(response)
                if (
                    self.max_rate_limit_retries is not None
                    and rate_limited > self.max_rate_limit_retries
                ):
                    logger.error(
                        "%s still rate limited after %d retries",
                        description,
                        self.max_rate_limit_retries,
                    )
                    raise RateLimitError(
                        "Rate limit exceeded. Try again later.",
                        retry_after=int(wait),
                        provider=self.provider_name,
                        details={"status_code": 429, "request": description},
                    )
                logger.warning(
                    "Rate limited on %s. Waiting %d seconds before retry.",
                    description,
                    wait,
                )
                time.sleep(wait)
                continue

            if is_timeout_response(response):
                timeouts += 1
                self._check_timeouts(timeouts, description, retry_timeouts, None)
                continue

            return response

    def retry_after(self, response: requests.Response) -> float:
        """Get retry delay from the Retry-After header or the fixed wait."""
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                seconds = float(int(retry_after))
            except ValueError:
                seconds = 0.0
            if seconds > 0:
                return seconds
            logger.debug("Ignoring Retry-After header %r", retry_after)
        return self.rate_limit_wait

    def _check_timeouts(
        self,
        timeouts: int,
        description: str,
        retry_timeouts: bool,
        cause: Exception | None,
    ) -> None:
        """Log a timeout and raise once the retry budget is spent."""
        if retry_timeouts and timeouts <= self.timeout_retries:
            logger.warning(
                "%s timed out. Retrying (%d/%d).",
                description,
                timeouts,
                self.timeout_retries,
            )
            return

        logger.error("%s timed out after %d attempt(s)", description, timeouts)
        raise RequestTimeoutError(
            f"Request timed out after {timeouts} attempt(s): {description}",
            attempts=timeouts,
            provider=self.provider_name,
            details={"request": description},
        ) from cause


def is_timeout_response(response: requests.Response) -> bool:
    """Check whether an API response reports a timeout.

    Args:
        response: HTTP response

    Returns:
        True for 408/504 or an error body mentioning a timeout
    """
    if response.status_code in TIMEOUT_STATUSES:
        return True
    if response.status_code < 400:
        return False

    for text in _error_texts(response):
        lowered = text.lower()
        if any(marker in lowered for marker in TIMEOUT_MARKERS):
            return True
    return False


def _error_texts(response: requests.Response) -> list[str]:
    """Collect title/detail strings from a JSON:API error body."""
    try:
        body: Any = response.json()
    except (ValueError, TypeError):
        return [response.text or ""]

    if not isinstance(body, dict):
        return [str(body)]

    texts = []
    for error in body.get("errors") or []:
        if isinstance(error, dict):
            texts.extend(str(error.get(key, "")) for key in ("title", "detail"))
        else:
            texts.append(str(error))
    if body.get("message"):
        texts.append(str(body["message"]))
    return texts
