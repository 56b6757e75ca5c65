"""HTTP client for the remote chat-completion classifier."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from .errors import ClassificationError, ErrorKind

LOGGER = logging.getLogger(__name__)

API_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
REQUEST_TIMEOUT = 10.0
MAX_RETRIES = 1
MAX_TOKENS = 10
NETWORK_BACKOFF = 1.0
RATE_LIMIT_BACKOFF = 2.0
UNKNOWN_API_ERROR = "Unknown API error"


class ClassificationClient:
    """Posts prompts to the completion endpoint with a bounded retry policy.

    Transport failures and timeouts are retried after ``NETWORK_BACKOFF``
    seconds, HTTP 429 after ``RATE_LIMIT_BACKOFF`` seconds. Every other
    non-2xx status fails on the first attempt.
    """

    def __init__(
        self,
        *,
        endpoint: str = API_ENDPOINT,
        model: str = DEFAULT_MODEL,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.endpoint = endpoint
        self.model = model
        self.timeout = timeout
        self._max_attempts = max_retries + 1
        self._transport = transport
        self._sleep = sleep

    def build_body(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": MAX_TOKENS,
            "temperature": 0,
        }

    def request(self, api_key: str, prompt: str) -> dict[str, Any]:
        """Return the decoded completion payload or raise ``ClassificationError``."""

        body = self.build_body(prompt)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        max_attempts = self._max_attempts

        with httpx.Client(transport=self._transport, timeout=self.timeout) as http:
            for attempt in range(1, max_attempts + 1):
                LOGGER.debug(
                    "classification_request attempt=%s/%s model=%s",
                    attempt,
                    max_attempts,
                    self.model,
                )
                started = time.perf_counter()
                try:
                    response = http.post(self.endpoint, json=body, headers=headers)
                except httpx.TransportError as exc:
                    reason = str(exc) or exc.__class__.__name__
                    if attempt < max_attempts:
                        LOGGER.warning(
                            "Network error on attempt %s/%s (%s); retrying in %.0fs",
                            attempt,
                            max_attempts,
                            reason,
                            NETWORK_BACKOFF,
                        )
                        self._sleep(NETWORK_BACKOFF)
                        continue
                    LOGGER.debug("classification_request failed: network error: %s", reason)
                    raise ClassificationError(
                        ErrorKind.NETWORK_ERROR, f"Network error: {reason}"
                    ) from exc
                except httpx.DecodingError as exc:
                    raise ClassificationError(
                        ErrorKind.INVALID_RESPONSE, f"Could not decode API response: {exc}"
                    ) from exc
                except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
                    # Unencodable headers or body, or a malformed endpoint; not retryable.
                    reason = str(exc) or exc.__class__.__name__
                    LOGGER.debug("classification_request failed: request error: %s", reason)
                    raise ClassificationError(
                        ErrorKind.NETWORK_ERROR, f"Network error: request failed: {reason}"
                    ) from exc

                status = response.status_code
                latency_ms = (time.perf_counter() - started) * 1000.0
                if 200 <= status < 300:
                    LOGGER.debug(
                        "classification_request ok status=%s latency_ms=%.1f", status, latency_ms
                    )
                    return _decode_payload(response)

                message = _error_message(response)
                if status == 429:
                    if attempt < max_attempts:
                        LOGGER.warning(
                            "Rate limited on attempt %s/%s; retrying in %.0fs",
                            attempt,
                            max_attempts,
                            RATE_LIMIT_BACKOFF,
                        )
                        self._sleep(RATE_LIMIT_BACKOFF)
                        continue
                    LOGGER.debug("classification_request failed: rate limited: %s", message)
                    raise ClassificationError(
                        ErrorKind.RATE_LIMITED_EXHAUSTED,
                        f"Rate limited after {attempt} attempts: {message}",
                        status=status,
                    )

                LOGGER.debug("classification_request failed: API error (%s): %s", status, message)
                raise ClassificationError(
                    ErrorKind.API_ERROR,
                    f"API error ({status}): {message}",
                    status=status,
                )

        raise ClassificationError(ErrorKind.NETWORK_ERROR, "Maximum retry attempts exceeded.")


def _decode_payload(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ClassificationError(
            ErrorKind.INVALID_RESPONSE, "API response is not valid JSON."
        ) from exc
    if not isinstance(payload, dict):
        raise ClassificationError(ErrorKind.INVALID_RESPONSE, "Invalid API response structure.")
    return payload


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return UNKNOWN_API_ERROR
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return UNKNOWN_API_ERROR


__all__ = [
    "API_ENDPOINT",
    "ClassificationClient",
    "DEFAULT_MODEL",
    "MAX_RETRIES",
    "MAX_TOKENS",
    "REQUEST_TIMEOUT",
]
