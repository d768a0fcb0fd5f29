import logging
import os
import time
from typing import Any

import httpx


logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


class CircuitOpenError(RuntimeError):
    pass


class CircuitBreaker:
    """Counts consecutive retryable failures against one game data host.

    Once ``threshold`` failures pile up the host is skipped for ``reset_seconds``;
    the first request after that window gets a clean slate.
    """

    def __init__(self, host: str, threshold: int, reset_seconds: float) -> None:
        self.host = host
        self.threshold = max(1, int(threshold))
        self.reset_seconds = max(0.0, float(reset_seconds))
        self.failures = 0
        self.open_until = 0.0

    def check(self) -> None:
        if self.open_until <= 0:
            return
        if time.time() < self.open_until:
            raise CircuitOpenError(f"game data host {self.host} skipped until {int(self.open_until)}")
        self.failures = 0
        self.open_until = 0.0

    def record_success(self) -> None:
        self.failures = 0
        self.open_until = 0.0

    def record_failure(self) -> None:
        self.failures += 1
        if self.failures >= self.threshold and self.open_until <= 0:
            self.open_until = time.time() + self.reset_seconds
            logger.warning(
                "Game data host marked unavailable",
                extra={"host": self.host, "failures": self.failures, "reset_seconds": self.reset_seconds},
            )


_BREAKERS: dict[str, CircuitBreaker] = {}


def breaker_for(client: httpx.Client) -> CircuitBreaker:
    host = str(getattr(client, "base_url", "") or "unknown")
    breaker = _BREAKERS.get(host)
    if breaker is None:
        breaker = CircuitBreaker(
            host,
            threshold=int(os.getenv("GIGSIM_HTTP_CIRCUIT_FAILURE_THRESHOLD", "3")),
            reset_seconds=float(os.getenv("GIGSIM_HTTP_CIRCUIT_RESET_SECONDS", "120")),
        )
        _BREAKERS[host] = breaker
    return breaker


def reset_circuit_breakers() -> None:
    _BREAKERS.clear()


def is_retryable(exc: Exception) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return False


def _get_document(client: httpx.Client, path: str) -> Any:
    response = client.get(path, headers={"Accept": "application/json"})
    response.raise_for_status()
    return response.json()


def fetch_json_document(
    client: httpx.Client,
    path: str,
    *,
    retries: int = 0,
    backoff_seconds: float = 0.2,
) -> dict:
    """GET the single game data document, doubling the pause after each transient failure.

    A 404 or a malformed body fails at once; a body that is not a JSON object raises ``ValueError``.
    """

    breaker = breaker_for(client)
    attempts = max(0, int(retries)) + 1
    for attempt in range(attempts):
        breaker.check()
        try:
            payload = _get_document(client, path)
        except Exception as exc:
            if not is_retryable(exc):
                raise
            breaker.record_failure()
            if attempt >= attempts - 1:
                raise
            delay = max(0.0, backoff_seconds) * (2**attempt)
            logger.debug("Retrying game data fetch", extra={"path": path, "attempt": attempt + 1, "delay": delay})
            if delay > 0:
                time.sleep(delay)
            continue
        breaker.record_success()
        if not isinstance(payload, dict):
            raise ValueError(f"game data document at {path} is not a JSON object")
        return payload
    raise AssertionError("unreachable")
