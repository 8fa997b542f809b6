"""
Client for the user service.

The bike service only needs one call: fetch a user's public profile to
embed it next to a bike.  The caller's bearer token is forwarded so the
user service applies its own access rules.  Failures are retried a
bounded number of times and then surfaced as ``UserServiceError``;
callers treat that as "owner unknown" rather than failing the request.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional
from uuid import UUID

import requests


logger = logging.getLogger(__name__)

# Statuses that are retried, 404 included.
RETRYABLE_STATUSES = frozenset({404, 500, 502, 503, 504})


class UserServiceError(Exception):
    """The user service could not be reached or returned an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UserServiceClient:
    """Fetch user profiles over HTTP.

    Parameters
    ----------
    base_url : str
        Base URL of the user service, e.g. ``http://users:8080``.
    timeout : float
        Per‑attempt timeout in seconds.
    retries : int
        Maximum number of attempts per call, at least one.
    session : Optional[requests.Session]
        Session to use.  A new one is created when omitted.
    backoff_seconds : float
        Base delay between attempts; doubles after each failure.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        retries: int = 3,
        session: Optional[requests.Session] = None,
        backoff_seconds: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = max(1, retries)
        self.session = session or requests.Session()
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def get_user(self, user_id: UUID, token: Optional[str] = None) -> Dict[str, Any]:
        """Return the decoded JSON body of ``GET /users/{user_id}``.

        Raises ``UserServiceError`` once all attempts are exhausted or
        on a non‑retryable error status.
        """
        url = f"{self.base_url}/users/{user_id}"
        headers: Dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        last_error: Optional[UserServiceError] = None
        for attempt in range(1, self.retries + 1):
            logger.debug("Calling user service user_id=%s attempt=%d", user_id, attempt)
            try:
                response = self.session.get(url, headers=headers, timeout=self.timeout)
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_error = UserServiceError(f"user service unreachable: {exc}")
            except requests.RequestException as exc:
                raise UserServiceError(f"user service request failed: {exc}") from exc
            else:
                if response.ok:
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise UserServiceError("user service returned invalid JSON") from exc
                last_error = UserServiceError(
                    f"user service returned {response.status_code}",
                    status_code=response.status_code,
                )
                if response.status_code not in RETRYABLE_STATUSES:
                    raise last_error

            if attempt < self.retries:
                delay = self.backoff_seconds * 2 ** (attempt - 1)
                logger.warning(
                    "User service call failed user_id=%s attempt=%d: %s; retrying in %.2fs",
                    user_id,
                    attempt,
                    last_error,
                    delay,
                )
                self._sleep(delay)

        raise last_error

    def close(self) -> None:
        self.session.close()
