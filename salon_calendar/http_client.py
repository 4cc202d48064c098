"""HTTP session for the salon backend, with retry and connection pooling.

Pattern: requests.Session with a urllib3 retry adapter, plus tenacity
exponential backoff around each verb for connection-level failures.

- 15-second default timeout on every request
- Retries on connection errors, timeouts, 429 and 5xx responses
- 4xx responses are returned to the caller untouched
- Bearer token and X-Request-ID headers on every request
"""
import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.util.retry import Retry

from salon_calendar import config
from salon_calendar.logging_config import generate_request_id

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)
RETRIED_METHODS = ("get", "post", "put", "delete")


def is_retryable(exc: BaseException) -> bool:
    """Connection failures, timeouts and 429/5xx responses are worth retrying."""
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    if isinstance(exc, requests.exceptions.HTTPError):
        response = exc.response
        return response is None or response.status_code in RETRY_STATUSES
    return False


def create_http_session(
    token: Optional[str] = None,
    max_retries: int = config.HTTP_MAX_RETRIES,
    backoff_factor: float = 1.0,
    timeout: int = config.HTTP_TIMEOUT,
    wait_multiplier: float = 1.0
) -> requests.Session:
    """
    Create HTTP session with retry and connection pooling.

    Args:
        token: Bearer token sent in the Authorization header
        max_retries: Maximum number of retry attempts (default: 3)
        backoff_factor: urllib3 backoff multiplier
        timeout: Request timeout in seconds (default: 15)
        wait_multiplier: tenacity backoff multiplier; delays are 1s, 2s, 4s
                         at 1.0 (0 disables waiting, for tests)

    Returns:
        Configured requests.Session whose get/post/put/delete retry
    """
    session = requests.Session()
    session.headers.update({"Content-Type": "application/json"})
    if token:
        session.headers["Authorization"] = f"Bearer {token}"

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=list(RETRY_STATUSES),
        allowed_methods=[m.upper() for m in RETRIED_METHODS],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    def with_retry(original):
        @retry(
            stop=stop_after_attempt(max_retries + 1),
            wait=wait_exponential(
                multiplier=wait_multiplier,
                min=wait_multiplier,
                max=8 * wait_multiplier
            ),
            retry=retry_if_exception(is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )
        def call(*args, **kwargs):
            kwargs.setdefault("timeout", timeout)
            headers = dict(kwargs.pop("headers", None) or {})
            headers.setdefault("X-Request-ID", generate_request_id())
            response = original(*args, headers=headers, **kwargs)
            if response.status_code in RETRY_STATUSES:
                response.raise_for_status()
            return response
        return call

    for method in RETRIED_METHODS:
        setattr(session, method, with_retry(getattr(session, method)))

    return session
