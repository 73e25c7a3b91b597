"""HTTP request execution with fixed-delay retry and manual redirect following."""

import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

import httpx

from fourcast.config.schema import HttpConfig
from fourcast.errors import (
    DeadlineExceeded,
    FourcastError,
    NetworkError,
    RedirectLimitExceeded,
    UpstreamError,
)

logger = logging.getLogger(__name__)


@dataclass
class RetryableRequest:
    """Per-call state: where we are going and what budget is left."""

    url: str
    params: dict[str, Any] | None
    retries_left: int
    redirects_left: int
    retry_delay: float
    deadline: float | None = None  # time.monotonic() value

    def remaining_time(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()


class RequestExecutor:
    """Issues GET requests on a shared httpx.Client.

    Redirects are followed by hand so the hop budget is ours, and retries
    happen only for errors classified retryable when they were raised.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ):
        self.config = config or HttpConfig()
        self.timeout = httpx.Timeout(
            self.config.read_timeout_seconds,
            connect=self.config.connect_timeout_seconds,
        )
        self.client = client or httpx.Client(
            headers={"User-Agent": self.config.user_agent, **(headers or {})},
            timeout=self.timeout,
            follow_redirects=False,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "RequestExecutor":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def new_request(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        deadline: float | None = None,
    ) -> RetryableRequest:
        return RetryableRequest(
            url=url,
            params=params,
            retries_left=self.config.max_retries,
            redirects_left=self.config.max_redirects,
            retry_delay=self.config.retry_delay_seconds,
            deadline=deadline,
        )

    def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        deadline: float | None = None,
    ) -> httpx.Response:
        """GET url, retrying retryable failures. Returns the 2xx response."""
        return self.execute_with_retry(self.new_request(url, params, deadline))

    def execute_with_retry(self, request: RetryableRequest) -> httpx.Response:
        attempt = 0
        while True:
            attempt += 1
            try:
                return self.execute(request)
            except FourcastError as e:
                if not e.retryable or request.retries_left <= 0:
                    logger.error(
                        "Request to %s failed (attempt %d), not retrying: %s",
                        request.url, attempt, e,
                    )
                    raise
                remaining = request.remaining_time()
                if remaining is not None and remaining <= request.retry_delay:
                    raise DeadlineExceeded(
                        f"Deadline exceeded before retry of {request.url}",
                        url=request.url,
                    ) from e
                request.retries_left -= 1
                logger.warning(
                    "Request to %s failed with retryable error (attempt %d): %s. "
                    "Retrying in %.1fs (%d retries left)",
                    request.url, attempt, e, request.retry_delay, request.retries_left,
                )
                time.sleep(request.retry_delay)

    def execute(self, request: RetryableRequest) -> httpx.Response:
        """Run one attempt: follow redirects from the original URL until a
        2xx arrives, the hop budget runs out, or the response is an error."""
        url = request.url
        params = request.params
        redirects_left = request.redirects_left

        while True:
            response = self._send(url, params, request)
            if response.is_success:
                logger.debug("GET %s -> %d", url, response.status_code)
                return response

            if response.is_redirect:
                if redirects_left <= 0:
                    raise RedirectLimitExceeded(url, request.redirects_left)
                redirects_left -= 1
                location = response.headers["location"]
                next_url = urljoin(str(response.request.url), location)
                logger.info("Redirected from %s to %s", url, next_url)
                # The Location header is the complete target; do not re-append params.
                url, params = next_url, None
                continue

            raise UpstreamError(response.status_code, url=url, body=response.text)

    def _send(
        self, url: str, params: dict[str, Any] | None, request: RetryableRequest
    ) -> httpx.Response:
        timeout = self.timeout
        remaining = request.remaining_time()
        if remaining is not None:
            if remaining <= 0:
                raise DeadlineExceeded(f"Deadline exceeded before GET {url}", url=url)
            timeout = httpx.Timeout(
                min(remaining, self.config.read_timeout_seconds),
                connect=min(remaining, self.config.connect_timeout_seconds),
            )

        try:
            return self.client.get(url, params=params, timeout=timeout)
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Timed out requesting {url}: {e}", url=url, transient=True
            ) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Transport error requesting {url}: {e}", url=url) from e
