"""Tests for retry and redirect policy with mocked httpx."""

import time
from unittest.mock import patch

import httpx
import pytest
import respx

from fourcast.config.schema import HttpConfig
from fourcast.errors import (
    DeadlineExceeded,
    NetworkError,
    RedirectLimitExceeded,
    UpstreamError,
)
from fourcast.ingest.request_executor import RequestExecutor

URL = "https://test-weather.example.com/resource"


@pytest.fixture
def executor(fast_http: HttpConfig) -> RequestExecutor:
    return RequestExecutor(fast_http, headers={"Accept": "application/geo+json"})


def _redirect(n: int) -> httpx.Response:
    return httpx.Response(301, headers={"Location": f"/hop/{n}"})


class TestSuccess:
    @respx.mock
    def test_returns_2xx_response(self, executor: RequestExecutor):
        respx.get(URL).mock(return_value=httpx.Response(200, json={"ok": True}))
        response = executor.get(URL)
        assert response.json() == {"ok": True}

    @respx.mock
    def test_sends_identifying_headers(self, executor: RequestExecutor):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))
        executor.get(URL)
        request = route.calls[0].request
        assert "fourcast" in request.headers["user-agent"]
        assert request.headers["accept"] == "application/geo+json"

    @respx.mock
    def test_query_params(self, executor: RequestExecutor):
        route = respx.get(URL, params={"lat": "40.7", "lon": "-74.0"}).mock(
            return_value=httpx.Response(200, json={})
        )
        executor.get(URL, params={"lat": 40.7, "lon": -74.0})
        assert route.called


class TestRetry:
    @respx.mock
    def test_retries_503_then_succeeds(self, executor: RequestExecutor):
        route = respx.get(URL).mock(
            side_effect=[
                httpx.Response(503),
                httpx.Response(503),
                httpx.Response(200, json={"ok": True}),
            ]
        )
        with patch("fourcast.ingest.request_executor.time.sleep") as sleep:
            response = executor.get(URL)
        assert response.status_code == 200
        assert route.call_count == 3
        assert sleep.call_count == 2

    @respx.mock
    def test_succeeds_on_last_allowed_attempt(self, executor: RequestExecutor):
        # budget 3 retries: three 503s then a 200 is attempt 4
        route = respx.get(URL).mock(
            side_effect=[httpx.Response(503)] * 3 + [httpx.Response(200, json={})]
        )
        with patch("fourcast.ingest.request_executor.time.sleep"):
            executor.get(URL)
        assert route.call_count == 4

    @respx.mock
    def test_exhausted_retries_makes_budget_plus_one_attempts(
        self, executor: RequestExecutor
    ):
        route = respx.get(URL).mock(
            side_effect=[httpx.Response(503)] * 4 + [httpx.Response(200, json={})]
        )
        with patch("fourcast.ingest.request_executor.time.sleep"), pytest.raises(
            UpstreamError
        ) as exc_info:
            executor.get(URL)
        assert exc_info.value.status == 503
        assert route.call_count == 4

    @respx.mock
    def test_fixed_delay_between_attempts(self):
        executor = RequestExecutor(
            HttpConfig(retry_delay_seconds=1.0, max_retries=2, deadline_seconds=None)
        )
        respx.get(URL).mock(return_value=httpx.Response(503))
        with patch("fourcast.ingest.request_executor.time.sleep") as sleep, pytest.raises(
            UpstreamError
        ):
            executor.get(URL)
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 1.0]

    @pytest.mark.parametrize("status", [400, 404, 500])
    @respx.mock
    def test_non_503_is_not_retried(self, executor: RequestExecutor, status: int):
        route = respx.get(URL).mock(return_value=httpx.Response(status, text="nope"))
        with patch("fourcast.ingest.request_executor.time.sleep") as sleep, pytest.raises(
            UpstreamError
        ) as exc_info:
            executor.get(URL)
        assert exc_info.value.status == status
        assert exc_info.value.retryable is False
        assert route.call_count == 1
        sleep.assert_not_called()

    @respx.mock
    def test_connection_refused_is_not_retried(self, executor: RequestExecutor):
        route = respx.get(URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(NetworkError) as exc_info:
            executor.get(URL)
        assert exc_info.value.retryable is False
        assert route.call_count == 1

    @respx.mock
    def test_timeout_is_retried(self, executor: RequestExecutor):
        route = respx.get(URL).mock(
            side_effect=[httpx.ReadTimeout("slow"), httpx.Response(200, json={})]
        )
        with patch("fourcast.ingest.request_executor.time.sleep"):
            executor.get(URL)
        assert route.call_count == 2

    @respx.mock
    def test_zero_retry_budget(self):
        executor = RequestExecutor(HttpConfig(max_retries=0, deadline_seconds=None))
        route = respx.get(URL).mock(return_value=httpx.Response(503))
        with pytest.raises(UpstreamError):
            executor.get(URL)
        assert route.call_count == 1


class TestRedirects:
    @respx.mock
    def test_follows_relative_location(self, executor: RequestExecutor):
        respx.get(URL).mock(
            return_value=httpx.Response(301, headers={"Location": "/moved"})
        )
        moved = respx.get("https://test-weather.example.com/moved").mock(
            return_value=httpx.Response(200, json={"moved": True})
        )
        response = executor.get(URL)
        assert response.json() == {"moved": True}
        assert moved.called

    @respx.mock
    def test_follows_absolute_location(self, executor: RequestExecutor):
        respx.get(URL).mock(
            return_value=httpx.Response(
                302, headers={"Location": "https://other.example.com/final"}
            )
        )
        respx.get("https://other.example.com/final").mock(
            return_value=httpx.Response(200, json={})
        )
        assert executor.get(URL).status_code == 200

    @respx.mock
    def test_chain_of_exactly_hop_budget_succeeds(self, executor: RequestExecutor):
        respx.get(URL).mock(return_value=_redirect(1))
        for n in range(1, 5):
            respx.get(f"https://test-weather.example.com/hop/{n}").mock(
                return_value=_redirect(n + 1)
            )
        final = respx.get("https://test-weather.example.com/hop/5").mock(
            return_value=httpx.Response(200, json={})
        )
        assert executor.get(URL).status_code == 200
        assert final.called

    @respx.mock
    def test_chain_over_hop_budget_fails(self, executor: RequestExecutor):
        respx.get(URL).mock(return_value=_redirect(1))
        for n in range(1, 6):
            respx.get(f"https://test-weather.example.com/hop/{n}").mock(
                return_value=_redirect(n + 1)
            )
        never = respx.get("https://test-weather.example.com/hop/6").mock(
            return_value=httpx.Response(200, json={})
        )
        with patch("fourcast.ingest.request_executor.time.sleep") as sleep, pytest.raises(
            RedirectLimitExceeded
        ):
            executor.get(URL)
        assert not never.called
        sleep.assert_not_called()

    @respx.mock
    def test_redirect_then_503_retries_from_original_url(
        self, executor: RequestExecutor
    ):
        origin = respx.get(URL).mock(
            return_value=httpx.Response(307, headers={"Location": "/target"})
        )
        respx.get("https://test-weather.example.com/target").mock(
            side_effect=[httpx.Response(503), httpx.Response(200, json={})]
        )
        with patch("fourcast.ingest.request_executor.time.sleep"):
            executor.get(URL)
        assert origin.call_count == 2

    @respx.mock
    def test_3xx_without_location_is_upstream_error(self, executor: RequestExecutor):
        respx.get(URL).mock(return_value=httpx.Response(304))
        with pytest.raises(UpstreamError) as exc_info:
            executor.get(URL)
        assert exc_info.value.status == 304


class TestUpstreamErrorBody:
    @respx.mock
    def test_short_body_kept(self, executor: RequestExecutor):
        respx.get(URL).mock(return_value=httpx.Response(404, text="Not found"))
        with pytest.raises(UpstreamError) as exc_info:
            executor.get(URL)
        assert exc_info.value.body == "Not found"

    @respx.mock
    def test_long_body_dropped(self, executor: RequestExecutor):
        respx.get(URL).mock(return_value=httpx.Response(500, text="x" * 600))
        with pytest.raises(UpstreamError) as exc_info:
            executor.get(URL)
        assert exc_info.value.body is None


class TestDeadline:
    @respx.mock
    def test_expired_deadline_fails_without_request(self, executor: RequestExecutor):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))
        with pytest.raises(DeadlineExceeded):
            executor.get(URL, deadline=time.monotonic() - 1)
        assert not route.called

    @respx.mock
    def test_no_retry_when_delay_outlasts_deadline(self):
        executor = RequestExecutor(HttpConfig(retry_delay_seconds=60.0))
        route = respx.get(URL).mock(return_value=httpx.Response(503))
        with patch("fourcast.ingest.request_executor.time.sleep") as sleep, pytest.raises(
            DeadlineExceeded
        ):
            executor.get(URL, deadline=time.monotonic() + 5)
        assert route.call_count == 1
        sleep.assert_not_called()


class TestTimeouts:
    @respx.mock
    def test_configured_timeouts_without_deadline(self, executor: RequestExecutor):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))
        executor.get(URL)
        sent = route.calls[0].request.extensions["timeout"]
        assert sent["connect"] == 5.0
        assert sent["read"] == 10.0

    @respx.mock
    def test_deadline_keeps_connect_timeout(self):
        executor = RequestExecutor(HttpConfig())
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))
        executor.get(URL, deadline=time.monotonic() + 30)
        sent = route.calls[0].request.extensions["timeout"]
        assert sent["connect"] == 5.0
        assert sent["read"] == 10.0

    @respx.mock
    def test_short_deadline_caps_both_timeouts(self):
        executor = RequestExecutor(HttpConfig())
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))
        executor.get(URL, deadline=time.monotonic() + 2)
        sent = route.calls[0].request.extensions["timeout"]
        assert 0 < sent["connect"] <= 2
        assert 0 < sent["read"] <= 2
