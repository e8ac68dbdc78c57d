"""Colosseum 소스 테스트."""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from arena_lens.errors import AuthError, FetchError, RateLimitError, UpstreamTimeoutError
from arena_lens.sources.colosseum import ColosseumSource

API_URL = "https://api.test/api/projects"

Handler = Callable[[httpx.Request], httpx.Response]


def _source(
    handler: Handler, max_retries: int = 3, rate_limit_delay: float = 0
) -> ColosseumSource:
    return ColosseumSource(
        base_url=API_URL,
        hackathon_id=4,
        limit=100,
        max_retries=max_retries,
        retry_delay_base=0,
        rate_limit_delay=rate_limit_delay,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def requests() -> list[httpx.Request]:
    """받은 요청을 기록할 목록을 반환한다."""
    return []


class TestColosseumSource:
    """ColosseumSource 테스트."""

    @pytest.mark.asyncio
    async def test_fetch_returns_validated_projects(
        self, raw_projects: list[dict[str, Any]], requests: list[httpx.Request]
    ) -> None:
        """응답의 프로젝트를 검증해 반환한다."""

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"projects": [*raw_projects, {"bad": True}]})

        projects = await _source(handler).fetch()

        assert [p.name for p in projects] == ["Hakata Finance", "Other"]
        assert requests[0].url.params["hackathonId"] == "4"
        assert requests[0].url.params["limit"] == "100"

    @pytest.mark.asyncio
    async def test_retries_after_rate_limit(
        self, raw_projects: list[dict[str, Any]], requests: list[httpx.Request]
    ) -> None:
        """429 이후 재시도해서 성공한다."""

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if len(requests) == 1:
                return httpx.Response(429)
            return httpx.Response(200, json={"projects": raw_projects})

        projects = await _source(handler).fetch()

        assert len(projects) == 2
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_throttles_consecutive_calls(
        self,
        raw_projects: list[dict[str, Any]],
        requests: list[httpx.Request],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """연속 호출 사이에는 rate_limit_delay만큼 기다린다."""
        sleeps: list[float] = []

        async def fake_sleep(delay: float) -> None:
            sleeps.append(delay)

        monkeypatch.setattr(asyncio, "sleep", fake_sleep)

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if len(requests) == 1:
                return httpx.Response(429)
            return httpx.Response(200, json={"projects": raw_projects})

        projects = await _source(handler, rate_limit_delay=2.0).fetch()

        assert len(projects) == 2
        assert len(requests) == 2
        # 백오프(0초) 다음 호출 간격 대기
        assert len(sleeps) == 2
        assert sleeps[0] == 0
        assert 1.0 < sleeps[1] <= 2.0

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, requests: list[httpx.Request]) -> None:
        """마지막 시도까지 429면 RateLimitError."""

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(429, headers={"Retry-After": "30"})

        with pytest.raises(RateLimitError) as exc_info:
            await _source(handler).fetch()

        assert exc_info.value.retry_after == 30.0
        assert len(requests) == 3

    @pytest.mark.asyncio
    async def test_auth_error_is_not_retried(self, requests: list[httpx.Request]) -> None:
        """401은 재시도하지 않는다."""

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(401)

        with pytest.raises(AuthError):
            await _source(handler).fetch()

        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_timeout(self, requests: list[httpx.Request]) -> None:
        """계속 타임아웃이면 UpstreamTimeoutError."""

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamTimeoutError):
            await _source(handler, max_retries=2).fetch()

        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_connection_error_recovers(
        self, raw_projects: list[dict[str, Any]], requests: list[httpx.Request]
    ) -> None:
        """일시적인 네트워크 오류는 재시도한다."""

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if len(requests) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"projects": raw_projects})

        assert len(await _source(handler).fetch()) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500),
            httpx.Response(200, json={"projects": []}),
            httpx.Response(200, json={"items": []}),
            httpx.Response(200, text="<html>"),
            httpx.Response(200, json={"projects": [{"name": "no id"}]}),
        ],
    )
    async def test_unusable_response(self, response: httpx.Response) -> None:
        """쓸 수 있는 프로젝트가 없으면 FetchError."""
        with pytest.raises(FetchError):
            await _source(lambda request: response).fetch()
