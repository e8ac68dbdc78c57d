"""Colosseum 프로젝트 API 소스 모듈."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from arena_lens.config import settings
from arena_lens.errors import (
    AuthError,
    FetchError,
    RateLimitError,
    UpstreamTimeoutError,
)
from arena_lens.models import Project
from arena_lens.validation import validate_projects

logger = logging.getLogger(__name__)

USER_AGENT = "arena-lens/0.1"


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


async def call_with_retry(
    call: Callable[[], Awaitable[httpx.Response]],
    max_retries: int,
    retry_delay_base: float,
) -> httpx.Response:
    """429와 네트워크 오류는 지수 백오프로 재시도한다.

    Args:
        call: HTTP 요청을 수행하는 코루틴 함수
        max_retries: 최대 시도 횟수
        retry_delay_base: 첫 재시도 대기 시간 (초). 이후 2배씩 늘어난다.

    Raises:
        AuthError: 401 응답 (재시도하지 않음)
        RateLimitError: 마지막 시도까지 429 응답
        UpstreamTimeoutError: 마지막 시도가 타임아웃
        FetchError: 마지막 시도가 네트워크 오류
    """
    for attempt in range(1, max_retries + 1):
        delay = retry_delay_base * 2 ** (attempt - 1)
        is_last = attempt == max_retries

        try:
            response = await call()
        except httpx.TimeoutException as e:
            if is_last:
                raise UpstreamTimeoutError(f"Request timed out: {e}") from e
            logger.warning(
                f"Request timed out (attempt {attempt}/{max_retries}), "
                f"retrying in {delay}s"
            )
        except httpx.RequestError as e:
            if is_last:
                raise FetchError(f"Request failed: {e}") from e
            logger.warning(
                f"API call failed (attempt {attempt}/{max_retries}), "
                f"retrying in {delay}s: {e}"
            )
        else:
            if response.status_code == 401:
                logger.error("Authentication error - check your API key")
                raise AuthError("Authentication failed (401)")
            if response.status_code != 429:
                return response
            if is_last:
                raise RateLimitError(
                    "Rate limit exceeded (429)", retry_after=_retry_after(response)
                )
            logger.warning(
                f"Rate limit hit, waiting {delay}s before retry {attempt}/{max_retries}"
            )

        await asyncio.sleep(delay)

    raise FetchError("No attempts were made")


class ColosseumSource:
    """Colosseum API에서 해커톤 프로젝트를 수집한다."""

    def __init__(
        self,
        base_url: str | None = None,
        hackathon_id: int | None = None,
        limit: int | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay_base: float | None = None,
        rate_limit_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: 프로젝트 목록 API URL. None이면 설정값 사용.
            hackathon_id: 해커톤 ID
            limit: 가져올 프로젝트 수
            timeout: HTTP 요청 타임아웃 (초)
            max_retries: 최대 시도 횟수
            retry_delay_base: 지수 백오프 기본 대기 시간 (초)
            rate_limit_delay: 연속 호출 사이 최소 간격 (초)
            transport: 테스트용 httpx 트랜스포트
        """
        self.base_url = base_url or settings.colosseum_api_url
        self.hackathon_id = hackathon_id if hackathon_id is not None else settings.hackathon_id
        self.limit = limit if limit is not None else settings.project_limit
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.retry_delay_base = (
            retry_delay_base if retry_delay_base is not None else settings.retry_delay_base
        )
        self.rate_limit_delay = (
            rate_limit_delay if rate_limit_delay is not None else settings.rate_limit_delay
        )
        self.transport = transport
        self._last_call: float | None = None

    def _build_params(self) -> dict[str, str]:
        """요청 쿼리 파라미터를 생성한다."""
        return {
            "hackathonId": str(self.hackathon_id),
            "limit": str(self.limit),
            "showWinnersOnly": "false",
            "sort": "RANDOM",
        }

    async def _throttle(self) -> None:
        """직전 호출 이후 ``rate_limit_delay``가 지나지 않았으면 기다린다."""
        if self._last_call is not None:
            wait = self.rate_limit_delay - (time.monotonic() - self._last_call)
            if wait > 0:
                await asyncio.sleep(wait)
        self._last_call = time.monotonic()

    async def fetch_raw(self) -> list[dict[str, Any]]:
        """검증 전 원본 프로젝트 레코드를 가져온다."""
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
                "Cache-Control": "no-cache",
            },
        ) as client:

            async def _get() -> httpx.Response:
                await self._throttle()
                return await client.get(self.base_url, params=self._build_params())

            logger.debug(f"Fetching projects from {self.base_url}")
            response = await call_with_retry(
                _get, self.max_retries, self.retry_delay_base
            )

        if not response.is_success:
            raise FetchError(
                f"API request failed with status {response.status_code}: "
                f"{response.reason_phrase}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError("Invalid JSON in API response") from e

        projects = payload.get("projects") if isinstance(payload, dict) else None
        if not isinstance(projects, list) or not projects:
            raise FetchError("No projects found in API response")
        return projects

    async def fetch(self) -> list[Project]:
        """프로젝트를 가져와 검증한다."""
        raw = await self.fetch_raw()
        report = validate_projects(raw)
        if not report.projects:
            raise FetchError("No valid projects after validation")

        logger.info(f"Fetched {len(report.projects)} projects from Colosseum API")
        return report.projects
