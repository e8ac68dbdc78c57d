"""대시보드용 프로젝트 API 서버 (``GET /api/projects``)."""

import asyncio
import json
import logging
import math
import time
from collections.abc import Callable
from datetime import UTC, datetime
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from arena_lens.config import settings
from arena_lens.errors import UpstreamTimeoutError
from arena_lens.sources import ColosseumSource
from arena_lens.sources.base import Source
from arena_lens.validation import RateLimiter, security_headers

logger = logging.getLogger(__name__)

PROJECTS_PATH = "/api/projects"
SUCCESS_CACHE_CONTROL = "public, max-age=60, stale-while-revalidate=3600, stale-if-error=86400"
ERROR_CACHE_CONTROL = "public, max-age=30, stale-while-revalidate=300"


class ApiResponse(BaseModel):
    """HTTP 응답 (상태 코드, 헤더, JSON 본문)."""

    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    def encode(self) -> bytes:
        return json.dumps(self.body, ensure_ascii=False).encode("utf-8")


class ProjectsEndpoint:
    """업스트림 API 앞에 메모리 캐시와 레이트 리밋을 둔 프로젝트 엔드포인트."""

    def __init__(
        self,
        source: Source,
        rate_limiter: RateLimiter | None = None,
        fresh_for: float | None = None,
        error_cache_for: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        """
        Args:
            source: 프로젝트 소스
            rate_limiter: 호출 제한기. None이면 설정값으로 생성.
            fresh_for: 성공 응답 캐시 유지 시간 (초)
            error_cache_for: 타임아웃 응답 캐시 유지 시간 (초)
            clock: 단조 증가 시계
            timer: 응답 시간 측정용 타이머
        """
        self.source = source
        self.rate_limiter = rate_limiter or RateLimiter(
            settings.api_rate_limit_calls, settings.api_rate_limit_window
        )
        self.fresh_for = fresh_for if fresh_for is not None else settings.api_fresh_seconds
        self.error_cache_for = (
            error_cache_for
            if error_cache_for is not None
            else settings.api_error_cache_seconds
        )
        self._clock = clock
        self._timer = timer
        self._cached: ApiResponse | None = None
        self._cached_until = 0.0

    def _response(
        self,
        status: int,
        body: Any,
        started: float,
        extra_headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        elapsed_ms = round((self._timer() - started) * 1000)
        headers = {
            **security_headers(),
            "Content-Type": "application/json; charset=utf-8",
            "X-Response-Time": f"{elapsed_ms}ms",
            **(extra_headers or {}),
        }
        return ApiResponse(status=status, headers=headers, body=body)

    def _replay(self, cached: ApiResponse, started: float) -> ApiResponse:
        """캐시된 응답을 이번 요청의 응답 시간으로 다시 내보낸다."""
        elapsed_ms = round((self._timer() - started) * 1000)
        headers = {**cached.headers, "X-Response-Time": f"{elapsed_ms}ms"}
        return cached.model_copy(update={"headers": headers})

    def _remember(self, response: ApiResponse, ttl: float) -> None:
        self._cached = response
        self._cached_until = self._clock() + ttl

    async def get(self) -> ApiResponse:
        """``GET /api/projects`` 요청을 처리한다."""
        started = self._timer()

        if not self.rate_limiter.can_make_request():
            retry_after = math.ceil(self.rate_limiter.time_until_reset())
            return self._response(
                429,
                {"error": "Rate limit exceeded", "retryAfter": retry_after},
                started,
                {"Retry-After": str(retry_after)},
            )

        if self._cached is not None and self._clock() < self._cached_until:
            return self._replay(self._cached, started)

        try:
            projects = await self.source.fetch()
        except UpstreamTimeoutError as e:
            logger.error(f"Upstream timeout: {e}")
            response = self._response(
                504,
                {"error": "Request timeout"},
                started,
                {"Cache-Control": ERROR_CACHE_CONTROL},
            )
            self._remember(response, self.error_cache_for)
            return response
        except Exception:
            logger.exception("Failed to fetch projects")
            return self._response(
                500,
                {"error": "Failed to fetch projects from API"},
                started,
                {"Cache-Control": ERROR_CACHE_CONTROL},
            )

        response = self._response(
            200,
            [p.model_dump(mode="json", by_alias=True) for p in projects],
            started,
            {
                "Cache-Control": SUCCESS_CACHE_CONTROL,
                "Vary": "Accept-Encoding",
                "X-Project-Count": str(len(projects)),
                "X-Timestamp": datetime.now(UTC).isoformat(),
            },
        )
        self._remember(response, self.fresh_for)
        logger.info(f"API request completed in {response.headers['X-Response-Time']}")
        return response

    def method_not_allowed(self) -> ApiResponse:
        """GET 이외의 메서드."""
        return self._response(405, {"error": "Method not allowed"}, self._timer())

    def not_found(self) -> ApiResponse:
        return self._response(404, {"error": "Not found"}, self._timer())


def make_handler(endpoint: ProjectsEndpoint) -> type[BaseHTTPRequestHandler]:
    """엔드포인트를 감싼 요청 핸들러 클래스를 만든다."""

    class Handler(BaseHTTPRequestHandler):
        def _send(self, response: ApiResponse) -> None:
            payload = response.encode()
            self.send_response(response.status)
            for name, value in response.headers.items():
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def _is_projects_path(self) -> bool:
            return urlsplit(self.path).path.rstrip("/") == PROJECTS_PATH

        def do_GET(self) -> None:  # noqa: N802
            if not self._is_projects_path():
                self._send(endpoint.not_found())
                return
            self._send(asyncio.run(endpoint.get()))

        def _reject(self) -> None:
            if not self._is_projects_path():
                self._send(endpoint.not_found())
                return
            self._send(endpoint.method_not_allowed())

        do_POST = _reject  # noqa: N815
        do_PUT = _reject  # noqa: N815
        do_DELETE = _reject  # noqa: N815

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.info(format % args)

    return Handler


def serve(host: str, port: int, endpoint: ProjectsEndpoint | None = None) -> None:
    """요청을 하나씩 순서대로 처리하는 HTTP 서버를 실행한다."""
    endpoint = endpoint or ProjectsEndpoint(ColosseumSource())
    server = HTTPServer((host, port), make_handler(endpoint))
    logger.info(f"Serving {PROJECTS_PATH} on http://{host}:{port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server stopped")
    finally:
        server.server_close()


def main() -> None:
    """서버 엔트리포인트."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    serve(settings.server_host, settings.server_port)


if __name__ == "__main__":
    main()
