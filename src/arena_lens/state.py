"""대시보드 데이터 상태.

로드 시 캐시를 먼저 보여주고, 데이터가 오래되었으면 백그라운드에서
새로 가져온다. 데이터셋이 바뀔 때마다 검색 인덱스와 캐시를 함께 다시 만든다.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from arena_lens.config import settings
from arena_lens.errors import CacheEmptyError, FetchError
from arena_lens.models import Project
from arena_lens.search.engine import SearchEngine
from arena_lens.sources.base import Source
from arena_lens.storage.files import ProjectFileCache

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProjectsState:
    """프로젝트 목록, 로딩/오류 상태, 검색 엔진을 소유하는 상태 객체."""

    def __init__(
        self,
        source: Source,
        cache: ProjectFileCache,
        stale_after: timedelta | None = None,
        cache_size: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            source: 프로젝트 소스
            cache: 마지막 성공 결과를 보관하는 파일 캐시
            stale_after: 이 시간이 지나면 데이터를 새로 가져온다
            cache_size: 검색 결과 캐시 크기
            clock: 현재 시각 함수
        """
        self.source = source
        self.cache = cache
        self.stale_after = stale_after or timedelta(seconds=settings.stale_after_seconds)
        self.engine = SearchEngine(cache_size=cache_size or settings.search_cache_size)
        self._clock = clock

        self.projects: list[Project] = []
        self.loading = False
        self.is_refreshing = False
        self.last_fetch: datetime | None = None
        self.error: str | None = None
        self.refresh_count = 0
        self.background_task: asyncio.Task[bool] | None = None
        self._listeners: list[Callable[[list[Project]], Any]] = []

    def subscribe(self, listener: Callable[[list[Project]], Any]) -> None:
        """데이터셋이 바뀔 때 호출될 콜백을 등록한다."""
        self._listeners.append(listener)

    def _set_projects(self, projects: list[Project], fetched_at: datetime) -> None:
        self.projects = projects
        self.last_fetch = fetched_at
        self.engine.load(projects)
        for listener in self._listeners:
            listener(projects)

    def is_stale(self, now: datetime | None = None) -> bool:
        """마지막 수집 이후 ``stale_after``가 지났는지 확인한다."""
        if self.last_fetch is None:
            return True
        return (now or self._clock()) - self.last_fetch > self.stale_after

    async def load(self) -> None:
        """초기 로드. 캐시가 있으면 즉시 사용하고, 없으면 새로 가져온다."""
        try:
            cached = self.cache.load()
        except CacheEmptyError:
            logger.info("No cached data found, fetching fresh...")
            await self.refresh()
            return

        self._set_projects(cached.projects, cached.fetched_at)
        logger.info(f"Loaded {len(cached.projects)} cached projects")

        if self.is_stale():
            logger.info("Data is stale, refreshing in background...")
            self.background_task = asyncio.create_task(self.refresh(background=True))

    async def refresh(self, background: bool = False) -> bool:
        """프로젝트를 새로 가져온다. 실패하면 기존 데이터를 유지하고 오류를 기록한다.

        Returns:
            성공 여부
        """
        if not background:
            self.loading = True
            self.is_refreshing = True
        self.error = None

        try:
            projects = await self.source.fetch()
        except FetchError as e:
            logger.error(f"Failed to fetch projects: {e}")
            self.error = str(e) or "Failed to fetch projects"
            return False
        finally:
            if not background:
                self.loading = False
                self.is_refreshing = False

        fetched_at = self._clock()
        self._set_projects(projects, fetched_at)
        self.cache.save(projects, fetched_at)
        self.refresh_count += 1
        logger.info(f"Successfully loaded {len(projects)} projects")
        return True

    async def refresh_if_stale(self) -> bool:
        """오래된 데이터일 때만 백그라운드 새로고침을 수행한다."""
        if not self.is_stale():
            return False
        logger.info("Data became stale, refreshing in background...")
        return await self.refresh(background=True)

    def clear_error(self) -> None:
        """표시 중인 오류를 지운다."""
        self.error = None
