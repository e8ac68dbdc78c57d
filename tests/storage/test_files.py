"""JSON 파일 캐시 테스트."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from arena_lens.errors import CacheEmptyError
from arena_lens.models import Project
from arena_lens.storage.files import FILE_PREFIX, ProjectFileCache

FETCHED_AT = datetime(2025, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def cache(tmp_path: Path) -> ProjectFileCache:
    """임시 디렉토리를 쓰는 캐시를 반환한다."""
    return ProjectFileCache(tmp_path / "data")


class TestProjectFileCache:
    """ProjectFileCache 테스트."""

    def test_save_and_load(self, cache: ProjectFileCache, projects: list[Project]) -> None:
        """저장한 프로젝트를 다시 읽는다."""
        path = cache.save(projects, FETCHED_AT)
        loaded = cache.load()

        assert path.name.startswith(FILE_PREFIX)
        assert loaded.path == path
        assert loaded.fetched_at == FETCHED_AT
        assert [p.id for p in loaded.projects] == [1, 2]
        assert loaded.projects[0].team_size == 2

    def test_load_without_files(self, cache: ProjectFileCache) -> None:
        """캐시 파일이 없으면 CacheEmptyError."""
        with pytest.raises(CacheEmptyError):
            cache.load()

    def test_load_latest(self, cache: ProjectFileCache, projects: list[Project]) -> None:
        """가장 최근 파일을 읽는다."""
        cache.save(projects, FETCHED_AT)
        cache.save(projects[:1], datetime(2025, 5, 2, tzinfo=UTC))

        assert len(cache.load().projects) == 1

    def test_unreadable_file(self, cache: ProjectFileCache) -> None:
        """깨진 파일은 CacheEmptyError."""
        cache.directory.mkdir(parents=True)
        (cache.directory / f"{FILE_PREFIX}broken.json").write_text("{not json")

        with pytest.raises(CacheEmptyError):
            cache.load()

    def test_plain_list_file(self, cache: ProjectFileCache, raw_projects: list[dict]) -> None:
        """프로젝트 배열만 담긴 파일도 읽는다."""
        cache.directory.mkdir(parents=True)
        (cache.directory / f"{FILE_PREFIX}legacy.json").write_text(json.dumps(raw_projects))

        assert len(cache.load().projects) == 2

    def test_last_fetch_time_and_clear(
        self, cache: ProjectFileCache, projects: list[Project]
    ) -> None:
        """마지막 수집 시각을 읽고 캐시를 비운다."""
        assert cache.last_fetch_time() is None

        cache.save(projects, FETCHED_AT)
        assert cache.last_fetch_time() == FETCHED_AT

        assert cache.clear() == 1
        assert cache.latest_path() is None

    def test_naive_fetched_at_is_utc(
        self, cache: ProjectFileCache, projects: list[Project]
    ) -> None:
        """타임존 없는 수집 시각은 UTC로 읽는다."""
        cache.save(projects, datetime(2025, 1, 1))

        assert cache.load().fetched_at == datetime(2025, 1, 1, tzinfo=UTC)
        assert cache.last_fetch_time() == datetime(2025, 1, 1, tzinfo=UTC)
