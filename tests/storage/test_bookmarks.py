"""북마크/최근 검색어/필터 프리셋 저장소 테스트."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from arena_lens.config import settings
from arena_lens.models import FilterSpec, Project, SortField, SortOrder
from arena_lens.storage.bookmarks import (
    BOOKMARKS_FILE,
    RECENT_SEARCHES_FILE,
    SAVED_FILTERS_FILE,
    BookmarkStore,
    RecentSearches,
    SavedFilterStore,
)

CREATED_AT = datetime(2025, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """아직 만들어지지 않은 데이터 디렉토리를 반환한다."""
    return tmp_path / "data"


class TestBookmarkStore:
    """BookmarkStore 테스트."""

    def test_empty(self, data_dir: Path) -> None:
        """파일이 없으면 북마크도 없다."""
        bookmarks = BookmarkStore(data_dir)

        assert bookmarks.ids == []
        assert len(bookmarks) == 0
        assert bookmarks.is_bookmarked(1) is False

    def test_toggle(self, data_dir: Path) -> None:
        """토글하면 추가되고 다시 토글하면 빠진다."""
        bookmarks = BookmarkStore(data_dir)

        assert bookmarks.toggle(1) is True
        assert bookmarks.is_bookmarked(1) is True
        assert bookmarks.toggle(1) is False
        assert bookmarks.ids == []

    def test_add_is_idempotent(self, data_dir: Path) -> None:
        """같은 ID를 두 번 추가해도 하나만 남는다."""
        bookmarks = BookmarkStore(data_dir)
        bookmarks.add(2)
        bookmarks.add(1)
        bookmarks.add(2)

        assert bookmarks.ids == [2, 1]

    def test_persists_across_instances(self, data_dir: Path) -> None:
        """파일에 저장되어 새 인스턴스에서도 보인다."""
        BookmarkStore(data_dir).add(7)

        assert BookmarkStore(data_dir).ids == [7]

    def test_remove_and_clear(self, data_dir: Path) -> None:
        """삭제와 전체 삭제."""
        bookmarks = BookmarkStore(data_dir)
        for project_id in (1, 2, 3):
            bookmarks.add(project_id)

        bookmarks.remove(2)
        assert bookmarks.ids == [1, 3]

        bookmarks.clear()
        assert len(bookmarks) == 0

    def test_bookmarked_projects(self, data_dir: Path, projects: list[Project]) -> None:
        """북마크한 프로젝트만 원래 순서로 돌려준다."""
        bookmarks = BookmarkStore(data_dir)
        bookmarks.add(2)

        assert [p.name for p in bookmarks.bookmarked_projects(projects)] == ["Other"]

    def test_broken_file_is_empty(self, data_dir: Path) -> None:
        """깨진 파일은 빈 북마크로 본다."""
        data_dir.mkdir(parents=True)
        (data_dir / BOOKMARKS_FILE).write_text("{not json")

        bookmarks = BookmarkStore(data_dir)
        assert bookmarks.ids == []

        bookmarks.add(1)
        assert bookmarks.ids == [1]

    def test_ignores_non_integer_entries(self, data_dir: Path) -> None:
        """정수가 아닌 항목은 무시한다."""
        data_dir.mkdir(parents=True)
        (data_dir / BOOKMARKS_FILE).write_text(json.dumps([1, "2", True, None, 3]))

        assert BookmarkStore(data_dir).ids == [1, 3]


class TestRecentSearches:
    """RecentSearches 테스트."""

    def test_newest_first_without_duplicates(self, data_dir: Path) -> None:
        """최신 검색어가 맨 앞에 오고 중복은 앞으로 옮겨진다."""
        recent = RecentSearches(data_dir)
        recent.add("defi")
        recent.add("nft")
        recent.add("defi")

        assert recent.items == ["defi", "nft"]

    def test_blank_query_is_ignored(self, data_dir: Path) -> None:
        """공백뿐인 검색어는 저장하지 않는다."""
        recent = RecentSearches(data_dir)
        recent.add("   ")

        assert recent.items == []

    def test_capped(self, data_dir: Path) -> None:
        """최대 10개까지만 보관한다."""
        recent = RecentSearches(data_dir)
        for i in range(12):
            recent.add(f"query {i}")

        assert len(recent.items) == 10
        assert recent.items[0] == "query 11"
        assert "query 1" not in recent.items

    def test_remove_and_clear(self, data_dir: Path) -> None:
        """삭제와 전체 삭제."""
        recent = RecentSearches(data_dir)
        recent.add("dex")
        recent.add("wallet")

        recent.remove("dex")
        assert recent.items == ["wallet"]

        recent.clear()
        assert recent.items == []
        recent.clear()


class TestSavedFilterStore:
    """SavedFilterStore 테스트."""

    def test_save_and_load(self, data_dir: Path) -> None:
        """저장한 프리셋은 같은 FilterSpec으로 다시 읽힌다."""
        spec = FilterSpec(
            search="dex",
            tracks=["DeFi"],
            countries=["US"],
            team_size_range=(2, 5),
            likes_range=(10, 80),
            sort_by=SortField.comments,
            sort_order=SortOrder.asc,
        )
        store = SavedFilterStore(data_dir)

        preset_id = store.save("US DeFi", spec, created_at=CREATED_AT)

        assert SavedFilterStore(data_dir).load(preset_id) == spec
        [preset] = store.filters
        assert preset.name == "US DeFi"
        assert preset.created_at == CREATED_AT

    def test_ids_are_unique(self, data_dir: Path) -> None:
        """프리셋마다 다른 ID를 받는다."""
        store = SavedFilterStore(data_dir)
        first = store.save("a", FilterSpec())
        second = store.save("b", FilterSpec(search="nft"))

        assert first != second
        assert [p.name for p in store.filters] == ["a", "b"]

    def test_delete(self, data_dir: Path) -> None:
        """삭제한 프리셋은 읽을 수 없다."""
        store = SavedFilterStore(data_dir)
        keep = store.save("keep", FilterSpec())
        drop = store.save("drop", FilterSpec(search="dex"))

        store.delete(drop)

        assert store.load(drop) is None
        assert store.load(keep) == FilterSpec()

    def test_unknown_id(self, data_dir: Path) -> None:
        """없는 ID는 None."""
        assert SavedFilterStore(data_dir).load("missing") is None

    def test_skips_invalid_entries(self, data_dir: Path) -> None:
        """형식이 맞지 않는 항목은 건너뛴다."""
        store = SavedFilterStore(data_dir)
        preset_id = store.save("ok", FilterSpec(search="dex"))
        raw = json.loads((data_dir / SAVED_FILTERS_FILE).read_text(encoding="utf-8"))
        raw.append({"name": "no id"})
        (data_dir / SAVED_FILTERS_FILE).write_text(json.dumps(raw), encoding="utf-8")

        assert [p.id for p in store.filters] == [preset_id]


def test_defaults_to_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """디렉토리를 주지 않으면 설정의 데이터 디렉토리를 쓴다."""
    monkeypatch.setattr(settings, "data_dir", tmp_path)

    BookmarkStore().add(1)
    RecentSearches().add("dex")
    SavedFilterStore().save("all", FilterSpec())

    assert (tmp_path / BOOKMARKS_FILE).is_file()
    assert (tmp_path / RECENT_SEARCHES_FILE).is_file()
    assert (tmp_path / SAVED_FILTERS_FILE).is_file()
