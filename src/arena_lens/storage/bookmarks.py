"""북마크, 최근 검색어, 저장된 필터 프리셋을 JSON 파일로 보관하는 모듈."""

import json
import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from arena_lens.config import settings
from arena_lens.models import FilterSpec, Project

logger = logging.getLogger(__name__)

BOOKMARKS_FILE = "bookmarks.json"
RECENT_SEARCHES_FILE = "recent_searches.json"
SAVED_FILTERS_FILE = "saved_filters.json"

DEFAULT_MAX_SEARCHES = 10


def _read_list(path: Path) -> list[Any]:
    """JSON 배열 파일을 읽는다. 없거나 깨진 파일은 빈 목록으로 본다."""
    if not path.is_file():
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load {path.name}: {e}")
        return []
    if not isinstance(payload, list):
        logger.warning(f"Ignoring {path.name}: expected a JSON array")
        return []
    return payload


def _write_list(path: Path, items: list[Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")


class BookmarkStore:
    """북마크한 프로젝트 ID 목록 (추가한 순서 유지)."""

    def __init__(self, directory: Path | None = None) -> None:
        """
        Args:
            directory: ``bookmarks.json``을 저장할 디렉토리. None이면 설정값 사용.
        """
        self.path = (directory or settings.data_dir) / BOOKMARKS_FILE

    @property
    def ids(self) -> list[int]:
        """북마크한 프로젝트 ID."""
        ids: list[int] = []
        for value in _read_list(self.path):
            if isinstance(value, int) and not isinstance(value, bool) and value not in ids:
                ids.append(value)
        return ids

    def __len__(self) -> int:
        return len(self.ids)

    def is_bookmarked(self, project_id: int) -> bool:
        return project_id in self.ids

    def add(self, project_id: int) -> None:
        """북마크에 추가한다. 이미 있으면 아무것도 하지 않는다."""
        ids = self.ids
        if project_id in ids:
            return
        _write_list(self.path, [*ids, project_id])

    def remove(self, project_id: int) -> None:
        _write_list(self.path, [i for i in self.ids if i != project_id])

    def toggle(self, project_id: int) -> bool:
        """북마크 상태를 뒤집고 새 상태를 반환한다."""
        if self.is_bookmarked(project_id):
            self.remove(project_id)
            return False
        self.add(project_id)
        return True

    def clear(self) -> None:
        _write_list(self.path, [])

    def bookmarked_projects(self, projects: Sequence[Project]) -> list[Project]:
        """목록 중 북마크한 프로젝트만 원래 순서대로 반환한다."""
        ids = set(self.ids)
        return [p for p in projects if p.id in ids]


class RecentSearches:
    """최근 검색어. 최신 순, 중복 없음, 최대 ``max_searches``개."""

    def __init__(
        self, directory: Path | None = None, max_searches: int = DEFAULT_MAX_SEARCHES
    ) -> None:
        self.path = (directory or settings.data_dir) / RECENT_SEARCHES_FILE
        self.max_searches = max(1, max_searches)

    @property
    def items(self) -> list[str]:
        searches = [s for s in _read_list(self.path) if isinstance(s, str)]
        return searches[: self.max_searches]

    def add(self, query: str) -> None:
        """검색어를 맨 앞에 추가한다. 공백뿐인 검색어는 무시한다."""
        if not query.strip():
            return
        searches = [query, *(s for s in self.items if s != query)]
        _write_list(self.path, searches[: self.max_searches])

    def remove(self, query: str) -> None:
        _write_list(self.path, [s for s in self.items if s != query])

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SavedFilter(BaseModel):
    """이름을 붙여 저장한 필터 조건."""

    id: str = Field(description="프리셋 ID")
    name: str = Field(description="프리셋 이름")
    filters: FilterSpec = Field(default_factory=FilterSpec, description="필터 조건")
    created_at: datetime = Field(description="저장 시각")


class SavedFilterStore:
    """필터 프리셋 목록 (저장한 순서 유지)."""

    def __init__(self, directory: Path | None = None) -> None:
        self.path = (directory or settings.data_dir) / SAVED_FILTERS_FILE

    @property
    def filters(self) -> list[SavedFilter]:
        """저장된 프리셋. 형식이 맞지 않는 항목은 건너뛴다."""
        presets: list[SavedFilter] = []
        for raw in _read_list(self.path):
            try:
                presets.append(SavedFilter.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid saved filter: {e.error_count()} errors")
        return presets

    def _write(self, presets: list[SavedFilter]) -> None:
        _write_list(self.path, [p.model_dump(mode="json", by_alias=True) for p in presets])

    def save(self, name: str, filters: FilterSpec, created_at: datetime | None = None) -> str:
        """프리셋을 추가하고 새 ID를 반환한다."""
        preset = SavedFilter(
            id=uuid.uuid4().hex,
            name=name,
            filters=filters,
            created_at=created_at or datetime.now(UTC),
        )
        self._write([*self.filters, preset])
        logger.debug(f"Saved filter preset '{name}' ({preset.id})")
        return preset.id

    def delete(self, preset_id: str) -> None:
        self._write([p for p in self.filters if p.id != preset_id])

    def load(self, preset_id: str) -> FilterSpec | None:
        """프리셋의 필터 조건. 없으면 None."""
        for preset in self.filters:
            if preset.id == preset_id:
                return preset.filters
        return None
