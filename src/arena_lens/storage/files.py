"""마지막으로 성공한 수집 결과를 JSON 파일로 보관하는 캐시."""

import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from arena_lens.errors import CacheEmptyError
from arena_lens.models import Project
from arena_lens.validation import validate_projects

logger = logging.getLogger(__name__)

FILE_PREFIX = "colosseum_all_projects_"


class CachedProjects(BaseModel):
    """캐시에서 읽은 프로젝트 목록."""

    projects: list[Project]
    fetched_at: datetime
    path: Path


class ProjectFileCache:
    """``colosseum_all_projects_<timestamp>.json`` 파일 캐시."""

    def __init__(self, directory: Path) -> None:
        """
        Args:
            directory: 캐시 파일을 저장할 디렉토리
        """
        self.directory = directory

    def _files(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        files = [
            path
            for path in self.directory.glob(f"{FILE_PREFIX}*.json")
            if path.is_file()
        ]
        return sorted(files, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)

    def latest_path(self) -> Path | None:
        """가장 최근 캐시 파일 경로."""
        files = self._files()
        return files[0] if files else None

    def save(self, projects: Sequence[Project], fetched_at: datetime | None = None) -> Path:
        """프로젝트 목록을 새 캐시 파일로 저장한다."""
        fetched_at = fetched_at or datetime.now(UTC)
        self.directory.mkdir(parents=True, exist_ok=True)

        timestamp = fetched_at.strftime("%Y-%m-%dT%H-%M-%S-%f")
        path = self.directory / f"{FILE_PREFIX}{timestamp}.json"
        payload = {
            "fetched_at": fetched_at.isoformat(),
            "total_projects": len(projects),
            "projects": [p.model_dump(mode="json", by_alias=True) for p in projects],
        }
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        logger.debug(f"Saved {len(projects)} projects to {path}")
        return path

    def load(self) -> CachedProjects:
        """가장 최근 캐시를 읽는다.

        Raises:
            CacheEmptyError: 캐시 파일이 없거나 읽을 수 없을 때
        """
        path = self.latest_path()
        if path is None:
            raise CacheEmptyError("No cached data found")

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CacheEmptyError(f"Cached data is unreadable: {path.name}") from e

        raw = payload.get("projects") if isinstance(payload, dict) else payload
        report = validate_projects(raw)
        if not report.projects:
            raise CacheEmptyError(f"Cached data has no valid projects: {path.name}")

        fetched_at = self._fetched_at(payload, path)
        logger.info(f"Using cached data from: {path.name}")
        return CachedProjects(projects=report.projects, fetched_at=fetched_at, path=path)

    def _fetched_at(self, payload: object, path: Path) -> datetime:
        if isinstance(payload, dict) and isinstance(payload.get("fetched_at"), str):
            try:
                parsed = datetime.fromisoformat(payload["fetched_at"])
            except ValueError:
                pass
            else:
                return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
        return datetime.fromtimestamp(path.stat().st_mtime, UTC)

    def last_fetch_time(self) -> datetime | None:
        """가장 최근 캐시의 수집 시각."""
        path = self.latest_path()
        if path is None:
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        return self._fetched_at(payload, path)

    def clear(self) -> int:
        """모든 캐시 파일을 삭제하고 삭제한 개수를 반환한다."""
        files = self._files()
        for path in files:
            path.unlink()
        return len(files)
