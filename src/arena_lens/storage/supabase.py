"""Supabase 스토리지 모듈."""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from supabase import Client, create_client

from arena_lens.models import Project

logger = logging.getLogger(__name__)


class SupabaseStorage:
    """로컬 스냅샷을 Supabase에 미러링한다."""

    def __init__(self, url: str | None, key: str | None) -> None:
        """
        Args:
            url: Supabase 프로젝트 URL
            key: Supabase anon key
        """
        self.client: Client | None = None
        if url and key:
            self.client = create_client(url, key)

    @property
    def is_configured(self) -> bool:
        """Supabase가 설정되었는지 확인한다."""
        return self.client is not None

    def _project_row(self, project: Project, now: str) -> dict[str, object]:
        return {
            "id": project.id,
            "name": project.name,
            "slug": project.slug,
            "description": project.description,
            "tracks": project.tracks,
            "country": project.country,
            "twitter_handle": project.twitter_handle,
            "team_size": project.team_size,
            "updated_at": now,
        }

    async def mirror_snapshot(
        self,
        projects: Sequence[Project],
        recorded_at: datetime | None = None,
    ) -> int:
        """프로젝트를 upsert하고 지표 스냅샷을 추가한다. 기록한 스냅샷 수를 반환한다."""
        if not self.client or not projects:
            return 0

        now = (recorded_at or datetime.now(UTC)).isoformat()

        self.client.table("projects").upsert(
            [self._project_row(p, now) for p in projects], on_conflict="id"
        ).execute()

        metrics = [
            {
                "project_id": p.id,
                "likes": p.likes,
                "comments": p.comments,
                "recorded_at": now,
            }
            for p in projects
        ]
        self.client.table("project_metrics").insert(metrics).execute()

        logger.info(f"Mirrored {len(metrics)} project snapshots to Supabase")
        return len(metrics)
