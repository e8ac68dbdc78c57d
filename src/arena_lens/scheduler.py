"""스케줄러 엔트리포인트 (cron / GitHub Actions용 수집기)."""

import asyncio
import logging
from datetime import UTC, datetime

from arena_lens.config import settings
from arena_lens.sources import ColosseumSource
from arena_lens.sources.base import Source
from arena_lens.storage import ProjectFileCache, SnapshotStore, SupabaseStorage
from arena_lens.storage.snapshots import SaveResult

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def run(source: Source | None = None) -> SaveResult:
    """프로젝트를 수집해 캐시/스냅샷/Supabase에 기록한다."""
    logger.info("Starting arena-lens collector")

    # 1. Colosseum 수집
    logger.info("Fetching Colosseum projects...")
    source = source or ColosseumSource()
    projects = await source.fetch()
    recorded_at = datetime.now(UTC)

    # 2. JSON 캐시
    path = ProjectFileCache(settings.data_dir).save(projects, recorded_at)
    logger.info(f"Cached {len(projects)} projects to {path}")

    # 3. 로컬 스냅샷
    with SnapshotStore(settings.database_url) as store:
        result = store.save_projects(projects, recorded_at)

    # 4. Supabase 미러
    storage = SupabaseStorage(url=settings.supabase_url, key=settings.supabase_key)
    if storage.is_configured:
        logger.info("Mirroring to Supabase...")
        await storage.mirror_snapshot(projects, recorded_at)
    else:
        logger.warning("Supabase not configured, skipping mirror")

    logger.info(f"Collector completed: {result.saved} saved, {result.failed} failed")
    return result


def main() -> None:
    """CLI 엔트리포인트."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
