"""CLI 엔트리포인트."""

import asyncio
import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from arena_lens.config import settings
from arena_lens.errors import CacheEmptyError, FetchError
from arena_lens.exporters import ExportFormat, write_export
from arena_lens.models import (
    DEFAULT_LIKES_RANGE,
    DEFAULT_TEAM_SIZE_RANGE,
    FilterSpec,
    Project,
)
from arena_lens.report import (
    render_projects_table,
    render_summary,
    render_track_analysis,
    render_trending,
)
from arena_lens.search import SearchEngine
from arena_lens.sources import ColosseumSource
from arena_lens.storage import ProjectFileCache, SnapshotStore, TrendPeriod

console = Console()
logger = logging.getLogger(__name__)

MAX_TRENDS = 20
LIKES_UPPER_BOUND = 1_000_000


class TeamSize(str, Enum):
    """팀 규모 필터 옵션."""

    small = "1-5"
    medium = "6-10"
    large = "11+"

    @property
    def range(self) -> tuple[int, int]:
        match self:
            case TeamSize.small:
                return (1, 5)
            case TeamSize.medium:
                return (6, 10)
            case TeamSize.large:
                return (11, DEFAULT_TEAM_SIZE_RANGE[1])


app = typer.Typer(
    name="arena-lens",
    help="Colosseum 해커톤 프로젝트를 검색하고 참여 지표 추이를 보여줍니다.",
    no_args_is_help=False,
)


def build_filters(
    track: str | None = None,
    country: str | None = None,
    search: str | None = None,
    team_size: TeamSize | None = None,
    min_likes: int = 0,
) -> FilterSpec:
    """CLI 옵션을 FilterSpec으로 변환한다. 정렬은 좋아요 내림차순."""
    return FilterSpec(
        search=search or "",
        tracks=[track] if track else [],
        countries=[country] if country else [],
        team_size_range=team_size.range if team_size else DEFAULT_TEAM_SIZE_RANGE,
        likes_range=(min_likes, LIKES_UPPER_BOUND) if min_likes > 0 else DEFAULT_LIKES_RANGE,
    )


async def _load_projects(
    offline: bool,
    cache: ProjectFileCache,
    store: SnapshotStore,
) -> list[Project]:
    """API에서 가져오고 실패하면 캐시를 사용한다. 오프라인이면 캐시만 읽는다.

    Raises:
        CacheEmptyError: 캐시로도 프로젝트를 불러올 수 없을 때
    """
    if offline:
        console.print("[cyan]오프라인 모드로 실행합니다.[/cyan]")
        return cache.load().projects

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Colosseum 프로젝트 수집 중...", total=None)
        try:
            projects = await ColosseumSource().fetch()
        except FetchError as e:
            progress.remove_task(task)
            console.print(f"[yellow]API 수집 실패: {e}[/yellow]")
            console.print("[dim]캐시 데이터를 사용합니다...[/dim]")
            cached = cache.load()
            console.print(
                f"[green]✓[/green] 캐시에서 {len(cached.projects):,}개 프로젝트를 불러왔습니다."
            )
            return cached.projects
        progress.remove_task(task)

    recorded_at = datetime.now(UTC)
    cache.save(projects, recorded_at)
    result = store.save_projects(projects, recorded_at)
    logger.debug(f"Database updated: {result.saved} metrics recorded")
    console.print(f"[green]✓[/green] API에서 {len(projects):,}개 프로젝트를 가져왔습니다.")
    return projects


async def _run(
    filters: FilterSpec,
    limit: int,
    trending: TrendPeriod,
    export: ExportFormat | None,
    offline: bool,
) -> None:
    """메인 파이프라인을 실행한다."""
    cache = ProjectFileCache(settings.data_dir)
    with SnapshotStore(settings.database_url) as store:
        projects = await _load_projects(offline, cache, store)

        engine = SearchEngine(projects, cache_size=settings.search_cache_size)
        filtered = engine.search(filters)
        logger.debug(f"Filters matched {len(filtered)} projects")
        if not filtered:
            console.print("[yellow]조건에 맞는 프로젝트가 없습니다.[/yellow]")
            return

        # 텍스트 검색 결과도 좋아요 순으로 보여준다
        ranked = sorted(filtered, key=lambda p: p.likes, reverse=True)
        shown = ranked[:limit]

        logger.debug(f"Getting trending data for {trending.value} period")
        trends = store.compute_trends(trending, min(MAX_TRENDS, limit))

    console.print()
    render_projects_table(console, shown, trends)
    console.print()
    render_summary(console, projects, filtered)
    render_track_analysis(console, filtered)
    render_trending(console, trends, trending.value)

    if export:
        path = write_export(shown, export, settings.export_dir)
        console.print(f"[green]✓[/green] 내보내기 완료: {path}")

    console.print("\n[green]분석 완료![/green]")


@app.command()
def main(
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", min=1, help="표시할 프로젝트 수"),
    ] = 50,
    track: Annotated[
        str | None,
        typer.Option("--track", "-t", help="트랙 필터 (예: DeFi)"),
    ] = None,
    country: Annotated[
        str | None,
        typer.Option("--country", "-c", help="국가 필터"),
    ] = None,
    search: Annotated[
        str | None,
        typer.Option("--search", "-s", help="이름/설명 검색어"),
    ] = None,
    team_size: Annotated[
        TeamSize | None,
        typer.Option("--team-size", help="팀 규모 필터"),
    ] = None,
    min_likes: Annotated[
        int,
        typer.Option("--min-likes", min=0, help="최소 좋아요 수"),
    ] = 0,
    export: Annotated[
        ExportFormat | None,
        typer.Option("--export", "-e", help="결과 내보내기 형식"),
    ] = None,
    trending: Annotated[
        TrendPeriod,
        typer.Option("--trending", help="트렌드 집계 기간"),
    ] = TrendPeriod.hour,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="API를 호출하지 않고 캐시만 사용"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="상세 로그 출력"),
    ] = False,
) -> None:
    """Colosseum 해커톤 프로젝트를 좋아요 순으로 보여줍니다."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    filters = build_filters(track, country, search, team_size, min_likes)

    try:
        asyncio.run(_run(filters, limit, trending, export, offline))
    except KeyboardInterrupt:
        console.print("\n[dim]중단됨[/dim]")
        raise typer.Exit(0) from None
    except CacheEmptyError as e:
        console.print(f"[red]프로젝트를 불러오지 못했습니다: {e}[/red]")
        if not offline:
            console.print("[dim]💡 --offline 옵션으로 캐시 데이터를 사용할 수 있습니다.[/dim]")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]오류 발생: {e}[/red]")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
