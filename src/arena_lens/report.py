"""터미널 리포트 렌더링 (Rich)."""

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from arena_lens.analytics import compute_metrics, track_engagement
from arena_lens.models import Project, TrendRecord

SPARK_CHARS = "▁▂▃▄▅▆▇█"
FLAT_CHAR = "─"


def truncate(text: str | None, max_length: int = 40) -> str:
    """``max_length``를 넘으면 말줄임표로 자른다. 비어있으면 ``N/A``."""
    if not text:
        return "N/A"
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def format_number(value: int | None) -> str:
    """천 단위 구분 기호를 붙인다."""
    return f"{value or 0:,}"


def format_change(current: int, previous: int | None) -> str:
    """이전 값 대비 변화량과 변화율.

    이전 값이 없거나 0이면 현재 값만 ``+N`` 형태로 표시한다.
    """
    if not previous:
        return f"+{current}" if current > 0 else "0"
    change = current - previous
    percentage = change / previous * 100
    sign = "+" if change >= 0 else ""
    return f"{sign}{change} ({sign}{percentage:.1f}%)"


def generate_sparkline(values: Sequence[int], width: int = 10) -> str:
    """최근 ``width``개 값으로 스파크라인을 만든다. 변화가 없으면 평평한 선."""
    if not values:
        return FLAT_CHAR * width

    low, high = min(values), max(values)
    spread = high - low
    if spread == 0:
        return FLAT_CHAR * width

    top = len(SPARK_CHARS) - 1
    return "".join(SPARK_CHARS[(value - low) * top // spread] for value in values[-width:])


def _rank_style(rank: int, likes: int) -> str:
    if rank == 1:
        return "bold yellow"
    if rank == 2:
        return "bold white"
    if rank == 3:
        return "yellow"
    if likes >= 20:
        return "green"
    if likes >= 10:
        return "cyan"
    if likes >= 5:
        return "blue"
    return "white"


def _trend_text(trend: TrendRecord | None) -> str:
    if trend is None or trend.likes_change == 0:
        return "0"
    if trend.likes_change > 0:
        return f"[green]+{trend.likes_change}[/green]"
    return f"[red]{trend.likes_change}[/red]"


def render_projects_table(
    console: Console,
    projects: Sequence[Project],
    trends: Sequence[TrendRecord] = (),
) -> None:
    """좋아요 순 프로젝트 테이블을 출력한다."""
    trend_map = {t.project_id: t for t in trends}

    table = Table(
        title="[bold cyan]📊 좋아요 순 프로젝트[/bold cyan]",
        show_header=True,
        header_style="bold cyan",
        expand=True,
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("❤️ Likes", justify="right", width=8)
    table.add_column("트렌드", justify="right", width=7)
    table.add_column("💬", justify="right", width=6)
    table.add_column("프로젝트", style="bold")
    table.add_column("트랙", width=20)
    table.add_column("국가", width=12)
    table.add_column("팀", justify="right", width=4)

    for rank, project in enumerate(projects, 1):
        table.add_row(
            str(rank),
            format_number(project.likes),
            _trend_text(trend_map.get(project.id)),
            format_number(project.comments),
            f"[link={project.arena_url}]{truncate(project.name, 30)}[/link]",
            truncate(", ".join(project.tracks), 18),
            truncate(project.country, 10),
            str(project.team_size),
            style=_rank_style(rank, project.likes),
        )

    console.print(table)


def render_summary(
    console: Console,
    projects: Sequence[Project],
    filtered: Sequence[Project],
) -> None:
    """전체 데이터셋 기준 요약 통계를 출력한다."""
    metrics = compute_metrics(projects)
    total = metrics.total_projects

    if len(filtered) != total:
        shown = f"{format_number(len(filtered))} / {format_number(total)}개 프로젝트"
    else:
        shown = f"{format_number(total)}개 프로젝트"

    with_comments = (
        metrics.projects_with_comments / total * 100 if total else 0.0
    )
    lines = [
        f"[green]표시:[/green] {shown}",
        f"[green]총 좋아요:[/green] {format_number(metrics.total_likes)}",
        f"[green]총 댓글:[/green] {format_number(metrics.total_comments)}",
        f"[green]평균 좋아요:[/green] {metrics.avg_likes:.1f}",
        f"[green]평균 댓글:[/green] {metrics.avg_comments:.1f}",
        f"[green]좋아요 받은 프로젝트:[/green] "
        f"{format_number(metrics.projects_with_likes)} ({metrics.engagement_rate:.1f}%)",
        f"[green]댓글 받은 프로젝트:[/green] "
        f"{format_number(metrics.projects_with_comments)} ({with_comments:.1f}%)",
    ]
    console.print(
        Panel("\n".join(lines), title="[bold cyan]📈 요약 통계[/bold cyan]", border_style="cyan")
    )


def render_track_analysis(console: Console, projects: Sequence[Project]) -> None:
    """좋아요 합계 기준 상위 트랙을 출력한다."""
    stats = track_engagement(projects)
    if not stats:
        return

    table = Table(
        title="[bold blue]🎯 참여도 상위 트랙[/bold blue]",
        show_header=True,
        header_style="bold blue",
    )
    table.add_column("트랙", style="cyan")
    table.add_column("프로젝트", justify="right")
    table.add_column("좋아요", justify="right")
    table.add_column("댓글", justify="right")
    table.add_column("평균", justify="right", style="dim")

    for item in stats:
        table.add_row(
            item["track"],
            format_number(item["count"]),
            format_number(item["likes"]),
            format_number(item["comments"]),
            f"{item['avg_likes']:.1f}/{item['avg_comments']:.1f}",
        )

    console.print(table)


def render_trending(
    console: Console,
    trends: Sequence[TrendRecord],
    period_label: str,
) -> None:
    """기간 내 지표가 오른 프로젝트를 스파크라인과 함께 출력한다."""
    if not trends:
        console.print(f"[dim]최근 {period_label} 동안 지표 변화가 없습니다.[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta", expand=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("프로젝트", style="bold")
    table.add_column("좋아요", justify="right", width=16)
    table.add_column("댓글", justify="right", width=16)
    table.add_column("추이", width=12)

    for rank, trend in enumerate(trends, 1):
        table.add_row(
            str(rank),
            truncate(trend.name, 30),
            format_change(trend.current_likes, trend.start_likes),
            format_change(trend.current_comments, trend.start_comments),
            f"[green]{generate_sparkline([p.likes for p in trend.history])}[/green]",
        )

    console.print(
        Panel(
            table,
            title=f"[bold magenta]🔥 최근 {period_label} 트렌딩[/bold magenta]",
            border_style="magenta",
        )
    )
