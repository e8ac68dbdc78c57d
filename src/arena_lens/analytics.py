"""프로젝트 집계 지표 (요약 카드, 차트, 리포트용)."""

from collections import Counter
from collections.abc import Sequence
from typing import TypedDict

from arena_lens.models import Project, ProjectMetrics


class TrackStats(TypedDict):
    """트랙별 참여 지표."""

    track: str
    count: int
    likes: int
    comments: int
    avg_likes: float
    avg_comments: float


TEAM_SIZE_BUCKETS = ("1", "2-3", "4-5", "6-8", "9+")


def compute_metrics(projects: Sequence[Project]) -> ProjectMetrics:
    """전체 좋아요/댓글 합계와 평균을 계산한다."""
    total = len(projects)
    total_likes = sum(p.likes for p in projects)
    total_comments = sum(p.comments for p in projects)
    return ProjectMetrics(
        total_projects=total,
        total_likes=total_likes,
        total_comments=total_comments,
        avg_likes=total_likes / total if total else 0.0,
        avg_comments=total_comments / total if total else 0.0,
        projects_with_likes=sum(1 for p in projects if p.likes > 0),
        projects_with_comments=sum(1 for p in projects if p.comments > 0),
    )


def track_engagement(projects: Sequence[Project], top: int = 8) -> list[TrackStats]:
    """좋아요 합계 기준 상위 트랙."""
    totals: dict[str, list[int]] = {}
    for project in projects:
        for track in project.tracks:
            count, likes, comments = totals.get(track, [0, 0, 0])
            totals[track] = [count + 1, likes + project.likes, comments + project.comments]

    stats = [
        TrackStats(
            track=track,
            count=count,
            likes=likes,
            comments=comments,
            avg_likes=likes / count,
            avg_comments=comments / count,
        )
        for track, (count, likes, comments) in totals.items()
    ]
    stats.sort(key=lambda s: s["likes"], reverse=True)
    return stats[:top]


def country_counts(projects: Sequence[Project], top: int = 10) -> list[tuple[str, int]]:
    """프로젝트 수 기준 상위 국가. 국가가 비어있으면 제외한다."""
    counter = Counter(p.country for p in projects if p.country)
    return counter.most_common(top)


def _team_size_bucket(size: int) -> str:
    if size == 1:
        return "1"
    if size <= 3:
        return "2-3"
    if size <= 5:
        return "4-5"
    if size <= 8:
        return "6-8"
    return "9+"


def team_size_distribution(projects: Sequence[Project]) -> dict[str, int]:
    """팀 규모 구간별 프로젝트 수."""
    counter = Counter(_team_size_bucket(p.team_size) for p in projects)
    return {bucket: counter.get(bucket, 0) for bucket in TEAM_SIZE_BUCKETS}


def top_engaged(projects: Sequence[Project], top: int = 15) -> list[Project]:
    """좋아요 + 댓글 합계 기준 상위 프로젝트."""
    return sorted(projects, key=lambda p: p.likes + p.comments, reverse=True)[:top]


def unique_values(projects: Sequence[Project], field: str) -> list[str]:
    """필터 옵션용 고유 값 목록 (정렬됨). 목록 필드는 펼친다."""
    values: set[str] = set()
    for project in projects:
        value = getattr(project, field)
        items = value if isinstance(value, list) else [value]
        values.update(str(item) for item in items if item)
    return sorted(values)
