"""집계 지표 테스트."""

from collections.abc import Callable

import pytest

from arena_lens.analytics import (
    compute_metrics,
    country_counts,
    team_size_distribution,
    top_engaged,
    track_engagement,
    unique_values,
)
from arena_lens.models import Project


class TestComputeMetrics:
    """compute_metrics 테스트."""

    def test_totals_and_averages(self, projects: list[Project]) -> None:
        """합계와 평균을 계산한다."""
        metrics = compute_metrics(projects)

        assert metrics.total_projects == 2
        assert metrics.total_likes == 52
        assert metrics.total_comments == 10
        assert metrics.avg_likes == pytest.approx(26.0)
        assert metrics.projects_with_likes == 2

    def test_empty(self) -> None:
        """빈 목록은 0."""
        metrics = compute_metrics([])

        assert metrics.total_projects == 0
        assert metrics.avg_likes == 0.0


def test_track_engagement_sorted_by_likes(projects: list[Project]) -> None:
    """좋아요 합계 순으로 트랙을 정렬한다."""
    stats = track_engagement(projects)

    assert [s["track"] for s in stats] == ["DeFi", "Infra"]
    assert stats[0]["likes"] == 42
    assert stats[0]["avg_comments"] == pytest.approx(7.0)


def test_country_counts_skip_empty(make_project: Callable[..., Project]) -> None:
    """국가가 비어있는 프로젝트는 세지 않는다."""
    projects = [
        make_project(1, country="US"),
        make_project(2, country="US"),
        make_project(3, country="KR"),
        make_project(4),
    ]
    assert country_counts(projects) == [("US", 2), ("KR", 1)]


def test_team_size_distribution(make_project: Callable[..., Project]) -> None:
    """팀 규모 구간별로 센다."""
    projects = [make_project(i, team_size=size) for i, size in enumerate([1, 2, 3, 5, 9], 1)]

    assert team_size_distribution(projects) == {"1": 1, "2-3": 2, "4-5": 1, "6-8": 0, "9+": 1}


def test_top_engaged(make_project: Callable[..., Project]) -> None:
    """좋아요 + 댓글 합계 순."""
    projects = [
        make_project(1, likes=5, comments=0),
        make_project(2, likes=1, comments=9),
        make_project(3, likes=3, comments=3),
    ]
    assert [p.id for p in top_engaged(projects, top=2)] == [2, 3]


def test_unique_values(projects: list[Project]) -> None:
    """필터 옵션용 고유 값."""
    assert unique_values(projects, "tracks") == ["DeFi", "Infra"]
    assert unique_values(projects, "country") == ["US"]
