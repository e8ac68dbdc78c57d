"""데이터 모델 테스트."""

from collections.abc import Callable

from arena_lens.models import (
    DEFAULT_LIKES_RANGE,
    DEFAULT_TEAM_SIZE_RANGE,
    FilterSpec,
    Project,
    ProjectMetrics,
    SortField,
    SortOrder,
)


class TestProject:
    """Project 모델 테스트."""

    def test_team_size_defaults_to_one(self, make_project: Callable[..., Project]) -> None:
        """멤버가 없으면 1인 팀으로 본다."""
        project = make_project(1, team_size=0)
        assert project.team_size == 1

    def test_dump_uses_camel_case(self, make_project: Callable[..., Project]) -> None:
        """직렬화 키는 업스트림과 같은 camelCase."""
        data = make_project(1, team_size=3).model_dump(mode="json", by_alias=True)

        assert data["teamSize"] == 3
        assert "teamMembers" in data
        assert "submittedAt" in data

    def test_arena_url(self, make_project: Callable[..., Project]) -> None:
        """상세 페이지 URL에 slug가 들어간다."""
        project = make_project(7)
        assert project.arena_url.endswith("/projects/explore/project-7")


class TestFilterSpec:
    """FilterSpec 보정 규칙 테스트."""

    def test_defaults(self) -> None:
        """기본값을 가진다."""
        spec = FilterSpec()

        assert spec.search == ""
        assert spec.tracks == ()
        assert spec.team_size_range == DEFAULT_TEAM_SIZE_RANGE
        assert spec.likes_range == DEFAULT_LIKES_RANGE
        assert spec.sort_by is SortField.likes
        assert spec.sort_order is SortOrder.desc

    def test_invalid_values_fall_back(self) -> None:
        """잘못된 값은 예외 없이 기본값으로 대체된다."""
        spec = FilterSpec.model_validate(
            {
                "search": 42,
                "tracks": "DeFi",
                "countries": None,
                "sortBy": "popularity",
                "sortOrder": "sideways",
                "likesRange": "lots",
            }
        )

        assert spec.search == ""
        assert spec.tracks == ()
        assert spec.countries == ()
        assert spec.sort_by is SortField.likes
        assert spec.sort_order is SortOrder.desc
        assert spec.likes_range == DEFAULT_LIKES_RANGE

    def test_ranges_are_clamped_and_ordered(self) -> None:
        """음수는 0으로, 뒤집힌 범위는 바로잡는다."""
        spec = FilterSpec(team_size_range=(-2, 4), likes_range=(80, 20))

        assert spec.team_size_range == (0, 4)
        assert spec.likes_range == (20, 80)

    def test_accepts_camel_case_sort_field(self) -> None:
        """teamSize 정렬을 지원한다."""
        spec = FilterSpec.model_validate({"sortBy": "teamSize", "sortOrder": "asc"})

        assert spec.sort_by is SortField.team_size
        assert spec.sort_order is SortOrder.asc

    def test_structural_equality(self) -> None:
        """같은 값이면 같은 객체로 취급한다."""
        assert FilterSpec(search="dex", tracks=["DeFi"]) == FilterSpec(
            search="dex", tracks=("DeFi",)
        )

    def test_cache_key_ignores_list_order_and_case(self) -> None:
        """목록 순서와 대소문자가 달라도 같은 키."""
        a = FilterSpec(search="Hakata", tracks=["DeFi", "Infra"], countries=["US"])
        b = FilterSpec(search="hakata", tracks=["infra", "defi"], countries=["us"])

        assert a.cache_key() == b.cache_key()

    def test_cache_key_differs_on_sort(self) -> None:
        """정렬 조건이 다르면 다른 키."""
        a = FilterSpec(sort_order=SortOrder.asc)
        b = FilterSpec(sort_order=SortOrder.desc)

        assert a.cache_key() != b.cache_key()

    def test_updated_returns_new_spec(self) -> None:
        """updated는 원본을 바꾸지 않는다."""
        spec = FilterSpec()
        changed = spec.updated(search="dex", likes_range=(50, 10))

        assert spec.search == ""
        assert changed.search == "dex"
        assert changed.likes_range == (10, 50)

    def test_has_text_search_needs_two_chars(self) -> None:
        """두 글자 이상부터 텍스트 검색이다."""
        assert FilterSpec(search="h").has_text_search is False
        assert FilterSpec(search="ha").has_text_search is True


def test_engagement_rate() -> None:
    """좋아요 받은 프로젝트 비율을 계산한다."""
    assert ProjectMetrics(total_projects=4, projects_with_likes=1).engagement_rate == 25.0
    assert ProjectMetrics().engagement_rate == 0.0
