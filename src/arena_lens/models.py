"""데이터 모델 정의."""

import json
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from arena_lens.config import settings

DEFAULT_TEAM_SIZE_RANGE: tuple[int, int] = (1, 50)
DEFAULT_LIKES_RANGE: tuple[int, int] = (0, 100)


class _WireModel(BaseModel):
    """업스트림 API와 같은 camelCase 키로 직렬화되는 모델."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TeamMember(_WireModel):
    """팀 멤버 정보."""

    id: int = Field(default=0, description="멤버 ID")
    username: str = Field(default="", description="사용자 이름")
    about_you: str = Field(default="", description="자기 소개")
    display_name: str = Field(default="", description="표시 이름")
    avatar_url: str = Field(default="", description="아바타 URL")
    is_editor: bool = Field(default=False, description="편집 권한 여부")


class ProjectImage(_WireModel):
    """프로젝트 대표 이미지."""

    id: int = 0
    name: str = ""
    url: str = ""
    mimetype: str = ""
    size: int = 0
    uid: str = ""


class Project(_WireModel):
    """검증을 통과한 해커톤 프로젝트."""

    id: int = Field(gt=0, description="프로젝트 ID")
    name: str = Field(description="프로젝트 이름")
    slug: str = Field(description="URL 슬러그")
    description: str = Field(default="", description="프로젝트 설명")
    country: str = Field(default="", description="국가")
    tracks: list[str] = Field(default_factory=list, description="참가 트랙")
    team_members: list[TeamMember] = Field(default_factory=list, description="팀 멤버")
    likes: int = Field(default=0, ge=0, description="좋아요 수")
    comments: int = Field(default=0, ge=0, description="댓글 수")

    repo_link: str = Field(default="", description="저장소 URL")
    presentation_link: str = Field(default="", description="발표 자료 URL")
    technical_demo_link: str = Field(default="", description="데모 URL")
    twitter_handle: str = Field(default="", description="트위터 핸들")

    additional_info: str = Field(default="", description="추가 정보")
    owner_id: int = Field(default=0, ge=0, description="소유자 ID")
    submitted_at: datetime = Field(description="제출 시각")
    hackathon_id: int = Field(default=0, ge=0, description="해커톤 ID")
    is_university_project: bool = Field(default=False, description="대학 프로젝트 여부")
    university_name: str = Field(default="", description="대학 이름")
    image: ProjectImage = Field(default_factory=ProjectImage, description="대표 이미지")
    prize: Any | None = Field(default=None, description="수상 정보")
    random_order: str = Field(default="0", description="업스트림 정렬 키")

    @computed_field(alias="teamSize")  # type: ignore[prop-decorator]
    @property
    def team_size(self) -> int:
        """팀 규모. 멤버가 없으면 1인 팀으로 본다."""
        return len(self.team_members) or 1

    @property
    def arena_url(self) -> str:
        """Arena 상세 페이지 URL."""
        return f"{settings.arena_base_url.rstrip('/')}/{self.slug}"


class SortField(str, Enum):
    """정렬 기준."""

    likes = "likes"
    comments = "comments"
    name = "name"
    country = "country"
    team_size = "teamSize"


class SortOrder(str, Enum):
    """정렬 방향."""

    asc = "asc"
    desc = "desc"


class FilterSpec(BaseModel):
    """검색/필터/정렬 조건. 구조적으로 같으면 같은 값으로 취급한다.

    잘못된 입력은 거부하지 않고 기본값으로 보정한다.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    search: str = ""
    tracks: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    team_size_range: tuple[int, int] = DEFAULT_TEAM_SIZE_RANGE
    likes_range: tuple[int, int] = DEFAULT_LIKES_RANGE
    sort_by: SortField = SortField.likes
    sort_order: SortOrder = SortOrder.desc

    @field_validator("search", mode="before")
    @classmethod
    def _coerce_search(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("tracks", "countries", mode="before")
    @classmethod
    def _coerce_names(cls, value: Any) -> tuple[str, ...]:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return ()
        return tuple(v for v in value if isinstance(v, str) and v)

    @field_validator("team_size_range", "likes_range", mode="before")
    @classmethod
    def _coerce_range(cls, value: Any, info: ValidationInfo) -> tuple[int, int]:
        default = (
            DEFAULT_TEAM_SIZE_RANGE
            if info.field_name == "team_size_range"
            else DEFAULT_LIKES_RANGE
        )
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            return default
        try:
            low, high = (max(0, int(v)) for v in value)
        except (TypeError, ValueError, OverflowError):
            return default
        return (low, high) if low <= high else (high, low)

    @field_validator("sort_by", mode="before")
    @classmethod
    def _coerce_sort_by(cls, value: Any) -> Any:
        valid = {f.value for f in SortField}
        if isinstance(value, SortField) or (
            isinstance(value, str) and value in valid
        ):
            return value
        return SortField.likes

    @field_validator("sort_order", mode="before")
    @classmethod
    def _coerce_sort_order(cls, value: Any) -> Any:
        if isinstance(value, SortOrder) or (
            isinstance(value, str) and value in ("asc", "desc")
        ):
            return value
        return SortOrder.desc

    @property
    def has_text_search(self) -> bool:
        """두 글자 이상일 때만 텍스트 검색으로 본다."""
        return len(self.search) >= 2

    def updated(self, **updates: Any) -> "FilterSpec":
        """일부 필드를 바꾼 새 FilterSpec을 반환한다 (보정 규칙 재적용)."""
        data = self.model_dump()
        data.update(updates)
        return FilterSpec.model_validate(data)

    def cache_key(self) -> str:
        """필드 순서와 목록 순서에 무관한 정규화 키."""
        payload = {
            "search": self.search.lower(),
            "tracks": sorted({t.lower() for t in self.tracks}),
            "countries": sorted({c.lower() for c in self.countries}),
            "team_size_range": list(self.team_size_range),
            "likes_range": list(self.likes_range),
            "sort_by": self.sort_by.value,
            "sort_order": self.sort_order.value,
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))


class MetricPoint(BaseModel):
    """특정 시점의 참여 지표."""

    likes: int = Field(ge=0)
    comments: int = Field(ge=0)
    recorded_at: datetime


class TrendRecord(BaseModel):
    """기간 내 첫 스냅샷과 마지막 스냅샷의 지표 변화."""

    project_id: int = Field(description="프로젝트 ID")
    name: str = Field(description="프로젝트 이름")
    slug: str = Field(description="URL 슬러그")
    tracks: list[str] = Field(default_factory=list, description="참가 트랙")
    country: str = Field(default="", description="국가")
    current_likes: int
    current_comments: int
    start_likes: int
    start_comments: int
    likes_change: int
    comments_change: int
    latest_time: datetime
    earliest_time: datetime
    history: list[MetricPoint] = Field(
        default_factory=list, description="기간 내 전체 스냅샷 (스파크라인용)"
    )


class ProjectMetrics(BaseModel):
    """프로젝트 집합의 요약 지표."""

    total_projects: int = 0
    total_likes: int = 0
    total_comments: int = 0
    avg_likes: float = 0.0
    avg_comments: float = 0.0
    projects_with_likes: int = 0
    projects_with_comments: int = 0

    @property
    def engagement_rate(self) -> float:
        """좋아요를 하나 이상 받은 프로젝트 비율 (%)."""
        if not self.total_projects:
            return 0.0
        return self.projects_with_likes / self.total_projects * 100
