"""원본 프로젝트 레코드 검증 및 정제 모듈."""

import logging
import math
import re
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, ValidationError

from arena_lens.models import Project, ProjectImage, TeamMember

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 1000
MAX_QUERY_LENGTH = 200
MAX_TRACKS = 10
MAX_TEAM_MEMBERS = 20
MAX_TWITTER_HANDLE_LENGTH = 15

_ANGLE_BRACKETS = re.compile(r"[<>]")
_UNSAFE_SCHEMES = re.compile(r"javascript:|data:", re.IGNORECASE)
# 탭과 줄바꿈은 남긴다
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_QUERY_DISALLOWED = re.compile(r"[^\w\s\-.]")
_TWITTER_DISALLOWED = re.compile(r"[^A-Za-z0-9_]")


class ValidationReport(BaseModel):
    """일괄 검증 결과."""

    projects: list[Project] = Field(default_factory=list, description="유효한 프로젝트")
    dropped: int = Field(default=0, ge=0, description="제외된 레코드 수")


def sanitize_string(value: Any, max_length: int = MAX_TEXT_LENGTH) -> str:
    """HTML/스크립트 주입 벡터와 제어 문자를 제거하고 길이를 제한한다."""
    if not isinstance(value, str) or not value:
        return ""

    cleaned = _ANGLE_BRACKETS.sub("", value)
    cleaned = _UNSAFE_SCHEMES.sub("", cleaned)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    return cleaned[:max_length].strip()


def sanitize_search_query(query: Any) -> str:
    """검색어에는 단어 문자, 공백, 하이픈, 밑줄, 점만 허용한다."""
    if not isinstance(query, str) or not query:
        return ""

    cleaned = _ANGLE_BRACKETS.sub("", query)
    cleaned = _QUERY_DISALLOWED.sub("", cleaned)
    return cleaned[:MAX_QUERY_LENGTH].strip()


def _non_negative_int(value: Any) -> int:
    """숫자를 내림하고 0 이상으로 보정한다. 숫자가 아니면 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if not isinstance(value, float) or not math.isfinite(value):
        return 0
    return max(0, math.floor(value))


def _validate_url(value: Any) -> str:
    """http(s) URL만 허용한다."""
    sanitized = sanitize_string(value)
    if not sanitized:
        return ""

    try:
        parts = urlsplit(sanitized)
    except ValueError:
        return ""

    if parts.scheme not in ("http", "https") or not parts.netloc:
        return ""
    return sanitized


def _validate_date(value: Any) -> datetime:
    """ISO 8601 문자열을 파싱한다. 실패하면 현재 시각."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return datetime.now(UTC)
    else:
        return datetime.now(UTC)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _sanitize_twitter_handle(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    handle = _TWITTER_DISALLOWED.sub("", value.lstrip("@"))
    return handle[:MAX_TWITTER_HANDLE_LENGTH]


def _validate_team_members(value: Any) -> list[TeamMember]:
    if not isinstance(value, list):
        return []

    members = [
        TeamMember(
            id=_non_negative_int(member.get("id")),
            username=sanitize_string(member.get("username")),
            about_you=sanitize_string(member.get("aboutYou")),
            display_name=sanitize_string(member.get("displayName")),
            avatar_url=_validate_url(member.get("avatarUrl")),
            is_editor=bool(member.get("isEditor")),
        )
        for member in value
        if isinstance(member, dict) and member
    ]
    return members[:MAX_TEAM_MEMBERS]


def _validate_tracks(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []

    tracks = [sanitize_string(track) for track in value if isinstance(track, str)]
    return [track for track in tracks if track][:MAX_TRACKS]


def _validate_image(value: Any) -> ProjectImage:
    if not isinstance(value, dict):
        return ProjectImage()

    return ProjectImage(
        id=_non_negative_int(value.get("id")),
        name=sanitize_string(value.get("name")),
        url=_validate_url(value.get("url")),
        mimetype=sanitize_string(value.get("mimetype")),
        size=_non_negative_int(value.get("size")),
        uid=sanitize_string(value.get("uid")),
    )


def _validate_id(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    project_id = math.floor(value)
    return project_id if project_id > 0 else None


def validate_project(data: Any) -> Project | None:
    """원본 레코드를 Project로 변환한다.

    숫자 id와 비어있지 않은 name이 없으면 None을 반환한다. 그 외 필드는
    거부하지 않고 안전한 기본값으로 대체한다. 예외를 던지지 않는다.
    """
    if not isinstance(data, dict):
        return None

    project_id = _validate_id(data.get("id"))
    if project_id is None:
        return None

    name = sanitize_string(data.get("name"))
    if not name:
        return None

    try:
        return Project(
            id=project_id,
            name=name,
            slug=sanitize_string(data.get("slug")) or f"project-{project_id}",
            description=sanitize_string(data.get("description")),
            country=sanitize_string(data.get("country")),
            tracks=_validate_tracks(data.get("tracks")),
            team_members=_validate_team_members(data.get("teamMembers")),
            likes=_non_negative_int(data.get("likes")),
            comments=_non_negative_int(data.get("comments")),
            repo_link=_validate_url(data.get("repoLink")),
            presentation_link=_validate_url(data.get("presentationLink")),
            technical_demo_link=_validate_url(data.get("technicalDemoLink")),
            twitter_handle=_sanitize_twitter_handle(data.get("twitterHandle")),
            additional_info=sanitize_string(data.get("additionalInfo")),
            owner_id=_non_negative_int(data.get("ownerId")),
            submitted_at=_validate_date(data.get("submittedAt")),
            hackathon_id=_non_negative_int(data.get("hackathonId")),
            is_university_project=bool(data.get("isUniversityProject")),
            university_name=sanitize_string(data.get("universityName")),
            image=_validate_image(data.get("image")),
            prize=data.get("prize"),
            random_order=sanitize_string(data.get("randomOrder")) or "0",
        )
    except ValidationError as e:
        logger.debug(f"Project {project_id} failed validation: {e}")
        return None


def validate_projects(data: Any) -> ValidationReport:
    """레코드 목록을 검증한다. 잘못된 레코드와 중복 id/slug는 제외한다."""
    if not isinstance(data, list):
        logger.error("Projects data is not a list")
        return ValidationReport()

    projects: list[Project] = []
    seen_ids: set[int] = set()
    seen_slugs: set[str] = set()

    for item in data:
        project = validate_project(item)
        if project is None:
            continue
        if project.id in seen_ids or project.slug in seen_slugs:
            logger.debug(f"Duplicate project dropped: {project.id}/{project.slug}")
            continue
        seen_ids.add(project.id)
        seen_slugs.add(project.slug)
        projects.append(project)

    dropped = len(data) - len(projects)
    logger.info(f"Validated {len(projects)} out of {len(data)} projects")
    if dropped:
        logger.warning(f"Dropped {dropped} invalid or duplicate project records")
    return ValidationReport(projects=projects, dropped=dropped)


class RateLimiter:
    """슬라이딩 윈도우 방식의 호출 제한기."""

    def __init__(
        self,
        max_calls: int = 10,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            max_calls: 윈도우 내 허용 호출 수
            window: 윈도우 길이 (초)
            clock: 현재 시각을 초 단위로 반환하는 함수
        """
        self.max_calls = max_calls
        self.window = window
        self._clock = clock
        self._calls: list[float] = []

    def _prune(self, now: float) -> None:
        self._calls = [t for t in self._calls if now - t < self.window]

    def can_make_request(self) -> bool:
        """호출 가능하면 호출을 기록하고 True를 반환한다."""
        now = self._clock()
        self._prune(now)
        if len(self._calls) < self.max_calls:
            self._calls.append(now)
            return True
        return False

    def time_until_reset(self) -> float:
        """다음 호출이 가능해질 때까지 남은 시간 (초)."""
        now = self._clock()
        self._prune(now)
        if len(self._calls) < self.max_calls:
            return 0.0
        return max(0.0, self.window - (now - min(self._calls)))


def security_headers() -> dict[str, str]:
    """모든 API 응답에 붙이는 보안 헤더."""
    return {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": (
            "default-src 'self'; script-src 'self' 'unsafe-inline' 'unsafe-eval'; "
            "style-src 'self' 'unsafe-inline'; img-src 'self' data: https:; "
            "font-src 'self' data:;"
        ),
    }
