"""공용 픽스처."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from arena_lens.models import Project, TeamMember
from arena_lens.validation import validate_projects

SUBMITTED_AT = datetime(2025, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def raw_projects() -> list[dict[str, Any]]:
    """업스트림 API 형식의 원본 레코드 두 개를 반환한다."""
    return [
        {
            "id": 1,
            "name": "Hakata Finance",
            "slug": "hakata-finance",
            "description": "perp dex",
            "likes": 42,
            "comments": 7,
            "country": "US",
            "tracks": ["DeFi"],
            "teamMembers": [
                {"id": 11, "username": "alice", "displayName": "Alice"},
                {"id": 12, "username": "bob", "displayName": "Bob"},
            ],
            "repoLink": "https://github.com/hakata/finance",
            "submittedAt": "2025-05-01T12:00:00Z",
        },
        {
            "id": 2,
            "name": "Other",
            "slug": "other",
            "description": "Hakata integration",
            "likes": 10,
            "comments": 3,
            "country": "US",
            "tracks": ["Infra"],
            "teamMembers": [],
            "submittedAt": "2025-05-02T08:30:00Z",
        },
    ]


@pytest.fixture
def projects(raw_projects: list[dict[str, Any]]) -> list[Project]:
    """검증을 거친 시나리오 프로젝트 두 개를 반환한다."""
    return validate_projects(raw_projects).projects


@pytest.fixture
def make_project() -> Callable[..., Project]:
    """필요한 필드만 지정해 Project를 만드는 팩토리를 반환한다."""

    def _make(project_id: int, name: str | None = None, team_size: int = 1, **fields: Any) -> Project:
        members = [
            TeamMember(id=project_id * 100 + i, username=f"member{i}")
            for i in range(team_size)
        ]
        data: dict[str, Any] = {
            "id": project_id,
            "name": name or f"Project {project_id}",
            "slug": f"project-{project_id}",
            "team_members": members,
            "submitted_at": SUBMITTED_AT,
        }
        data.update(fields)
        return Project(**data)

    return _make
