"""검색 인덱스 빌더."""

from collections.abc import Iterable
from dataclasses import dataclass

from arena_lens.models import Project


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """키 입력마다 문자열을 다시 정규화하지 않도록 미리 계산한 프로젝트 투영."""

    project: Project
    searchable_text: str
    normalized_name: str
    normalized_description: str
    normalized_country: str
    normalized_tracks: tuple[str, ...]
    team_size: int


def build_entry(project: Project) -> IndexEntry:
    """단일 프로젝트의 인덱스 엔트리를 만든다."""
    name = project.name.lower()
    description = project.description.lower()
    return IndexEntry(
        project=project,
        searchable_text=f"{name} {description}".strip(),
        normalized_name=name,
        normalized_description=description,
        normalized_country=project.country.lower(),
        normalized_tracks=tuple(track.lower() for track in project.tracks),
        team_size=project.team_size,
    )


def build_index(projects: Iterable[Project]) -> tuple[IndexEntry, ...]:
    """프로젝트 목록 전체의 인덱스를 만든다.

    데이터셋이 바뀌면 부분 갱신 없이 다시 만든다.
    """
    return tuple(build_entry(project) for project in projects)
