"""현재 결과를 CSV/JSON/Markdown으로 내보내는 모듈."""

import csv
import io
import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from arena_lens.models import Project

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Rank",
    "ID",
    "Name",
    "Slug",
    "Description",
    "Country",
    "Repo Link",
    "Presentation Link",
    "Demo Link",
    "Likes",
    "Comments",
    "Team Size",
    "Tracks",
    "Team Members",
    "Arena URL",
]

MARKDOWN_LIMIT = 50


class ExportFormat(str, Enum):
    """내보내기 형식."""

    csv = "csv"
    json = "json"
    markdown = "markdown"

    @property
    def extension(self) -> str:
        return "md" if self is ExportFormat.markdown else self.value


def _member_names(project: Project) -> str:
    return "; ".join(m.display_name or m.username for m in project.team_members)


def to_csv(projects: Sequence[Project]) -> str:
    """CSV 문자열을 만든다. 문자열 값은 따옴표로 감싸고 내부 따옴표는 두 번 쓴다."""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(CSV_HEADERS)

    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for rank, project in enumerate(projects, 1):
        writer.writerow(
            [
                rank,
                project.id,
                project.name,
                project.slug,
                project.description,
                project.country,
                project.repo_link,
                project.presentation_link,
                project.technical_demo_link,
                project.likes,
                project.comments,
                project.team_size,
                ", ".join(project.tracks),
                _member_names(project),
                project.arena_url,
            ]
        )
    return buffer.getvalue()


def to_json(projects: Sequence[Project], exported_at: datetime | None = None) -> str:
    """순위와 상세 페이지 URL을 포함한 JSON 문자열을 만든다."""
    exported_at = exported_at or datetime.now(UTC)
    data = {
        "exported_at": exported_at.isoformat(),
        "total_projects": len(projects),
        "projects": [
            {
                "rank": rank,
                **project.model_dump(mode="json", by_alias=True),
                "arena_url": project.arena_url,
            }
            for rank, project in enumerate(projects, 1)
        ],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def _cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def to_markdown(projects: Sequence[Project], generated_at: datetime | None = None) -> str:
    """상위 50개 프로젝트의 Markdown 표를 만든다."""
    generated_at = generated_at or datetime.now(UTC)
    lines = [
        "# Colosseum Projects Report",
        "",
        f"Generated: {generated_at.isoformat()}",
        f"Total Projects: {len(projects)}",
        "",
        "## Top Projects",
        "",
        "| Rank | Name | Likes | Comments | Tracks | Country |",
        "|------|------|-------|----------|--------|---------|",
    ]
    for rank, project in enumerate(projects[:MARKDOWN_LIMIT], 1):
        tracks = ", ".join(project.tracks) or "N/A"
        lines.append(
            f"| {rank} | {_cell(project.name)} | {project.likes} | {project.comments} "
            f"| {_cell(tracks)} | {_cell(project.country or 'N/A')} |"
        )
    return "\n".join(lines) + "\n"


def render(projects: Sequence[Project], fmt: ExportFormat, now: datetime | None = None) -> str:
    """형식에 맞는 문자열을 만든다."""
    match fmt:
        case ExportFormat.csv:
            return to_csv(projects)
        case ExportFormat.json:
            return to_json(projects, exported_at=now)
        case ExportFormat.markdown:
            return to_markdown(projects, generated_at=now)


def write_export(
    projects: Sequence[Project],
    fmt: ExportFormat,
    directory: Path,
    now: datetime | None = None,
) -> Path:
    """``colosseum_export_<timestamp>.<ext>`` 파일로 저장하고 경로를 반환한다."""
    now = now or datetime.now(UTC)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"colosseum_export_{timestamp}.{fmt.extension}"
    path.write_text(render(projects, fmt, now), encoding="utf-8")
    logger.info(f"Exported {len(projects)} projects to {path}")
    return path
