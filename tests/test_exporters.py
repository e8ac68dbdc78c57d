"""내보내기 모듈 테스트."""

import csv
import io
import json
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from arena_lens.exporters import (
    CSV_HEADERS,
    ExportFormat,
    to_csv,
    to_json,
    to_markdown,
    write_export,
)
from arena_lens.models import Project

EXPORTED_AT = datetime(2025, 5, 1, 12, 0, tzinfo=UTC)


class TestCsv:
    """CSV 내보내기 테스트."""

    def test_header_and_ranked_rows(self, projects: list[Project]) -> None:
        """헤더 다음에 순위가 매겨진 행이 온다."""
        lines = to_csv(projects).splitlines()

        assert lines[0] == ",".join(CSV_HEADERS)
        assert len(lines) == 3
        assert lines[1].startswith('1,1,"Hakata Finance","hakata-finance","perp dex"')
        assert lines[2].startswith('2,2,"Other"')

    def test_string_fields_are_quoted(self, projects: list[Project]) -> None:
        """문자열 필드는 따옴표로 감싼다."""
        row = to_csv(projects).splitlines()[1]

        assert '"DeFi"' in row
        assert '"Alice; Bob"' in row
        assert ',42,7,2,' in row

    def test_embedded_quotes_are_doubled(self, make_project: Callable[..., Project]) -> None:
        """값 안의 따옴표는 두 번 쓴다."""
        output = to_csv([make_project(1, name='The "Best" DEX')])

        assert '"The ""Best"" DEX"' in output
        rows = list(csv.reader(io.StringIO(output)))
        assert rows[1][2] == 'The "Best" DEX'


class TestJson:
    """JSON 내보내기 테스트."""

    def test_structure(self, projects: list[Project]) -> None:
        """순위와 상세 URL을 포함한다."""
        data = json.loads(to_json(projects, exported_at=EXPORTED_AT))

        assert data["total_projects"] == 2
        assert data["exported_at"] == EXPORTED_AT.isoformat()
        first = data["projects"][0]
        assert first["rank"] == 1
        assert first["teamSize"] == 2
        assert first["arena_url"].endswith("/hakata-finance")


class TestMarkdown:
    """Markdown 내보내기 테스트."""

    def test_table_rows(self, projects: list[Project]) -> None:
        """상위 프로젝트 표를 만든다."""
        output = to_markdown(projects, generated_at=EXPORTED_AT)

        assert "# Colosseum Projects Report" in output
        assert "| 1 | Hakata Finance | 42 | 7 | DeFi | US |" in output
        assert "| 2 | Other | 10 | 3 | Infra | US |" in output

    def test_limits_to_fifty(self, make_project: Callable[..., Project]) -> None:
        """50개까지만 표시한다."""
        output = to_markdown([make_project(i) for i in range(1, 61)])

        assert "| 50 |" in output
        assert "| 51 |" not in output

    def test_escapes_pipes(self, make_project: Callable[..., Project]) -> None:
        """셀 안의 파이프 문자를 이스케이프한다."""
        output = to_markdown([make_project(1, name="A|B")])
        assert "A\\|B" in output


class TestWriteExport:
    """파일 저장 테스트."""

    def test_file_name_and_extension(self, tmp_path: Path, projects: list[Project]) -> None:
        """타임스탬프가 들어간 파일명으로 저장한다."""
        path = write_export(projects, ExportFormat.markdown, tmp_path, now=EXPORTED_AT)

        assert path.name == "colosseum_export_2025-05-01T12-00-00.md"
        assert path.read_text(encoding="utf-8").startswith("# Colosseum Projects Report")

    def test_csv_file(self, tmp_path: Path, projects: list[Project]) -> None:
        """CSV 파일을 저장한다."""
        path = write_export(projects, ExportFormat.csv, tmp_path, now=EXPORTED_AT)

        assert path.suffix == ".csv"
        assert len(path.read_text(encoding="utf-8").splitlines()) == 3
