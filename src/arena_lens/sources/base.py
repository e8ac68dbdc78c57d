"""소스 프로토콜 정의."""

from typing import Protocol

from arena_lens.models import Project


class Source(Protocol):
    """프로젝트 데이터 소스 프로토콜."""

    async def fetch(self) -> list[Project]:
        """검증된 프로젝트 목록을 가져온다."""
        ...
