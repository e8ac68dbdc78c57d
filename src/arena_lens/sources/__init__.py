"""데이터 소스 모듈."""

from arena_lens.sources.base import Source
from arena_lens.sources.colosseum import ColosseumSource

__all__ = ["ColosseumSource", "Source"]
