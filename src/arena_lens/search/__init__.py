"""검색/필터/정렬 모듈."""

from arena_lens.search.debounce import Debouncer, recompute_delay, url_sync_delay
from arena_lens.search.engine import ResultCache, SearchEngine, search, toggle_sort
from arena_lens.search.index import IndexEntry, build_index
from arena_lens.search.session import SearchSession
from arena_lens.search.url_state import from_query_params, to_query_params

__all__ = [
    "Debouncer",
    "IndexEntry",
    "ResultCache",
    "SearchEngine",
    "SearchSession",
    "build_index",
    "from_query_params",
    "recompute_delay",
    "search",
    "to_query_params",
    "toggle_sort",
    "url_sync_delay",
]
