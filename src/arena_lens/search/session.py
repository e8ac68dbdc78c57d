"""대화형 검색 세션.

입력 중인 조건(``filters``)은 즉시 바뀌고, 실제 검색은 디바운스 후
``applied_filters``로 반영된다. URL 동기화는 별도 타이머로 더 늦게 실행된다.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from arena_lens.models import FilterSpec, Project
from arena_lens.search.debounce import Debouncer, recompute_delay, url_sync_delay
from arena_lens.search.engine import SearchEngine
from arena_lens.search.url_state import from_query_params, to_query_string

logger = logging.getLogger(__name__)


class SearchSession:
    """검색 엔진 하나에 대한 사용자 조건 상태."""

    def __init__(
        self,
        engine: SearchEngine,
        initial: FilterSpec | None = None,
        on_results: Callable[[list[Project]], Any] | None = None,
        on_url_sync: Callable[[str], Any] | None = None,
    ) -> None:
        """
        Args:
            engine: 검색 엔진
            initial: 초기 조건. None이면 기본값.
            on_results: 결과가 다시 계산될 때 호출되는 콜백
            on_url_sync: 쿼리 문자열이 바뀔 때 호출되는 콜백
        """
        self.engine = engine
        self.filters = initial or FilterSpec()
        self.applied_filters = self.filters
        self.results = engine.search(self.applied_filters)
        self.is_searching = False

        self._on_results = on_results
        self._on_url_sync = on_url_sync
        self._recompute = Debouncer("recompute")
        self._url_sync = Debouncer("url-sync")
        self._synced_query = to_query_string(self.filters)

    @classmethod
    def from_query_params(
        cls,
        engine: SearchEngine,
        params: Mapping[str, str],
        **kwargs: Any,
    ) -> "SearchSession":
        """URL 쿼리 파라미터로 초기 조건을 정한다."""
        return cls(engine, initial=from_query_params(params), **kwargs)

    @property
    def result_count(self) -> int:
        return len(self.results)

    @property
    def has_active_filters(self) -> bool:
        return bool(self.filters.search or self.filters.tracks or self.filters.countries)

    @property
    def query_string(self) -> str:
        """마지막으로 동기화된 쿼리 문자열."""
        return self._synced_query

    def update_filters(self, **updates: Any) -> int:
        """조건을 즉시 바꾸고 결과 재계산을 예약한다.

        Returns:
            예약된 재계산까지의 대기 시간 (ms)
        """
        self.filters = self.filters.updated(**updates)
        delay = recompute_delay(self.applied_filters, self.filters)
        self.is_searching = True
        self._recompute.schedule(delay, self._apply, self.filters)
        self._url_sync.schedule(
            url_sync_delay(self.filters), self._sync_url, self.filters
        )
        return delay

    def clear_filters(self) -> int:
        """모든 조건을 기본값으로 되돌린다."""
        defaults = FilterSpec()
        return self.update_filters(**defaults.model_dump())

    def flush(self) -> None:
        """대기 중인 재계산을 취소하고 현재 조건을 즉시 반영한다."""
        self._recompute.cancel_pending()
        self._apply(self.filters)

    def refresh(self) -> None:
        """데이터셋이 바뀐 뒤 적용된 조건으로 결과를 다시 계산한다."""
        self.results = self.engine.search(self.applied_filters)
        if self._on_results:
            self._on_results(self.results)

    def close(self) -> None:
        """대기 중인 모든 타이머를 취소한다."""
        self._recompute.cancel_pending()
        self._url_sync.cancel_pending()

    def _apply(self, spec: FilterSpec) -> None:
        self.applied_filters = spec
        self.results = self.engine.search(spec)
        self.is_searching = False
        logger.debug(f"Search applied: {len(self.results)} results")
        if self._on_results:
            self._on_results(self.results)

    def _sync_url(self, spec: FilterSpec) -> None:
        query = to_query_string(spec)
        if query == self._synced_query:
            return
        self._synced_query = query
        if self._on_url_sync:
            self._on_url_sync(query)
