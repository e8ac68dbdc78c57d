"""적응형 디바운스.

- 검색어 삭제: 100ms
- 짧은 검색어 (1-2자): 600ms (입력 중이거나 오타일 가능성이 높다)
- 중간 검색어 (3-5자): 500ms
- 긴 검색어 (6자 이상): 400ms
- 검색어 외 필터 변경: 200ms
- URL 동기화: 800ms (결과 재계산과 별도로 디바운스)
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from arena_lens.models import FilterSpec

logger = logging.getLogger(__name__)

CLEAR_DELAY_MS = 100
SHORT_QUERY_DELAY_MS = 600
MEDIUM_QUERY_DELAY_MS = 500
LONG_QUERY_DELAY_MS = 400
FILTER_CHANGE_DELAY_MS = 200
URL_SYNC_DELAY_MS = 800


def search_delay(search: str) -> int:
    """검색어 길이에 따른 대기 시간 (ms)."""
    length = len(search)
    if length == 0:
        return CLEAR_DELAY_MS
    if length <= 2:
        return SHORT_QUERY_DELAY_MS
    if length <= 5:
        return MEDIUM_QUERY_DELAY_MS
    return LONG_QUERY_DELAY_MS


def recompute_delay(previous: FilterSpec, next_spec: FilterSpec) -> int:
    """조건 변경 후 결과를 다시 계산하기까지 기다릴 시간 (ms)."""
    if next_spec.search != previous.search:
        return search_delay(next_spec.search)
    return FILTER_CHANGE_DELAY_MS


def url_sync_delay(spec: FilterSpec) -> int:
    """URL 동기화 대기 시간 (ms). 조건과 무관하게 고정이다."""
    return URL_SYNC_DELAY_MS


class Debouncer:
    """대기 중인 타이머를 하나만 유지하는 스케줄러.

    새 작업을 예약하면 이전 작업은 취소된다 (마지막 예약만 실행).
    실행 중인 이벤트 루프 안에서 사용해야 한다.
    """

    def __init__(self, name: str = "debounce") -> None:
        self.name = name
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """실행 대기 중인 작업이 있는지 확인한다."""
        return self._handle is not None and not self._handle.cancelled()

    def schedule(self, delay_ms: int, callback: Callable[..., Any], *args: Any) -> None:
        """이전 작업을 취소하고 ``delay_ms`` 후에 ``callback``을 실행한다."""
        self.cancel_pending()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay_ms / 1000, self._fire, callback, args)
        logger.debug(f"{self.name}: scheduled in {delay_ms}ms")

    def _fire(self, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self._handle = None
        callback(*args)

    def cancel_pending(self) -> None:
        """대기 중인 작업을 취소한다."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
