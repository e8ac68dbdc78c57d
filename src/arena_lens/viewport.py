"""페이지네이션과 가상 스크롤 계산."""

import math
from collections.abc import Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

PAGE_SIZE_OPTIONS = (10, 20, 50, 100)
DEFAULT_PAGE_SIZE = 20
VIRTUALIZATION_THRESHOLD = 100
DEFAULT_OVERSCAN = 5


class Page(BaseModel, Generic[T]):
    """현재 페이지의 항목과 위치 정보."""

    items: list[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(items: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """``page``(1부터 시작)에 해당하는 항목을 잘라낸다. 범위를 벗어나면 보정한다."""
    page_size = max(1, page_size)
    total_pages = math.ceil(len(items) / page_size)
    page = min(max(1, page), max(1, total_pages))
    start = (page - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page=page,
        page_size=page_size,
        total_items=len(items),
        total_pages=total_pages,
    )


def should_virtualize(item_count: int, threshold: int = VIRTUALIZATION_THRESHOLD) -> bool:
    """항목 수가 임계값을 넘으면 가상 스크롤을 쓴다."""
    return item_count > threshold


def visible_range(
    item_count: int,
    scroll_top: float,
    item_height: float,
    container_height: float,
    overscan: int = DEFAULT_OVERSCAN,
    enabled: bool = True,
) -> tuple[int, int]:
    """렌더링할 항목의 [start, end) 구간을 계산한다."""
    if not enabled or item_height <= 0:
        return 0, item_count

    start = max(0, math.floor(scroll_top / item_height) - overscan)
    end = min(item_count, math.ceil((scroll_top + container_height) / item_height) + overscan)
    return start, max(start, end)
