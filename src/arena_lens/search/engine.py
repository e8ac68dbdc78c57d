"""검색/필터/정렬 엔진."""

import logging
from collections.abc import Sequence

from arena_lens.models import (
    DEFAULT_LIKES_RANGE,
    DEFAULT_TEAM_SIZE_RANGE,
    FilterSpec,
    Project,
    SortField,
    SortOrder,
)
from arena_lens.search.index import IndexEntry, build_index

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 20

NAME_MATCH_SCORE = 100
DESCRIPTION_MATCH_SCORE = 80
TERM_MATCH_SCORE = 30


class ResultCache:
    """FilterSpec 키별 검색 결과 캐시.

    용량을 넘으면 가장 먼저 삽입된 키부터 제거한다. 조회는 순서를 바꾸지 않는다.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_SIZE) -> None:
        self.capacity = max(1, capacity)
        self._entries: dict[str, list[Project]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        """삽입 순서대로 키 목록을 반환한다."""
        return list(self._entries)

    def get(self, key: str) -> list[Project] | None:
        """캐시된 결과를 반환한다. 없으면 None."""
        result = self._entries.get(key)
        if result is None:
            self.misses += 1
        else:
            self.hits += 1
        return result

    def put(self, key: str, results: list[Project]) -> None:
        """결과를 저장한다."""
        if key in self._entries:
            self._entries[key] = results
            return
        while len(self._entries) >= self.capacity:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = results

    def clear(self) -> None:
        """모든 결과를 버린다."""
        self._entries.clear()


def _score(entry: IndexEntry, query: str, terms: list[str]) -> int:
    if query in entry.normalized_name:
        return NAME_MATCH_SCORE
    if query in entry.normalized_description:
        return DESCRIPTION_MATCH_SCORE
    for term in terms:
        if term in entry.searchable_text:
            return TERM_MATCH_SCORE
    return 0


def _rank_by_relevance(entries: list[IndexEntry], search: str) -> list[IndexEntry]:
    """점수가 0인 엔트리는 제외하고 점수 내림차순으로 정렬한다 (안정 정렬)."""
    query = search.lower()
    terms = query.split()

    scored = [(_score(entry, query, terms), entry) for entry in entries]
    scored = [(score, entry) for score, entry in scored if score > 0]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [entry for _, entry in scored]


def _sort_key(entry: IndexEntry, sort_by: SortField) -> int | str:
    project = entry.project
    match sort_by:
        case SortField.comments:
            return project.comments
        case SortField.name:
            return project.name
        case SortField.country:
            return project.country
        case SortField.team_size:
            return entry.team_size
        case _:
            return project.likes


def _sort_entries(entries: list[IndexEntry], spec: FilterSpec) -> list[IndexEntry]:
    # 같은 값이면 id 오름차순. reverse=True도 동일 키의 기존 순서를 유지한다.
    by_id = sorted(entries, key=lambda entry: entry.project.id)
    return sorted(
        by_id,
        key=lambda entry: _sort_key(entry, spec.sort_by),
        reverse=spec.sort_order is SortOrder.desc,
    )


def _apply_filters(entries: list[IndexEntry], spec: FilterSpec) -> list[IndexEntry]:
    if spec.tracks:
        track_set = {track.lower() for track in spec.tracks}
        entries = [
            e for e in entries if any(t in track_set for t in e.normalized_tracks)
        ]

    if spec.countries:
        country_set = {country.lower() for country in spec.countries}
        entries = [e for e in entries if e.normalized_country in country_set]

    if spec.team_size_range != DEFAULT_TEAM_SIZE_RANGE:
        low, high = spec.team_size_range
        entries = [e for e in entries if low <= e.team_size <= high]

    if spec.likes_range != DEFAULT_LIKES_RANGE:
        low, high = spec.likes_range
        entries = [e for e in entries if low <= e.project.likes <= high]

    return entries


def search(
    index: Sequence[IndexEntry],
    spec: FilterSpec,
    cache: ResultCache | None = None,
) -> list[Project]:
    """인덱스에서 조건에 맞는 프로젝트를 순서대로 반환한다.

    텍스트 검색이 활성화되면 관련성 순서를 유지하고, 그렇지 않으면
    ``spec.sort_by`` 기준으로 정렬한다. 결과는 ``cache``에 저장된다.
    """
    if not index:
        return []

    key = spec.cache_key()
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return list(cached)

    entries = list(index)
    if spec.has_text_search:
        entries = _rank_by_relevance(entries, spec.search)

    entries = _apply_filters(entries, spec)

    if not spec.has_text_search:
        entries = _sort_entries(entries, spec)

    results = [entry.project for entry in entries]
    if cache is not None:
        cache.put(key, list(results))
    return results


def toggle_sort(spec: FilterSpec, field: SortField) -> FilterSpec:
    """테이블 헤더 클릭: 같은 컬럼이 내림차순이면 오름차순, 아니면 내림차순."""
    if spec.sort_by is field and spec.sort_order is SortOrder.desc:
        return spec.updated(sort_by=field, sort_order=SortOrder.asc)
    return spec.updated(sort_by=field, sort_order=SortOrder.desc)


class SearchEngine:
    """하나의 데이터셋에 묶인 인덱스와 결과 캐시를 소유한다."""

    def __init__(
        self,
        projects: Sequence[Project] = (),
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self.cache = ResultCache(cache_size)
        self.index: tuple[IndexEntry, ...] = ()
        self.load(projects)

    def load(self, projects: Sequence[Project]) -> None:
        """인덱스를 새로 만들고 캐시를 함께 비운다."""
        self.index = build_index(projects)
        self.cache.clear()
        logger.debug(f"Search index rebuilt with {len(self.index)} entries")

    @property
    def projects(self) -> list[Project]:
        """인덱스에 포함된 원본 프로젝트."""
        return [entry.project for entry in self.index]

    def search(self, spec: FilterSpec) -> list[Project]:
        """현재 인덱스에서 검색한다."""
        return search(self.index, spec, self.cache)
