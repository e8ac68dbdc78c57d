"""필터 상태와 URL 쿼리 파라미터 간 변환."""

from collections.abc import Mapping
from urllib.parse import urlencode

from arena_lens.models import FilterSpec, SortField, SortOrder


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [part for part in value.split(",") if part]


def to_query_params(spec: FilterSpec) -> dict[str, str]:
    """기본값이 아닌 조건만 쿼리 파라미터로 만든다."""
    params: dict[str, str] = {}
    if spec.search:
        params["q"] = spec.search
    if spec.sort_by is not SortField.likes:
        params["sort"] = spec.sort_by.value
    if spec.sort_order is not SortOrder.desc:
        params["order"] = spec.sort_order.value
    if spec.tracks:
        params["tracks"] = ",".join(spec.tracks)
    if spec.countries:
        params["countries"] = ",".join(spec.countries)
    return params


def to_query_string(spec: FilterSpec) -> str:
    """공유 가능한 링크용 쿼리 문자열."""
    return urlencode(to_query_params(spec))


def from_query_params(params: Mapping[str, str]) -> FilterSpec:
    """쿼리 파라미터에서 FilterSpec을 복원한다. 없는 값은 기본값을 쓴다."""
    return FilterSpec(
        search=params.get("q") or "",
        sort_by=params.get("sort") or SortField.likes,
        sort_order=params.get("order") or SortOrder.desc,
        tracks=_split(params.get("tracks")),
        countries=_split(params.get("countries")),
    )
