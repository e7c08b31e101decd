"""Filtering, sorting and pagination over an in-memory collection snapshot."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Generic, Iterable, Literal, Mapping, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from dashstore.engine.clock import normalize_bound

T = TypeVar("T")

SortDir = Literal["asc", "desc"]

# Filter values meaning "no filter"
ALL_SENTINELS = frozenset({"all"})


class Page(BaseModel, Generic[T]):
    """One page of a filtered, sorted result."""

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int


class QueryParams(BaseModel):
    """Caller-supplied list parameters."""

    model_config = ConfigDict(extra="forbid")

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)
    q: str | None = None
    status: str | None = None
    date_from: str | datetime | date | None = None
    date_to: str | datetime | date | None = None
    sort_by: str | None = None
    sort_dir: SortDir | None = None
    filters: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class QuerySpec(Generic[T]):
    """How one collection is searched, filtered and ordered."""

    search: Callable[[T], Iterable[Any]]
    sort_fields: Mapping[str, Callable[[T], Any]]
    default_sort: str
    default_dir: SortDir = "desc"
    status_field: str | None = None
    date_field: str | None = None
    filters: Mapping[str, Callable[[T, Any], bool]] = field(default_factory=dict)
    # Check a filter value up front, before any record is read
    validators: Mapping[str, Callable[[Any], None]] = field(default_factory=dict)


def as_text(value: Any) -> str:
    """Render a value the way it reads on screen (``12.5``, ``100``, ``true``)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def match_id(record: Any, value: Any) -> bool:
    return getattr(record, "id", None) == value


def is_unfiltered(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip().lower() in ALL_SENTINELS


def matches_text(values: Iterable[Any], needle: str) -> bool:
    for value in values:
        if isinstance(value, (list, tuple, set, frozenset)):
            if matches_text(value, needle):
                return True
        elif needle in as_text(value).lower():
            return True
    return False


def sort_key(getter: Callable[[T], Any]) -> Callable[[T], tuple]:
    """Missing values sort lowest; strings compare case-insensitively."""

    def key(record: T) -> tuple:
        value = getter(record)
        if value is None:
            return (0, "")
        if isinstance(value, str):
            return (1, value.casefold())
        return (1, value)

    return key


def sort_records(
    records: Sequence[T],
    getter: Callable[[T], Any],
    direction: SortDir,
) -> list[T]:
    # sorted() is stable for reverse=True too, so ties keep input order
    return sorted(records, key=sort_key(getter), reverse=direction == "desc")


def filter_records(records: Sequence[T], spec: QuerySpec[T], params: QueryParams) -> list[T]:
    needle = (params.q or "").strip().lower()
    status = None if is_unfiltered(params.status) else params.status
    date_from = normalize_bound(params.date_from)
    date_to = normalize_bound(params.date_to, end=True)
    extra = {name: value for name, value in params.filters.items() if not is_unfiltered(value)}

    selected: list[T] = []
    for record in records:
        if needle and not matches_text(spec.search(record), needle):
            continue
        if status is not None and spec.status_field and getattr(record, spec.status_field) != status:
            continue
        if spec.date_field and (date_from or date_to):
            stamp = getattr(record, spec.date_field)
            if stamp is None:
                continue
            if date_from and stamp < date_from:
                continue
            if date_to and stamp > date_to:
                continue
        if any(not spec.filters[name](record, value) for name, value in extra.items()):
            continue
        selected.append(record)
    return selected


def paginate(records: Sequence[T], page: int, page_size: int) -> Page[T]:
    total = len(records)
    start = (page - 1) * page_size
    return Page(
        items=list(records[start:start + page_size]),
        total=total,
        page=page,
        page_size=page_size,
        total_pages=max(1, math.ceil(total / page_size)),
    )


def run_query(records: Sequence[T], spec: QuerySpec[T], params: QueryParams) -> Page[T]:
    """Filter, sort and paginate ``records``.

    ``params.sort_by`` must name one of ``spec.sort_fields`` (the caller
    validates it); the default sort applies when it is omitted.
    """
    filtered = filter_records(records, spec, params)
    sort_by = params.sort_by or spec.default_sort
    direction = params.sort_dir or spec.default_dir
    ordered = sort_records(filtered, spec.sort_fields[sort_by], direction)
    return paginate(ordered, params.page, params.page_size)
