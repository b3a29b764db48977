# modules/common/query.py
"""
Request filter parameters -> SQLAlchemy query.

Every list endpoint goes through the same steps:
active_only -> apply_filters / apply_search / apply_date_range -> apply_sort -> paginate
and `paginate` counts the filtered query before slicing, so `total` is always the
pre-pagination count.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from fastapi import Query
from pydantic.alias_generators import to_camel
from sqlalchemy import Date, or_
from sqlalchemy.orm import Query as SAQuery

from config.settings import settings
from modules.common.derived import to_naive_utc
from modules.common.errors import FieldValidationError

T = TypeVar("T")

SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass
class ListParams:
    page: int = 1
    limit: int = 10
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def list_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=200),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", pattern="^(asc|desc)$"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
) -> ListParams:
    """FastAPI dependency: common list/query-string parameters"""
    return ListParams(
        page=page,
        limit=limit,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        date_from=to_naive_utc(date_from),
        date_to=to_naive_utc(date_to),
    )


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def meta(self) -> Dict[str, int]:
        return {"total_pages": self.total_pages, "current_page": self.page, "total": self.total}


# ---------- predicates ----------
def active_only(query: SAQuery, model) -> SAQuery:
    return query.filter(model.is_active)


def apply_filters(query: SAQuery, pairs: Iterable[Tuple[Any, Any]]) -> SAQuery:
    """equality filters; a None value means 'not filtered'"""
    for column, value in pairs:
        if value is None or value == "":
            continue
        query = query.filter(column == value)
    return query


def like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def apply_search(query: SAQuery, term: Optional[str], columns: Sequence[Any]) -> SAQuery:
    """case-insensitive substring match on any of the whitelisted columns"""
    term = (term or "").strip()
    if not term or not columns:
        return query
    pattern = like_pattern(term)
    return query.filter(or_(*[col.ilike(pattern, escape="\\") for col in columns]))


def apply_date_range(
    query: SAQuery, column, date_from: Optional[datetime], date_to: Optional[datetime]
) -> SAQuery:
    if isinstance(getattr(column, "type", None), Date):
        # plain DATE column: compare calendar days
        if date_from is not None:
            query = query.filter(column >= date_from.date())
        if date_to is not None:
            query = query.filter(column <= date_to.date())
        return query
    if date_from is not None:
        query = query.filter(column >= date_from)
    if date_to is not None:
        # a bare date (midnight) covers the whole day
        if date_to.time() == time(0):
            query = query.filter(column < date_to + timedelta(days=1))
        else:
            query = query.filter(column <= date_to)
    return query


@dataclass
class SortSpec:
    """whitelisted sort keys (camelCase, as the client sends them) -> column"""
    columns: Dict[str, Any]
    default_key: str
    default_order: str = SORT_DESC
    tiebreak: Optional[Any] = None
    aliases: Dict[str, str] = field(default_factory=dict)

    def resolve(self, key: Optional[str]):
        if not key:
            return self.columns[self.default_key]
        key = self.aliases.get(key, key)
        if key in self.columns:
            return self.columns[key]
        camel = to_camel(key)
        if camel in self.columns:
            return self.columns[camel]
        raise FieldValidationError(
            "sortBy",
            f"Unsupported sort field '{key}'. Allowed: {', '.join(sorted(self.columns))}",
        )


def apply_sort(query: SAQuery, spec: SortSpec, sort_by: Optional[str], sort_order: Optional[str]) -> SAQuery:
    column = spec.resolve(sort_by)
    order = (sort_order or spec.default_order).lower()
    query = query.order_by(column.asc() if order == SORT_ASC else column.desc())
    if spec.tiebreak is not None:
        query = query.order_by(spec.tiebreak.asc() if order == SORT_ASC else spec.tiebreak.desc())
    return query


def paginate(query: SAQuery, page: int, limit: int) -> Page:
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=items, total=total, page=page, limit=limit)


def run_list(query: SAQuery, params: ListParams, spec: SortSpec) -> Page:
    query = apply_sort(query, spec, params.sort_by, params.sort_order)
    return paginate(query, params.page, params.limit)
