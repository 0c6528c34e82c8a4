"""
DevCamper Backend — Listing Query Builder (filter / select / sort / paginate)
==============================================================================

What:  Turns the query string of a list endpoint into one filtered, sorted,
       paginated SELECT plus a COUNT, and shapes the result envelope
       `{success, count, pagination, data}`.
Who:   BootcampService.list_bootcamps(); generic over any model.

Query language:
    ?average_cost[lte]=10000        comparison: gt, gte, lt, lte
    ?city[in]=Boston,Lowell         membership, comma separated
    ?housing=true                   equality
    ?select=name,description        trim returned fields (id always kept)
    ?sort=-average_cost,name        `-` prefix sorts descending
    ?page=2&limit=10                1-based page, limit capped by settings

    Values are coerced to the column's Python type; a value that does not
    coerce is a 400. Keys naming no column are ignored.

Pagination:
    Offset based. `next` is present when rows exist past this page, `prev`
    when page > 1.
"""

import logging
import re
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from sqlalchemy import Column, asc, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.config import settings
from devcamper.database import Base
from devcamper.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

RESERVED_PARAMS = frozenset({"select", "sort", "page", "limit"})

FILTER_KEY = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>gt|gte|lt|lte|in)\])?$")

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def _coerce(column: Column, raw: str) -> Any:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        python_type = None
    # JSON columns (careers) hold structured values
    if python_type is None or python_type in (dict, list):
        raise ValidationError(
            message=f"Filtering on '{column.name}' is not supported",
            field=column.name,
        )

    try:
        if python_type is bool:
            lowered = raw.lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw)
        if python_type is uuid.UUID:
            return uuid.UUID(raw)
        return python_type(raw)
    except ValueError:
        raise ValidationError(
            message=f"Invalid value '{raw}' for '{column.name}'",
            field=column.name,
        )


def _parse_positive_int(raw: Optional[str], name: str, default: int, maximum: Optional[int] = None) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(message=f"'{name}' must be an integer", field=name)
    if value < 1 or (maximum is not None and value > maximum):
        bound = f" between 1 and {maximum}" if maximum is not None else " of at least 1"
        raise ValidationError(message=f"'{name}' must be{bound}", field=name)
    return value


class QueryParams:
    """Parsed and validated listing parameters for one model."""

    def __init__(
        self,
        model: Type[Base],
        params: Mapping[str, str],
        aliases: Optional[Mapping[str, str]] = None,
        default_sort: str = "-created_at",
    ):
        self.model = model
        self.aliases = dict(aliases or {})
        self.columns: Dict[str, Column] = {c.name: c for c in model.__table__.columns}

        self.page = _parse_positive_int(params.get("page"), "page", 1)
        self.limit = _parse_positive_int(
            params.get("limit"), "limit", settings.default_page_size, settings.max_page_size
        )
        self.select = self._parse_select(params.get("select"))
        self.order_by = self._parse_sort(params.get("sort") or default_sort)
        self.criteria = self._parse_filters(params)

    def _column(self, name: str) -> Optional[Column]:
        return self.columns.get(self.aliases.get(name, name))

    @staticmethod
    def _parse_select(raw: Optional[str]) -> Optional[List[str]]:
        if not raw:
            return None
        fields = [f.strip() for f in raw.split(",") if f.strip()]
        return fields or None

    def _parse_sort(self, raw: str) -> List[Any]:
        order_by = []
        for token in (t.strip() for t in raw.split(",")):
            if not token:
                continue
            descending = token.startswith("-")
            name = token.lstrip("-")
            column = self._column(name)
            if column is None:
                raise ValidationError(message=f"Cannot sort by '{name}'", field="sort")
            order_by.append(desc(column) if descending else asc(column))
        # Stable pages when the sort key has ties
        order_by.append(asc(self.columns["id"]))
        return order_by

    def _parse_filters(self, params: Mapping[str, str]) -> List[Any]:
        criteria = []
        for key, raw in params.items():
            if key in RESERVED_PARAMS:
                continue
            match = FILTER_KEY.match(key)
            if not match:
                continue
            column = self._column(match.group("field"))
            if column is None:
                continue

            op = match.group("op")
            if op == "in":
                values = [_coerce(column, v.strip()) for v in raw.split(",") if v.strip()]
                criteria.append(column.in_(values))
                continue

            value = _coerce(column, raw)
            if op == "gt":
                criteria.append(column > value)
            elif op == "gte":
                criteria.append(column >= value)
            elif op == "lt":
                criteria.append(column < value)
            elif op == "lte":
                criteria.append(column <= value)
            else:
                criteria.append(column == value)
        return criteria

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self, total: int) -> Dict[str, Dict[str, int]]:
        pages: Dict[str, Dict[str, int]] = {}
        if self.page * self.limit < total:
            pages["next"] = {"page": self.page + 1, "limit": self.limit}
        if self.offset > 0:
            pages["prev"] = {"page": self.page - 1, "limit": self.limit}
        return pages

    def project(self, item: Dict[str, Any]) -> Dict[str, Any]:
        if self.select is None:
            return item
        keep = set(self.select) | {"id"}
        return {k: v for k, v in item.items() if k in keep}


async def advanced_results(
    db: AsyncSession,
    model: Type[Base],
    params: Mapping[str, str],
    serialize: Callable[[Any], Dict[str, Any]],
    aliases: Optional[Mapping[str, str]] = None,
    default_sort: str = "-created_at",
) -> Dict[str, Any]:
    """
    Run a listing query and build the response envelope.

    Args:
        db:        Async session
        model:     ORM model to list
        params:    Raw query string parameters
        serialize: Turns a row into a JSON-ready dict (select trims its keys)
        aliases:   API field name → column name (e.g. "user" → "user_id")

    Raises:
        ValidationError: bad page/limit/sort or an uncoercible filter value
        DatabaseError:   the query failed
    """
    query = QueryParams(model, params, aliases=aliases, default_sort=default_sort)

    try:
        rows_result = await db.execute(
            select(model)
            .where(*query.criteria)
            .order_by(*query.order_by)
            .offset(query.offset)
            .limit(query.limit)
        )
        rows = list(rows_result.scalars().all())

        count_result = await db.execute(
            select(func.count()).select_from(model).where(*query.criteria)
        )
        total = count_result.scalar() or 0
    except SQLAlchemyError as e:
        logger.error("Database error listing %s: %s", model.__tablename__, str(e), exc_info=True)
        raise DatabaseError(
            message=f"Could not retrieve {model.__tablename__}. Please try again.",
            context={"error_type": type(e).__name__},
        )

    data = [query.project(serialize(row)) for row in rows]
    return {
        "success": True,
        "count": len(data),
        "pagination": query.pagination(total),
        "data": data,
    }

