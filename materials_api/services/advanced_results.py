"""Filtering, projection, sorting and pagination for list endpoints.

Query string conventions::

    ?select=title,file_type          only return these columns (id is always kept)
    ?sort=-created_at,title          comma separated, leading '-' for descending
    ?page=2&limit=10                 1-based page number and page size
    ?file_type=pdf                   equality filter
    ?user_id[in]=1,2&id[gte]=10      comparison filters: gt, gte, lt, lte, in
"""

import operator
import re
from collections.abc import Callable, Iterable
from datetime import datetime

from sqlalchemy.orm import Query, Session, load_only

from materials_api.core import config
from materials_api.core.errors import bad_request

RESERVED_PARAMS = {'select', 'sort', 'page', 'limit'}
DEFAULT_SORT = '-created_at'

FILTER_PATTERN = re.compile(r'^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>[a-z]+)\])?$')
COMPARISONS = {
    'gt': operator.gt,
    'gte': operator.ge,
    'lt': operator.lt,
    'lte': operator.le,
}


def split_fields(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def _column(model, field: str, allowed: set[str]):
    if field not in allowed:
        raise bad_request(f'Invalid query field: {field}')
    return getattr(model, field)


def coerce_value(column, raw: str):
    python_type = column.expression.type.python_type
    try:
        if python_type is bool:
            return raw.strip().lower() in {'1', 'true', 'yes', 'on'}
        if python_type is datetime:
            return datetime.fromisoformat(raw)
        return python_type(raw)
    except ValueError as exc:
        raise bad_request(f'Invalid value for {column.key}: {raw}') from exc


def apply_filters(query: Query, model, params: Iterable[tuple[str, str]], filterable: set[str]) -> Query:
    for key, raw in params:
        if key in RESERVED_PARAMS:
            continue
        match = FILTER_PATTERN.match(key)
        if match is None:
            raise bad_request(f'Invalid query field: {key}')
        column = _column(model, match.group('field'), filterable)
        op = match.group('op')

        if op is None:
            query = query.filter(column == coerce_value(column, raw))
        elif op == 'in':
            values = [coerce_value(column, item) for item in split_fields(raw)]
            query = query.filter(column.in_(values))
        elif op in COMPARISONS:
            query = query.filter(COMPARISONS[op](column, coerce_value(column, raw)))
        else:
            raise bad_request(f'Invalid query operator: {op}')
    return query


def apply_sort(query: Query, model, sort: str | None, sortable: set[str]) -> Query:
    fields = split_fields(sort) or [DEFAULT_SORT]
    clauses = []
    for field in fields:
        descending = field.startswith('-')
        column = _column(model, field.lstrip('-'), sortable)
        clauses.append(column.desc() if descending else column.asc())

    # Keeps pages stable when the requested sort keys tie.
    tiebreak = model.id.desc() if fields[0].startswith('-') else model.id.asc()
    return query.order_by(*clauses, tiebreak)


def advanced_results(
    db: Session,
    model,
    *,
    params: Iterable[tuple[str, str]] = (),
    select: str | None = None,
    sort: str | None = None,
    page: int | None = None,
    limit: int | None = None,
    fields: set[str],
    filterable: set[str],
    serialize: Callable[[object], dict],
) -> dict:
    page = 1 if page is None else page
    limit = config.DEFAULT_PAGE_SIZE if limit is None else min(limit, config.MAX_PAGE_SIZE)
    if page < 1 or limit < 1:
        raise bad_request('Page and limit must be positive numbers')

    query = apply_filters(db.query(model), model, params, filterable)
    total = query.count()

    selected = split_fields(select)
    if selected:
        columns = [_column(model, field, fields) for field in selected]
        if 'id' not in selected:
            selected.insert(0, 'id')
            columns.insert(0, model.id)
        query = query.options(load_only(*columns))

    query = apply_sort(query, model, sort, fields)
    start_index = (page - 1) * limit
    items = query.offset(start_index).limit(limit).all()

    if selected:
        data = [{field: getattr(item, field) for field in selected} for item in items]
    else:
        data = [serialize(item) for item in items]

    pagination = {}
    if start_index + limit < total:
        pagination['next'] = {'page': page + 1, 'limit': limit}
    if start_index > 0:
        pagination['prev'] = {'page': page - 1, 'limit': limit}

    return {
        'success': True,
        'count': len(data),
        'total': total,
        'pagination': pagination,
        'data': data,
    }
