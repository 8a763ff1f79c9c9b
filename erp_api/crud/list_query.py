import math
import uuid

from sqlalchemy import Boolean, Enum, Uuid, false, or_

from erp_api.utils.date_utils import parse_date_param

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def parse_positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def parse_pagination(args, default_limit=DEFAULT_LIMIT):
    page = parse_positive_int(args.get('page'), DEFAULT_PAGE)
    limit = parse_positive_int(args.get('limit'), default_limit)
    return page, limit


def page_count(total, limit):
    if total <= 0:
        return 0
    return math.ceil(total / limit)


def pagination_meta(page, limit, total):
    return {'page': page, 'limit': limit, 'total': total, 'pages': page_count(total, limit)}


def _escape_like(term):
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def search_clause(columns, term):
    """Case-insensitive substring match of `term` against any of `columns`."""
    like = f"%{_escape_like(term)}%"
    return or_(*[column.ilike(like, escape='\\') for column in columns])


def equality_clause(column, value):
    """
    `column == value` with the query-string value coerced to the column type.
    Values that cannot match the column (bad UUID, unknown enum member) match nothing.
    """
    column_type = column.type
    if isinstance(column_type, Uuid):
        try:
            value = uuid.UUID(str(value))
        except ValueError:
            return false()
    elif isinstance(column_type, Boolean):
        value = str(value).lower() == 'true'
    elif isinstance(column_type, Enum) and value not in column_type.enums:
        return false()
    return column == value


def apply_date_range(query, column, start=None, end=None):
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column <= end)
    return query


def paginate(query, page, limit, order_by=()):
    total = query.order_by(None).count()
    rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
    return rows, total


class ListQuery:
    """
    Listing contract shared by every entity: active rows only, an optional
    `search` term over `search_fields`, exact-match `filters` keyed by query
    parameter, a `startDate`/`endDate` window on `date_field`, and a fixed
    `order_by`.

    `custom_filters` maps a query parameter to `fn(query, value) -> query` for
    conditions that are not a plain equality (derived flags, substring filters).
    """

    def __init__(self, model, serializer, search_fields=(), filters=None, custom_filters=None,
                 date_field=None, order_by=(), default_limit=DEFAULT_LIMIT, active_only=True):
        self.model = model
        self.serializer = serializer
        self.search_fields = list(search_fields)
        self.filters = filters or {}
        self.custom_filters = custom_filters or {}
        self.date_field = date_field
        self.order_by = list(order_by)
        self.default_limit = default_limit
        self.active_only = active_only

    def build(self, args, base_query=None):
        query = base_query if base_query is not None else self.model.query
        if self.active_only:
            query = query.filter(self.model.is_active.is_(True))

        search = (args.get('search') or '').strip()
        if search and self.search_fields:
            query = query.filter(search_clause(self.search_fields, search))

        for param, column in self.filters.items():
            value = args.get(param)
            if value not in (None, ''):
                query = query.filter(equality_clause(column, value))

        for param, apply_filter in self.custom_filters.items():
            value = args.get(param)
            if value not in (None, ''):
                query = apply_filter(query, value)

        if self.date_field is not None:
            start = parse_date_param(args.get('startDate'), 'startDate')
            end = parse_date_param(args.get('endDate'), 'endDate', end_of_day=True)
            query = apply_date_range(query, self.date_field, start, end)

        return query

    def run(self, args, base_query=None):
        """Returns (serialized page, pagination metadata)."""
        page, limit = parse_pagination(args, self.default_limit)
        rows, total = paginate(self.build(args, base_query), page, limit, self.order_by)
        return [self.serializer(row) for row in rows], pagination_meta(page, limit, total)
