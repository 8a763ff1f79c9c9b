from datetime import datetime, timedelta, timezone

import pytz
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from flask import current_app, has_app_context

from ..exceptions import ValidationError

SCHEDULE_INTERVALS = {
    'daily': relativedelta(days=1),
    'weekly': relativedelta(weeks=1),
    'monthly': relativedelta(months=1),
    'quarterly': relativedelta(months=3),
    'annually': relativedelta(years=1),
}


def utc_now():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value):
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(pytz.utc).replace(tzinfo=None)


def business_timezone():
    name = 'UTC'
    if has_app_context():
        name = current_app.config.get('BUSINESS_TIMEZONE', 'UTC')
    return pytz.timezone(name)


def local_day_bounds(moment=None):
    """
    UTC start/end of the business-timezone calendar day containing `moment`.

    Returns:
        tuple: (start, end) naive UTC datetimes, end exclusive
    """
    tz = business_timezone()
    local = pytz.utc.localize(moment or utc_now()).astimezone(tz)
    day_start = datetime(local.year, local.month, local.day)
    start = tz.localize(day_start)
    end = tz.localize(day_start + timedelta(days=1))
    return to_naive_utc(start), to_naive_utc(end)


def month_start(moment=None):
    moment = moment or utc_now()
    return datetime(moment.year, moment.month, 1)


def parse_date_param(value, field, end_of_day=False):
    """Parse a query-string date. A bare YYYY-MM-DD upper bound covers the whole day."""
    if value in (None, ''):
        return None
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        raise ValidationError(errors=[{'field': field, 'message': f"Invalid date: {value}"}])
    parsed = to_naive_utc(parsed)
    if end_of_day and len(value.strip()) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def next_maintenance_date(schedule, performed_at):
    """None for schedules without a fixed interval (as_needed)."""
    interval = SCHEDULE_INTERVALS.get(schedule)
    if interval is None:
        return None
    return performed_at + interval
