import uuid
from datetime import date, datetime
from decimal import Decimal


def camelize(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def iso(value):
    return value.isoformat() if value else None


def money(value):
    return float(value) if value is not None else None


def plain(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def ref(obj, *fields):
    """Project a referenced row onto its id plus the named attributes."""
    if obj is None:
        return None
    data = {'id': str(obj.id)}
    for field in fields:
        data[camelize(field)] = plain(getattr(obj, field))
    return data


def ref_id(value):
    return str(value) if value else None


USER_NAME = ('first_name', 'last_name')
USER_CONTACT = ('first_name', 'last_name', 'email')
