"""
Shared pieces of the machine, tool and workstation cruds: booking guards,
maintenance history and the count-by-column reductions used by their stats.
"""
from sqlalchemy import func

from erp_api import db
from erp_api.models import MaintenanceRecord, WorkshopJob
from erp_api.utils.date_utils import next_maintenance_date, utc_now
from erp_api.utils.db_utils import get_or_404
from erp_api.utils.serializers import USER_NAME, iso, money, ref
from erp_api.utils.state_machine import BOOKING_FLOW, booking_state


def check_booking(resource, action, label):
    """Raises InvalidStateError when `action` (book/release) is not allowed right now."""
    return BOOKING_FLOW.apply(booking_state(resource.is_available), action, label=label)


def resolve_job(job_id):
    if job_id is None:
        return None
    return get_or_404(WorkshopJob, job_id, 'Job not found').id


def apply_schedule(resource, data, schedule_field='schedule'):
    if schedule_field in data:
        resource.maintenance_schedule = data.pop(schedule_field)


def record_maintenance(resource, resource_type, payload, current_user_id):
    performed_at = utc_now()
    next_date = next_maintenance_date(resource.maintenance_schedule, performed_at)
    record = MaintenanceRecord(
        resource_type=resource_type,
        resource_id=resource.id,
        type=payload.type,
        description=payload.description,
        performed_by=current_user_id,
        performed_at=performed_at,
        cost=payload.cost,
        notes=payload.notes,
        next_maintenance_date=next_date
    )
    db.session.add(record)
    resource.last_maintenance = performed_at
    resource.next_maintenance = next_date
    return record


def maintenance_to_dict(record):
    return {
        'id': str(record.id),
        'type': record.type,
        'description': record.description,
        'performedBy': ref(record.performer, *USER_NAME),
        'performedAt': iso(record.performed_at),
        'cost': money(record.cost),
        'notes': record.notes,
        'nextMaintenanceDate': iso(record.next_maintenance_date),
    }


def maintenance_history(resource_type, resource_id):
    records = MaintenanceRecord.query.filter_by(resource_type=resource_type, resource_id=resource_id) \
        .order_by(MaintenanceRecord.performed_at.desc()).all()
    return [maintenance_to_dict(record) for record in records]


def count_by(model, column):
    """{value: count} over the active rows of `model`."""
    rows = db.session.query(column, func.count(model.id)) \
        .filter(model.is_active.is_(True)).group_by(column).all()
    return {value: count for value, count in rows if value is not None}


def count_active(model, *conditions):
    return model.query.filter(model.is_active.is_(True), *conditions).count()


def overdue_maintenance(model):
    return count_active(model, model.next_maintenance < utc_now())
