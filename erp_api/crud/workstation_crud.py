import logging

from sqlalchemy import func

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.crud.resource_utils import check_booking, count_active, count_by, overdue_maintenance, resolve_job
from erp_api.models import Workstation
from erp_api.utils.date_utils import next_maintenance_date, utc_now
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, iso, money, ref

logger = logging.getLogger(__name__)

DUPLICATE_NUMBER = 'Workstation with this station number already exists'
NOT_FOUND = 'Workstation not found'

LOCATION_FIELDS = ('building', 'floor', 'section')


def _row_to_dict(station):
    return {
        'id': str(station.id),
        'name': station.name,
        'stationNumber': station.station_number,
        'type': station.type,
        'status': station.status,
        'location': {field: getattr(station, field) for field in LOCATION_FIELDS},
        'capacity': station.capacity or {},
        'equipment': station.equipment or [],
        'operatingHours': station.operating_hours or {},
        'availability': {
            'isAvailable': station.is_available,
            'currentJob': ref(station.current_job, 'title', 'status'),
            'bookedUntil': iso(station.booked_until),
            'bookedBy': ref(station.booker, *USER_NAME),
        },
        'maintenance': {
            'schedule': station.maintenance_schedule,
            'lastMaintenance': iso(station.last_maintenance),
            'nextMaintenance': iso(station.next_maintenance),
            'notes': station.maintenance_notes,
        },
        'utilization': {
            'totalHoursUsed': station.total_hours_used or 0,
            'totalJobsCompleted': station.total_jobs_completed or 0,
            'averageJobDuration': station.average_job_duration or 0,
            'lastUsed': iso(station.last_used),
        },
        'hourlyRate': money(station.hourly_rate),
        'notes': station.notes,
        'isActive': station.is_active,
        'createdBy': ref(station.creator, *USER_NAME),
        'lastUpdatedBy': ref(station.updater, *USER_NAME),
        'createdAt': iso(station.created_at),
        'updatedAt': iso(station.updated_at),
    }


workstation_list = ListQuery(
    Workstation,
    _row_to_dict,
    search_fields=(Workstation.name, Workstation.station_number, Workstation.building, Workstation.section),
    filters={'type': Workstation.type, 'status': Workstation.status, 'available': Workstation.is_available},
    order_by=(Workstation.created_at.desc(),),
)


def _apply_fields(station, payload):
    data = payload.changes()
    if data.pop('location', None) is not None:
        for key, value in payload.location.values().items():
            setattr(station, key, value)
    if data.pop('maintenance', None) is not None:
        maintenance = payload.maintenance.values()
        if 'schedule' in maintenance:
            station.maintenance_schedule = maintenance['schedule']
        if 'notes' in maintenance:
            station.maintenance_notes = maintenance['notes']
    for key, value in data.items():
        setattr(station, key, value)


def list_workstations(args):
    return workstation_list.run(args)


def get_workstation(station_id):
    return get_or_404(Workstation, station_id, NOT_FOUND)


def get_workstation_detail(station_id):
    return _row_to_dict(get_workstation(station_id))


def create_workstation(payload, current_user_id):
    station = Workstation(created_by=current_user_id)
    with transaction_scope(DUPLICATE_NUMBER):
        _apply_fields(station, payload)
        db.session.add(station)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'workstations', station.id, None, payload.audit_values())
    logger.info(f"Workstation {station.station_number} created")
    return _row_to_dict(station)


def update_workstation(station_id, payload, current_user_id):
    station = get_workstation(station_id)
    old_values = _row_to_dict(station)
    with transaction_scope(DUPLICATE_NUMBER):
        _apply_fields(station, payload)
        station.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'workstations', station.id, old_values, payload.audit_values())
    return _row_to_dict(station)


def delete_workstation(station_id, current_user_id):
    station = get_workstation(station_id)
    with transaction_scope():
        station.is_active = False
        station.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'workstations', station.id, {'isActive': True}, {'isActive': False})
    return True


def book_workstation(station_id, payload, current_user_id):
    station = get_workstation(station_id)
    check_booking(station, 'book', 'Workstation')
    with transaction_scope():
        station.current_job_id = resolve_job(payload.job_id)
        station.is_available = False
        station.booked_until = payload.booked_until or payload.until
        station.booked_by = current_user_id
        station.status = 'occupied'
        station.last_updated_by = current_user_id
        log_action(current_user_id, 'BOOK', 'workstations', station.id, {'isAvailable': True}, payload.audit_values())
    return _row_to_dict(station)


def release_workstation(station_id, payload, current_user_id):
    """
    Free a booked workstation. Every release counts as a completed job; a
    reported job duration (minutes) is folded into hours and the average.
    """
    station = get_workstation(station_id)
    check_booking(station, 'release', 'Workstation')
    with transaction_scope():
        station.is_available = True
        station.current_job_id = None
        station.booked_until = None
        station.booked_by = None
        station.status = 'available'
        jobs = (station.total_jobs_completed or 0) + 1
        station.total_jobs_completed = jobs
        station.last_used = utc_now()
        if payload.job_duration:
            average = station.average_job_duration or 0
            station.total_hours_used = round((station.total_hours_used or 0) + payload.job_duration / 60, 2)
            station.average_job_duration = round((average * (jobs - 1) + payload.job_duration) / jobs, 2)
        station.last_updated_by = current_user_id
        log_action(current_user_id, 'RELEASE', 'workstations', station.id, {'isAvailable': False}, payload.audit_values())
    return _row_to_dict(station)


def schedule_maintenance(station_id, payload, current_user_id):
    station = get_workstation(station_id)
    with transaction_scope():
        station.last_maintenance = payload.maintenance_date or utc_now()
        station.next_maintenance = next_maintenance_date(station.maintenance_schedule, station.last_maintenance)
        if payload.notes:
            station.maintenance_notes = payload.notes
        station.last_updated_by = current_user_id
        log_action(current_user_id, 'MAINTENANCE', 'workstations', station.id, None, payload.audit_values())
    return _row_to_dict(station)


def get_workstation_stats():
    utilization = db.session.query(
        func.avg(Workstation.total_hours_used),
        func.sum(Workstation.total_jobs_completed),
        func.avg(Workstation.average_job_duration)
    ).filter(Workstation.is_active.is_(True)).one()
    avg_hours, total_jobs, avg_duration = utilization
    return {
        'total': count_active(Workstation),
        'available': count_active(Workstation, Workstation.is_available.is_(True)),
        'occupied': count_active(Workstation, Workstation.status == 'occupied'),
        'maintenance': count_active(Workstation, Workstation.status == 'maintenance'),
        'overdueMaintenance': overdue_maintenance(Workstation),
        'byType': count_by(Workstation, Workstation.type),
        'utilization': {
            'avgUtilization': round(float(avg_hours or 0), 2),
            'totalJobs': int(total_jobs or 0),
            'avgJobDuration': round(float(avg_duration or 0), 2),
        },
    }
