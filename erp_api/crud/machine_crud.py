import logging

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.crud.resource_utils import (
    apply_schedule, check_booking, count_active, count_by, maintenance_history,
    maintenance_to_dict, overdue_maintenance, record_maintenance, resolve_job,
)
from erp_api.models import Machine
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, iso, ref

logger = logging.getLogger(__name__)

DUPLICATE_SERIAL = 'Machine with this serial number already exists'
NOT_FOUND = 'Machine not found'


def _row_to_dict(machine, with_history=False):
    data = {
        'id': str(machine.id),
        'name': machine.name,
        'model': machine.model,
        'manufacturer': machine.manufacturer,
        'serialNumber': machine.serial_number,
        'category': machine.category,
        'status': machine.status,
        'location': machine.location or {},
        'specifications': machine.specifications or {},
        'purchaseInfo': machine.purchase_info or {},
        'maintenance': {
            'schedule': machine.maintenance_schedule,
            'lastMaintenance': iso(machine.last_maintenance),
            'nextMaintenance': iso(machine.next_maintenance),
        },
        'availability': {
            'isAvailable': machine.is_available,
            'currentJob': ref(machine.current_job, 'title', 'status'),
            'bookedUntil': iso(machine.booked_until),
            'bookedBy': ref(machine.booker, *USER_NAME),
        },
        'operatingInstructions': machine.operating_instructions,
        'safetyRequirements': machine.safety_requirements or [],
        'requiredCertifications': machine.required_certifications or [],
        'notes': machine.notes,
        'isActive': machine.is_active,
        'createdBy': ref(machine.creator, *USER_NAME),
        'lastUpdatedBy': ref(machine.updater, *USER_NAME),
        'createdAt': iso(machine.created_at),
        'updatedAt': iso(machine.updated_at),
    }
    if with_history:
        data['maintenance']['history'] = maintenance_history('machine', machine.id)
    return data


machine_list = ListQuery(
    Machine,
    _row_to_dict,
    search_fields=(Machine.name, Machine.model, Machine.manufacturer, Machine.serial_number),
    filters={'category': Machine.category, 'status': Machine.status, 'available': Machine.is_available},
    order_by=(Machine.created_at.desc(),),
)


def _apply_fields(machine, payload):
    data = payload.changes()
    if data.pop('maintenance', None) is not None:
        maintenance = payload.maintenance.values()
        apply_schedule(machine, maintenance)
        for key, value in maintenance.items():
            setattr(machine, key, value)
    for key, value in data.items():
        setattr(machine, key, value)


def list_machines(args):
    return machine_list.run(args)


def get_machine(machine_id):
    return get_or_404(Machine, machine_id, NOT_FOUND)


def get_machine_detail(machine_id):
    return _row_to_dict(get_machine(machine_id), with_history=True)


def create_machine(payload, current_user_id):
    machine = Machine(created_by=current_user_id)
    with transaction_scope(DUPLICATE_SERIAL):
        _apply_fields(machine, payload)
        db.session.add(machine)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'machines', machine.id, None, payload.audit_values())
    logger.info(f"Machine {machine.name} created")
    return _row_to_dict(machine)


def update_machine(machine_id, payload, current_user_id):
    machine = get_machine(machine_id)
    old_values = _row_to_dict(machine)
    with transaction_scope(DUPLICATE_SERIAL):
        _apply_fields(machine, payload)
        machine.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'machines', machine.id, old_values, payload.audit_values())
    return _row_to_dict(machine)


def delete_machine(machine_id, current_user_id):
    machine = get_machine(machine_id)
    with transaction_scope():
        machine.is_active = False
        machine.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'machines', machine.id, {'isActive': True}, {'isActive': False})
    return True


def book_machine(machine_id, payload, current_user_id):
    machine = get_machine(machine_id)
    check_booking(machine, 'book', 'Machine')
    with transaction_scope():
        machine.current_job_id = resolve_job(payload.job_id)
        machine.is_available = False
        machine.booked_until = payload.booked_until or payload.until
        machine.booked_by = current_user_id
        machine.last_updated_by = current_user_id
        log_action(current_user_id, 'BOOK', 'machines', machine.id, {'isAvailable': True}, payload.audit_values())
    return _row_to_dict(machine)


def release_machine(machine_id, current_user_id):
    machine = get_machine(machine_id)
    check_booking(machine, 'release', 'Machine')
    with transaction_scope():
        machine.is_available = True
        machine.current_job_id = None
        machine.booked_until = None
        machine.booked_by = None
        machine.last_updated_by = current_user_id
        log_action(current_user_id, 'RELEASE', 'machines', machine.id, {'isAvailable': False}, {'isAvailable': True})
    return _row_to_dict(machine)


def add_maintenance_record(machine_id, payload, current_user_id):
    machine = get_machine(machine_id)
    with transaction_scope():
        record = record_maintenance(machine, 'machine', payload, current_user_id)
        machine.last_updated_by = current_user_id
        db.session.flush()
        log_action(current_user_id, 'MAINTENANCE', 'machines', machine.id, None, maintenance_to_dict(record))
    return _row_to_dict(machine, with_history=True)


def get_machine_stats():
    return {
        'total': count_active(Machine),
        'byStatus': {
            'operational': count_active(Machine, Machine.status == 'operational'),
            'maintenance': count_active(Machine, Machine.status == 'maintenance'),
            'broken': count_active(Machine, Machine.status == 'broken'),
        },
        'available': count_active(Machine, Machine.is_available.is_(True)),
        'overdueMaintenance': overdue_maintenance(Machine),
        'byCategory': count_by(Machine, Machine.category),
    }
