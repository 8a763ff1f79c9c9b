import logging
from datetime import timedelta

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.crud.resource_utils import (
    apply_schedule, check_booking, count_active, count_by, maintenance_history,
    maintenance_to_dict, overdue_maintenance, record_maintenance, resolve_job,
)
from erp_api.exceptions import InvalidStateError
from erp_api.models import Tool
from erp_api.utils.date_utils import utc_now
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, iso, ref

logger = logging.getLogger(__name__)

DUPLICATE_NUMBER = 'Tool with this tool number already exists'
NOT_FOUND = 'Tool not found'


def _row_to_dict(tool, with_history=False):
    data = {
        'id': str(tool.id),
        'name': tool.name,
        'toolNumber': tool.tool_number,
        'category': tool.category,
        'subcategory': tool.subcategory,
        'brand': tool.brand,
        'model': tool.model,
        'serialNumber': tool.serial_number,
        'condition': tool.condition,
        'status': tool.status,
        'location': tool.location or {},
        'specifications': tool.specifications or {},
        'purchaseInfo': tool.purchase_info or {},
        'maintenance': {
            'schedule': tool.maintenance_schedule,
            'lastMaintenance': iso(tool.last_maintenance),
            'nextMaintenance': iso(tool.next_maintenance),
        },
        'availability': {
            'isAvailable': tool.is_available,
            'assignedTo': ref(tool.assignee, *USER_NAME),
            'assignedAt': iso(tool.assigned_at),
            'expectedReturn': iso(tool.expected_return),
            'currentJob': ref(tool.current_job, 'title', 'status'),
        },
        'usage': {
            'usageCount': tool.usage_count or 0,
            'totalHours': tool.total_hours or 0,
            'lastUsed': iso(tool.last_used),
        },
        'calibration': {
            'requiresCalibration': tool.requires_calibration,
            'lastCalibrated': iso(tool.last_calibrated),
            'nextCalibration': iso(tool.next_calibration),
            'calibrationInterval': tool.calibration_interval,
            'certificate': tool.calibration_certificate,
        },
        'notes': tool.notes,
        'isActive': tool.is_active,
        'createdBy': ref(tool.creator, *USER_NAME),
        'lastUpdatedBy': ref(tool.updater, *USER_NAME),
        'createdAt': iso(tool.created_at),
        'updatedAt': iso(tool.updated_at),
    }
    if with_history:
        data['maintenance']['history'] = maintenance_history('tool', tool.id)
    return data


tool_list = ListQuery(
    Tool,
    _row_to_dict,
    search_fields=(Tool.name, Tool.tool_number, Tool.brand, Tool.model, Tool.serial_number),
    filters={
        'category': Tool.category,
        'status': Tool.status,
        'condition': Tool.condition,
        'available': Tool.is_available,
    },
    order_by=(Tool.created_at.desc(),),
)


def _apply_fields(tool, payload):
    data = payload.changes()
    if data.pop('maintenance', None) is not None:
        maintenance = payload.maintenance.values()
        apply_schedule(tool, maintenance)
        for key, value in maintenance.items():
            setattr(tool, key, value)
    if data.pop('calibration', None) is not None:
        for key, value in payload.calibration.values().items():
            setattr(tool, key, value)
    for key, value in data.items():
        setattr(tool, key, value)


def list_tools(args):
    return tool_list.run(args)


def get_tool(tool_id):
    return get_or_404(Tool, tool_id, NOT_FOUND)


def get_tool_detail(tool_id):
    return _row_to_dict(get_tool(tool_id), with_history=True)


def create_tool(payload, current_user_id):
    tool = Tool(created_by=current_user_id)
    with transaction_scope(DUPLICATE_NUMBER):
        _apply_fields(tool, payload)
        db.session.add(tool)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'tools', tool.id, None, payload.audit_values())
    logger.info(f"Tool {tool.name} created")
    return _row_to_dict(tool)


def update_tool(tool_id, payload, current_user_id):
    tool = get_tool(tool_id)
    old_values = _row_to_dict(tool)
    with transaction_scope(DUPLICATE_NUMBER):
        _apply_fields(tool, payload)
        tool.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'tools', tool.id, old_values, payload.audit_values())
    return _row_to_dict(tool)


def delete_tool(tool_id, current_user_id):
    tool = get_tool(tool_id)
    with transaction_scope():
        tool.is_active = False
        tool.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'tools', tool.id, {'isActive': True}, {'isActive': False})
    return True


def assign_tool(tool_id, payload, current_user_id):
    tool = get_tool(tool_id)
    check_booking(tool, 'book', 'Tool')
    with transaction_scope():
        tool.current_job_id = resolve_job(payload.job_id)
        tool.is_available = False
        tool.assigned_to = current_user_id
        tool.assigned_at = utc_now()
        tool.expected_return = payload.expected_return
        tool.status = 'in_use'
        tool.last_updated_by = current_user_id
        log_action(current_user_id, 'ASSIGN', 'tools', tool.id, {'isAvailable': True}, payload.audit_values())
    return _row_to_dict(tool)


def return_tool(tool_id, payload, current_user_id):
    """Release an assigned tool; the time it was out is added to its usage hours."""
    tool = get_tool(tool_id)
    check_booking(tool, 'release', 'Tool')
    now = utc_now()
    with transaction_scope():
        if tool.assigned_at:
            hours = (now - tool.assigned_at) / timedelta(hours=1)
            tool.total_hours = round((tool.total_hours or 0) + hours, 2)
        tool.is_available = True
        tool.current_job_id = None
        tool.assigned_to = None
        tool.assigned_at = None
        tool.expected_return = None
        tool.status = 'available'
        if payload.condition:
            tool.condition = payload.condition
        tool.usage_count = (tool.usage_count or 0) + 1
        tool.last_used = now
        tool.last_updated_by = current_user_id
        log_action(current_user_id, 'RETURN', 'tools', tool.id, {'isAvailable': False}, payload.audit_values())
    return _row_to_dict(tool)


def add_maintenance_record(tool_id, payload, current_user_id):
    tool = get_tool(tool_id)
    with transaction_scope():
        record = record_maintenance(tool, 'tool', payload, current_user_id)
        tool.last_updated_by = current_user_id
        db.session.flush()
        log_action(current_user_id, 'MAINTENANCE', 'tools', tool.id, None, maintenance_to_dict(record))
    return _row_to_dict(tool, with_history=True)


def calibrate_tool(tool_id, payload, current_user_id):
    tool = get_tool(tool_id)
    if not tool.requires_calibration:
        raise InvalidStateError('This tool does not require calibration')

    with transaction_scope():
        tool.last_calibrated = payload.calibration_date or utc_now()
        tool.calibration_certificate = payload.certificate
        tool.next_calibration = tool.last_calibrated + timedelta(days=tool.calibration_interval or 365)
        tool.last_updated_by = current_user_id
        log_action(current_user_id, 'CALIBRATE', 'tools', tool.id, None, payload.audit_values())
    return _row_to_dict(tool)


def get_tool_stats():
    now = utc_now()
    return {
        'total': count_active(Tool),
        'available': count_active(Tool, Tool.is_available.is_(True)),
        'inUse': count_active(Tool, Tool.status == 'in_use'),
        'maintenance': count_active(Tool, Tool.status == 'maintenance'),
        'overdueMaintenance': overdue_maintenance(Tool),
        'overdueCalibration': count_active(Tool, Tool.requires_calibration.is_(True), Tool.next_calibration < now),
        'byCategory': count_by(Tool, Tool.category),
        'byCondition': count_by(Tool, Tool.condition),
    }
