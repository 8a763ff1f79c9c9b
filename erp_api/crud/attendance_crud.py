import logging
from collections import defaultdict
from datetime import timedelta

import pytz
from dateutil.relativedelta import relativedelta

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.exceptions import InvalidStateError, NotFoundError
from erp_api.models import Attendance, AttendanceBreak, User
from erp_api.utils.date_utils import business_timezone, local_day_bounds, month_start, parse_date_param, utc_now
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, iso, ref

logger = logging.getLogger(__name__)

NOT_FOUND = 'Attendance record not found'
EMPLOYEE_FIELDS = ('first_name', 'last_name', 'email', 'department', 'position')
DEFAULT_METHOD = 'manual'


def _break_to_dict(item):
    return {
        'id': str(item.id),
        'startTime': iso(item.start_time),
        'endTime': iso(item.end_time),
        'duration': item.duration,
        'type': item.type,
        'notes': item.notes,
    }


def _row_to_dict(attendance):
    return {
        'id': str(attendance.id),
        'employee': ref(attendance.employee, *EMPLOYEE_FIELDS),
        'date': iso(attendance.date),
        'checkIn': {
            'time': iso(attendance.check_in_time),
            'location': attendance.check_in_location,
            'method': attendance.check_in_method,
            'notes': attendance.check_in_notes,
        },
        'checkOut': {
            'time': iso(attendance.check_out_time),
            'location': attendance.check_out_location,
            'method': attendance.check_out_method,
            'notes': attendance.check_out_notes,
        },
        'breaks': [_break_to_dict(item) for item in attendance.breaks],
        'totalHours': attendance.total_hours or 0,
        'overtime': attendance.overtime or 0,
        'status': attendance.status,
        'isApproved': attendance.is_approved,
        'approvedBy': ref(attendance.approver, *USER_NAME),
        'approvedAt': iso(attendance.approved_at),
        'notes': attendance.notes,
        'isActive': attendance.is_active,
        'createdBy': str(attendance.created_by) if attendance.created_by else None,
        'createdAt': iso(attendance.created_at),
        'updatedAt': iso(attendance.updated_at),
    }


def _filter_department(query, value):
    return query.filter(Attendance.employee.has(User.department == value))


attendance_list = ListQuery(
    Attendance,
    _row_to_dict,
    filters={'employee': Attendance.employee_id, 'status': Attendance.status},
    custom_filters={'department': _filter_department},
    date_field=Attendance.date,
    order_by=(Attendance.date.desc(),),
)


def _todays_record(employee_id):
    start, end = local_day_bounds()
    return Attendance.query.filter(
        Attendance.employee_id == employee_id,
        Attendance.date >= start,
        Attendance.date < end
    ).first()


def list_attendance(args):
    return attendance_list.run(args)


def get_attendance(attendance_id):
    return get_or_404(Attendance, attendance_id, NOT_FOUND)


def get_attendance_detail(attendance_id):
    return _row_to_dict(get_attendance(attendance_id))


def check_in(payload, current_user_id):
    employee = db.session.get(User, payload.employee_id)
    if employee is None:
        raise NotFoundError('Employee not found')
    if _todays_record(employee.id) is not None:
        raise InvalidStateError('Employee has already checked in today')

    now = utc_now()
    attendance = Attendance(
        employee_id=employee.id,
        date=now,
        check_in_time=now,
        check_in_location=payload.location,
        check_in_method=payload.method or DEFAULT_METHOD,
        check_in_notes=payload.notes,
        created_by=current_user_id
    )
    with transaction_scope():
        db.session.add(attendance)
        db.session.flush()
        log_action(current_user_id, 'CHECK_IN', 'attendance', attendance.id, None, payload.audit_values())
    logger.info(f"Employee {employee.id} checked in")
    return _row_to_dict(attendance)


def check_out(payload, current_user_id):
    attendance = _todays_record(payload.employee_id)
    if attendance is None or attendance.check_out_time is not None:
        raise NotFoundError('No check-in found for today or already checked out')

    with transaction_scope():
        attendance.check_out_time = utc_now()
        attendance.check_out_location = payload.location
        attendance.check_out_method = payload.method or DEFAULT_METHOD
        attendance.check_out_notes = payload.notes
        attendance.recalculate_hours()
        attendance.last_updated_by = current_user_id
        log_action(current_user_id, 'CHECK_OUT', 'attendance', attendance.id, None, payload.audit_values())
    return _row_to_dict(attendance)


def add_break(attendance_id, payload, current_user_id):
    attendance = get_attendance(attendance_id)
    duration = None
    if payload.end_time is not None:
        duration = round((payload.end_time - payload.start_time).total_seconds() / 60)

    new_break = AttendanceBreak(
        start_time=payload.start_time,
        end_time=payload.end_time,
        duration=duration,
        type=payload.type,
        notes=payload.notes
    )
    with transaction_scope():
        attendance.breaks.append(new_break)
        attendance.recalculate_hours()
        attendance.last_updated_by = current_user_id
        log_action(current_user_id, 'ADD_BREAK', 'attendance', attendance.id, None, payload.audit_values())
    return _break_to_dict(new_break)


def update_attendance(attendance_id, payload, current_user_id):
    attendance = get_attendance(attendance_id)
    old_values = _row_to_dict(attendance)
    with transaction_scope():
        for key, value in payload.changes().items():
            setattr(attendance, key, value)
        attendance.recalculate_hours()
        attendance.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'attendance', attendance.id, old_values, payload.audit_values())
    return _row_to_dict(attendance)


def approve_attendance(attendance_id, payload, current_user_id):
    attendance = get_attendance(attendance_id)
    with transaction_scope():
        attendance.is_approved = True
        attendance.approved_by = current_user_id
        attendance.approved_at = utc_now()
        if payload.notes:
            note = f"Approval: {payload.notes}"
            attendance.notes = f"{attendance.notes}\n{note}" if attendance.notes else note
        attendance.last_updated_by = current_user_id
        log_action(current_user_id, 'APPROVE', 'attendance', attendance.id,
                   {'isApproved': False}, {'isApproved': True})
    return _row_to_dict(attendance)


def get_employee_summary(employee_id, args):
    employee = get_or_404(User, employee_id, 'Employee not found')
    start = parse_date_param(args.get('startDate'), 'startDate') or month_start()
    end = parse_date_param(args.get('endDate'), 'endDate', end_of_day=True) or utc_now()

    records = Attendance.query.filter(
        Attendance.employee_id == employee.id,
        Attendance.is_active.is_(True),
        Attendance.date >= start,
        Attendance.date <= end
    ).all()

    total_days = len(records)
    total_hours = round(sum(record.total_hours or 0 for record in records), 2)
    return {
        'employee': ref(employee, *USER_NAME),
        'totalDays': total_days,
        'presentDays': sum(1 for record in records if record.status == 'present'),
        'absentDays': sum(1 for record in records if record.status == 'absent'),
        'lateDays': sum(1 for record in records if record.status == 'late'),
        'totalHours': total_hours,
        'totalOvertime': round(sum(record.overtime or 0 for record in records), 2),
        'averageHours': round(total_hours / total_days, 2) if total_days else 0,
    }


def _local_date(moment, tz):
    return pytz.utc.localize(moment).astimezone(tz).strftime('%Y-%m-%d')


def get_attendance_stats(args):
    now = utc_now()
    start = parse_date_param(args.get('startDate'), 'startDate') or now - relativedelta(months=1)
    end = parse_date_param(args.get('endDate'), 'endDate', end_of_day=True) or now

    query = Attendance.query.filter(Attendance.is_active.is_(True), Attendance.date >= start, Attendance.date <= end)
    if args.get('department'):
        query = _filter_department(query, args['department'])
    records = query.all()

    status_counts = defaultdict(int)
    for record in records:
        status_counts[record.status] += 1
    approved = sum(1 for record in records if record.is_approved)

    tz = business_timezone()
    week_start, _ = local_day_bounds(now - timedelta(days=6))
    daily = defaultdict(lambda: {'present': 0, 'absent': 0, 'late': 0, 'totalHours': 0})
    for record in records:
        if record.date < week_start:
            continue
        bucket = daily[_local_date(record.date, tz)]
        if record.status in ('present', 'absent', 'late'):
            bucket[record.status] += 1
        bucket['totalHours'] = round(bucket['totalHours'] + (record.total_hours or 0), 2)

    return {
        'totalRecords': len(records),
        'statusStats': [{'status': status, 'count': count} for status, count in sorted(status_counts.items())],
        'approvalRate': round(approved / len(records) * 100, 2) if records else 0,
        'dailyAttendance': [{'date': day, **bucket} for day, bucket in sorted(daily.items())],
    }


def get_todays_attendance():
    start, end = local_day_bounds()
    records = Attendance.query.filter(Attendance.date >= start, Attendance.date < end) \
        .order_by(Attendance.check_in_time.desc()).all()
    return [_row_to_dict(record) for record in records]
