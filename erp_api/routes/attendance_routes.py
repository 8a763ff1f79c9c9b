from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import attendance_crud
from ..schemas.attendance import ApprovalIn, AttendanceUpdate, BreakIn, CheckInIn, CheckOutIn
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/hrm/attendance', methods=['GET'])
@jwt_required()
def list_attendance():
    items, pagination = attendance_crud.list_attendance(request.args)
    return success_response(items, pagination=pagination)


@main.route('/hrm/attendance/stats', methods=['GET'])
@jwt_required()
def attendance_stats():
    return success_response(attendance_crud.get_attendance_stats(request.args))


@main.route('/hrm/attendance/today', methods=['GET'])
@jwt_required()
def todays_attendance():
    return success_response(attendance_crud.get_todays_attendance())


@main.route('/hrm/attendance/checkin', methods=['POST'])
@jwt_required()
def check_in():
    payload = load_payload(CheckInIn)
    attendance = attendance_crud.check_in(payload, current_user_id())
    return success_response(attendance, 'Check-in recorded successfully', 201)


@main.route('/hrm/attendance/checkout', methods=['POST'])
@jwt_required()
def check_out():
    payload = load_payload(CheckOutIn)
    attendance = attendance_crud.check_out(payload, current_user_id())
    return success_response(attendance, 'Check-out recorded successfully')


@main.route('/hrm/attendance/employee/<string:employee_id>/summary', methods=['GET'])
@jwt_required()
def employee_attendance_summary(employee_id):
    return success_response(attendance_crud.get_employee_summary(employee_id, request.args))


@main.route('/hrm/attendance/<string:id>', methods=['GET'])
@jwt_required()
def get_attendance(id):
    return success_response(attendance_crud.get_attendance_detail(id))


@main.route('/hrm/attendance/<string:id>', methods=['PUT'])
@jwt_required()
def update_attendance(id):
    payload = load_payload(AttendanceUpdate)
    attendance = attendance_crud.update_attendance(id, payload, current_user_id())
    return success_response(attendance, 'Attendance record updated successfully')


@main.route('/hrm/attendance/<string:id>/breaks', methods=['POST'])
@jwt_required()
def add_break(id):
    payload = load_payload(BreakIn)
    attendance = attendance_crud.add_break(id, payload, current_user_id())
    return success_response(attendance, 'Break added successfully')


@main.route('/hrm/attendance/<string:id>/approve', methods=['PUT'])
@jwt_required()
def approve_attendance(id):
    payload = load_payload(ApprovalIn)
    attendance = attendance_crud.approve_attendance(id, payload, current_user_id())
    return success_response(attendance, 'Attendance record approved successfully')
