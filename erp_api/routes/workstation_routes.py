from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import workstation_crud
from ..schemas.resources import (
    BookingIn, WorkstationCreate, WorkstationMaintenanceScheduleIn, WorkstationReleaseIn, WorkstationUpdate,
)
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/workstations/stats', methods=['GET'])
@jwt_required()
def workstation_stats():
    return success_response(workstation_crud.get_workstation_stats())


@main.route('/workstations', methods=['GET'])
@jwt_required()
def list_workstations():
    items, pagination = workstation_crud.list_workstations(request.args)
    return success_response(items, pagination=pagination)


@main.route('/workstations', methods=['POST'])
@jwt_required()
def create_workstation():
    payload = load_payload(WorkstationCreate)
    station = workstation_crud.create_workstation(payload, current_user_id())
    return success_response(station, 'Workstation created successfully', 201)


@main.route('/workstations/<string:id>', methods=['GET'])
@jwt_required()
def get_workstation(id):
    return success_response(workstation_crud.get_workstation_detail(id))


@main.route('/workstations/<string:id>', methods=['PUT'])
@jwt_required()
def update_workstation(id):
    payload = load_payload(WorkstationUpdate)
    station = workstation_crud.update_workstation(id, payload, current_user_id())
    return success_response(station, 'Workstation updated successfully')


@main.route('/workstations/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_workstation(id):
    workstation_crud.delete_workstation(id, current_user_id())
    return success_response(message='Workstation deleted successfully')


@main.route('/workstations/<string:id>/book', methods=['POST'])
@jwt_required()
def book_workstation(id):
    payload = load_payload(BookingIn)
    station = workstation_crud.book_workstation(id, payload, current_user_id())
    return success_response(station, 'Workstation booked successfully')


@main.route('/workstations/<string:id>/release', methods=['POST'])
@jwt_required()
def release_workstation(id):
    payload = load_payload(WorkstationReleaseIn)
    station = workstation_crud.release_workstation(id, payload, current_user_id())
    return success_response(station, 'Workstation released successfully')


@main.route('/workstations/<string:id>/maintenance', methods=['POST'])
@jwt_required()
def schedule_workstation_maintenance(id):
    payload = load_payload(WorkstationMaintenanceScheduleIn)
    station = workstation_crud.schedule_maintenance(id, payload, current_user_id())
    return success_response(station, 'Maintenance scheduled successfully')
