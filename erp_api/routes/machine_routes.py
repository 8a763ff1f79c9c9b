from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import machine_crud
from ..schemas.resources import BookingIn, MachineCreate, MachineUpdate, MaintenanceRecordIn
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/machines/stats', methods=['GET'])
@jwt_required()
def machine_stats():
    return success_response(machine_crud.get_machine_stats())


@main.route('/machines', methods=['GET'])
@jwt_required()
def list_machines():
    items, pagination = machine_crud.list_machines(request.args)
    return success_response(items, pagination=pagination)


@main.route('/machines', methods=['POST'])
@jwt_required()
def create_machine():
    payload = load_payload(MachineCreate)
    machine = machine_crud.create_machine(payload, current_user_id())
    return success_response(machine, 'Machine created successfully', 201)


@main.route('/machines/<string:id>', methods=['GET'])
@jwt_required()
def get_machine(id):
    return success_response(machine_crud.get_machine_detail(id))


@main.route('/machines/<string:id>', methods=['PUT'])
@jwt_required()
def update_machine(id):
    payload = load_payload(MachineUpdate)
    machine = machine_crud.update_machine(id, payload, current_user_id())
    return success_response(machine, 'Machine updated successfully')


@main.route('/machines/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_machine(id):
    machine_crud.delete_machine(id, current_user_id())
    return success_response(message='Machine deleted successfully')


@main.route('/machines/<string:id>/book', methods=['POST'])
@jwt_required()
def book_machine(id):
    payload = load_payload(BookingIn)
    machine = machine_crud.book_machine(id, payload, current_user_id())
    return success_response(machine, 'Machine booked successfully')


@main.route('/machines/<string:id>/release', methods=['POST'])
@jwt_required()
def release_machine(id):
    machine = machine_crud.release_machine(id, current_user_id())
    return success_response(machine, 'Machine released successfully')


@main.route('/machines/<string:id>/maintenance', methods=['POST'])
@jwt_required()
def add_machine_maintenance(id):
    payload = load_payload(MaintenanceRecordIn)
    machine = machine_crud.add_maintenance_record(id, payload, current_user_id())
    return success_response(machine, 'Maintenance record added successfully')
