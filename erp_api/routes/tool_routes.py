from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import tool_crud
from ..schemas.resources import (
    CalibrateIn, MaintenanceRecordIn, ToolAssignIn, ToolCreate, ToolReturnIn, ToolUpdate,
)
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/tools/stats', methods=['GET'])
@jwt_required()
def tool_stats():
    return success_response(tool_crud.get_tool_stats())


@main.route('/tools', methods=['GET'])
@jwt_required()
def list_tools():
    items, pagination = tool_crud.list_tools(request.args)
    return success_response(items, pagination=pagination)


@main.route('/tools', methods=['POST'])
@jwt_required()
def create_tool():
    payload = load_payload(ToolCreate)
    tool = tool_crud.create_tool(payload, current_user_id())
    return success_response(tool, 'Tool created successfully', 201)


@main.route('/tools/<string:id>', methods=['GET'])
@jwt_required()
def get_tool(id):
    return success_response(tool_crud.get_tool_detail(id))


@main.route('/tools/<string:id>', methods=['PUT'])
@jwt_required()
def update_tool(id):
    payload = load_payload(ToolUpdate)
    tool = tool_crud.update_tool(id, payload, current_user_id())
    return success_response(tool, 'Tool updated successfully')


@main.route('/tools/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_tool(id):
    tool_crud.delete_tool(id, current_user_id())
    return success_response(message='Tool deleted successfully')


@main.route('/tools/<string:id>/assign', methods=['POST'])
@jwt_required()
def assign_tool(id):
    payload = load_payload(ToolAssignIn)
    tool = tool_crud.assign_tool(id, payload, current_user_id())
    return success_response(tool, 'Tool assigned successfully')


@main.route('/tools/<string:id>/return', methods=['POST'])
@jwt_required()
def return_tool(id):
    payload = load_payload(ToolReturnIn)
    tool = tool_crud.return_tool(id, payload, current_user_id())
    return success_response(tool, 'Tool returned successfully')


@main.route('/tools/<string:id>/maintenance', methods=['POST'])
@jwt_required()
def add_tool_maintenance(id):
    payload = load_payload(MaintenanceRecordIn)
    tool = tool_crud.add_maintenance_record(id, payload, current_user_id())
    return success_response(tool, 'Maintenance record added successfully')


@main.route('/tools/<string:id>/calibrate', methods=['POST'])
@jwt_required()
def calibrate_tool(id):
    payload = load_payload(CalibrateIn)
    tool = tool_crud.calibrate_tool(id, payload, current_user_id())
    return success_response(tool, 'Tool calibrated successfully')
