from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import sales_outlet_crud
from ..schemas.sales_outlets import OutletCreate, OutletUpdate
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id, roles_required

OUTLET_ADMIN_ROLES = ('admin', 'manager')


@main.route('/sales-outlets/active/list', methods=['GET'])
@jwt_required()
def active_outlets():
    return success_response(sales_outlet_crud.get_active_outlets())


@main.route('/sales-outlets', methods=['GET'])
@jwt_required()
def list_outlets():
    items, pagination = sales_outlet_crud.list_outlets(request.args)
    return success_response(items, pagination=pagination)


@main.route('/sales-outlets', methods=['POST'])
@jwt_required()
@roles_required(*OUTLET_ADMIN_ROLES)
def create_outlet():
    payload = load_payload(OutletCreate)
    outlet = sales_outlet_crud.create_outlet(payload, current_user_id())
    return success_response(outlet, 'Sales outlet created successfully', 201)


@main.route('/sales-outlets/<string:id>', methods=['GET'])
@jwt_required()
def get_outlet(id):
    return success_response(sales_outlet_crud.get_outlet_detail(id))


@main.route('/sales-outlets/<string:id>', methods=['PUT'])
@jwt_required()
@roles_required(*OUTLET_ADMIN_ROLES)
def update_outlet(id):
    payload = load_payload(OutletUpdate)
    outlet = sales_outlet_crud.update_outlet(id, payload, current_user_id())
    return success_response(outlet, 'Sales outlet updated successfully')


@main.route('/sales-outlets/<string:id>', methods=['DELETE'])
@jwt_required()
@roles_required(*OUTLET_ADMIN_ROLES)
def delete_outlet(id):
    sales_outlet_crud.delete_outlet(id, current_user_id())
    return success_response(message='Sales outlet deleted successfully')


@main.route('/sales-outlets/<string:id>/stats', methods=['GET'])
@jwt_required()
def outlet_stats(id):
    return success_response(sales_outlet_crud.get_outlet_stats(id))
