from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import supplier_crud
from ..schemas.suppliers import RatingIn, SupplierCreate, SupplierUpdate
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/suppliers', methods=['GET'])
@jwt_required()
def list_suppliers():
    items, pagination = supplier_crud.list_suppliers(request.args)
    return success_response(items, pagination=pagination)


@main.route('/suppliers/top', methods=['GET'])
@jwt_required()
def top_suppliers():
    return success_response(supplier_crud.get_top_suppliers(request.args))


@main.route('/suppliers', methods=['POST'])
@jwt_required()
def create_supplier():
    payload = load_payload(SupplierCreate)
    supplier = supplier_crud.create_supplier(payload, current_user_id())
    return success_response(supplier, 'Supplier created successfully', 201)


@main.route('/suppliers/<string:id>', methods=['GET'])
@jwt_required()
def get_supplier(id):
    return success_response(supplier_crud.get_supplier_detail(id))


@main.route('/suppliers/<string:id>', methods=['PUT'])
@jwt_required()
def update_supplier(id):
    payload = load_payload(SupplierUpdate)
    supplier = supplier_crud.update_supplier(id, payload, current_user_id())
    return success_response(supplier, 'Supplier updated successfully')


@main.route('/suppliers/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_supplier(id):
    supplier_crud.delete_supplier(id, current_user_id())
    return success_response(message='Supplier deactivated successfully')


@main.route('/suppliers/<string:id>/stats', methods=['GET'])
@jwt_required()
def supplier_stats(id):
    return success_response(supplier_crud.get_supplier_stats(id))


@main.route('/suppliers/<string:id>/rating', methods=['PUT'])
@jwt_required()
def update_supplier_rating(id):
    payload = load_payload(RatingIn)
    result = supplier_crud.update_supplier_rating(id, payload, current_user_id())
    return success_response(result, 'Supplier rating updated successfully')
