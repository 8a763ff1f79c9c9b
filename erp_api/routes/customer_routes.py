from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import customer_crud
from ..schemas.customers import CustomerCreate, CustomerUpdate, WalletEntryIn
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/customers', methods=['GET'])
@jwt_required()
def list_customers():
    items, pagination = customer_crud.list_customers(request.args)
    return success_response(items, pagination=pagination)


@main.route('/customers/top', methods=['GET'])
@jwt_required()
def top_customers():
    return success_response(customer_crud.get_top_customers(request.args))


@main.route('/customers', methods=['POST'])
@jwt_required()
def create_customer():
    payload = load_payload(CustomerCreate)
    customer = customer_crud.create_customer(payload, current_user_id())
    return success_response(customer, 'Customer created successfully', 201)


@main.route('/customers/<string:id>', methods=['GET'])
@jwt_required()
def get_customer(id):
    return success_response(customer_crud.get_customer_detail(id))


@main.route('/customers/<string:id>', methods=['PUT'])
@jwt_required()
def update_customer(id):
    payload = load_payload(CustomerUpdate)
    customer = customer_crud.update_customer(id, payload, current_user_id())
    return success_response(customer, 'Customer updated successfully')


@main.route('/customers/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_customer(id):
    customer_crud.delete_customer(id, current_user_id())
    return success_response(message='Customer deactivated successfully')


@main.route('/customers/<string:id>/stats', methods=['GET'])
@jwt_required()
def customer_stats(id):
    return success_response(customer_crud.get_customer_stats(id))


@main.route('/customers/<string:id>/wallet', methods=['POST'])
@jwt_required()
def add_wallet_transaction(id):
    payload = load_payload(WalletEntryIn)
    result = customer_crud.add_wallet_transaction(id, payload, current_user_id())
    return success_response(result, 'Wallet transaction added successfully')


@main.route('/customers/<string:id>/wallet/transactions', methods=['GET'])
@jwt_required()
def wallet_transactions(id):
    items, pagination = customer_crud.list_wallet_transactions(id, request.args)
    return success_response(items, pagination=pagination)
