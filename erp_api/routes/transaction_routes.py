from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import transaction_crud
from ..schemas.transactions import TransactionCreate, TransactionUpdate
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/transactions', methods=['GET'])
@jwt_required()
def list_transactions():
    items, pagination = transaction_crud.list_transactions(request.args)
    return success_response(items, pagination=pagination)


@main.route('/transactions/stats', methods=['GET'])
@jwt_required()
def transaction_stats():
    return success_response(transaction_crud.get_transaction_stats(request.args))


@main.route('/transactions/salesperson-performance', methods=['GET'])
@jwt_required()
def salesperson_performance():
    return success_response(transaction_crud.get_salesperson_performance(request.args))


@main.route('/transactions', methods=['POST'])
@jwt_required()
def create_transaction():
    payload = load_payload(TransactionCreate)
    transaction = transaction_crud.create_transaction(payload, current_user_id())
    return success_response(transaction, 'Transaction created successfully', 201)


@main.route('/transactions/<string:id>', methods=['GET'])
@jwt_required()
def get_transaction(id):
    return success_response(transaction_crud.get_transaction_detail(id))


@main.route('/transactions/<string:id>', methods=['PUT'])
@jwt_required()
def update_transaction(id):
    payload = load_payload(TransactionUpdate)
    transaction = transaction_crud.update_transaction(id, payload, current_user_id())
    return success_response(transaction, 'Transaction updated successfully')


@main.route('/transactions/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_transaction(id):
    transaction_crud.delete_transaction(id, current_user_id())
    return success_response(message='Transaction deleted successfully')


@main.route('/transactions/<string:id>/approve', methods=['PUT'])
@jwt_required()
def approve_transaction(id):
    transaction = transaction_crud.approve_transaction(id, current_user_id())
    return success_response(transaction, 'Transaction approved successfully')


@main.route('/transactions/<string:id>/post', methods=['PUT'])
@jwt_required()
def post_transaction(id):
    transaction = transaction_crud.post_transaction(id, current_user_id())
    return success_response(transaction, 'Transaction posted successfully')


@main.route('/transactions/<string:id>/reconcile', methods=['PUT'])
@jwt_required()
def reconcile_transaction(id):
    transaction = transaction_crud.reconcile_transaction(id, current_user_id())
    return success_response(transaction, 'Transaction reconciled successfully')
