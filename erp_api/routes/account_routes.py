from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import account_crud
from ..schemas.accounts import AccountCreate, AccountUpdate
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/accounts', methods=['GET'])
@jwt_required()
def list_accounts():
    items, pagination = account_crud.list_accounts(request.args)
    return success_response(items, pagination=pagination)


@main.route('/accounts/chart', methods=['GET'])
@jwt_required()
def chart_of_accounts():
    return success_response(account_crud.get_chart_of_accounts())


@main.route('/accounts/stats', methods=['GET'])
@jwt_required()
def account_stats():
    return success_response(account_crud.get_account_stats())


@main.route('/accounts/type/<string:account_type>', methods=['GET'])
@jwt_required()
def accounts_by_type(account_type):
    return success_response(account_crud.get_accounts_by_type(account_type, request.args))


@main.route('/accounts', methods=['POST'])
@jwt_required()
def create_account():
    payload = load_payload(AccountCreate)
    account = account_crud.create_account(payload, current_user_id())
    return success_response(account, 'Account created successfully', 201)


@main.route('/accounts/<string:id>', methods=['GET'])
@jwt_required()
def get_account(id):
    return success_response(account_crud.get_account_detail(id))


@main.route('/accounts/<string:id>', methods=['PUT'])
@jwt_required()
def update_account(id):
    payload = load_payload(AccountUpdate)
    account = account_crud.update_account(id, payload, current_user_id())
    return success_response(account, 'Account updated successfully')


@main.route('/accounts/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_account(id):
    account_crud.delete_account(id, current_user_id())
    return success_response(message='Account deactivated successfully')


@main.route('/accounts/<string:id>/balance', methods=['GET'])
@jwt_required()
def account_balance(id):
    return success_response(account_crud.get_account_balance(id, request.args.get('asOfDate')))


@main.route('/accounts/<string:id>/transactions', methods=['GET'])
@jwt_required()
def account_transactions(id):
    items, pagination = account_crud.list_account_transactions(id, request.args)
    return success_response(items, pagination=pagination)
