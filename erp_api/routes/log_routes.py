from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import log_crud
from ..utils.api_response import success_response
from ..utils.auth_utils import roles_required


@main.route('/logs', methods=['GET'])
@jwt_required()
@roles_required('admin')
def list_logs():
    items, pagination = log_crud.list_logs(request.args)
    return success_response(items, pagination=pagination)


@main.route('/logs/summary', methods=['GET'])
@jwt_required()
@roles_required('admin')
def logs_summary():
    return success_response(log_crud.get_logs_summary())


@main.route('/logs/<string:id>', methods=['GET'])
@jwt_required()
@roles_required('admin')
def get_log(id):
    return success_response(log_crud.get_log_detail(id))
