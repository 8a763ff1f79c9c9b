from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import user_crud
from ..schemas.users import ProfileUpdate, UserCreate, UserUpdate
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id, roles_required


@main.route('/users', methods=['GET'])
@jwt_required()
@roles_required('admin', 'manager')
def list_users():
    items, pagination = user_crud.list_users(request.args)
    return success_response(items, pagination=pagination)


@main.route('/users/profile', methods=['GET'])
@jwt_required()
def get_profile():
    return success_response(user_crud.get_profile(current_user_id()))


@main.route('/users/profile', methods=['PUT'])
@jwt_required()
def update_profile():
    payload = load_payload(ProfileUpdate)
    user = user_crud.update_profile(payload, current_user_id())
    return success_response(user, 'Profile updated successfully')


@main.route('/users', methods=['POST'])
@jwt_required()
def create_user():
    # Who may create which role is decided per request by the create operation.
    payload = load_payload(UserCreate)
    user = user_crud.create_user(payload, current_user_id())
    return success_response(user, 'User created successfully', 201)


@main.route('/users/<string:id>', methods=['GET'])
@jwt_required()
def get_user(id):
    return success_response(user_crud.get_user_detail(id))


@main.route('/users/<string:id>', methods=['PUT'])
@jwt_required()
@roles_required('admin', 'manager')
def update_user(id):
    payload = load_payload(UserUpdate)
    user = user_crud.update_user(id, payload, current_user_id())
    return success_response(user, 'User updated successfully')


@main.route('/users/<string:id>', methods=['DELETE'])
@jwt_required()
@roles_required('admin')
def delete_user(id):
    user_crud.delete_user(id, current_user_id())
    return success_response(message='User deactivated successfully')


@main.route('/users/<string:id>/stats', methods=['GET'])
@jwt_required()
def user_stats(id):
    return success_response(user_crud.get_user_stats(id))
