from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import settings_crud
from ..schemas.settings import SettingsUpdate
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id, roles_required

SETTINGS_ROLES = ('admin', 'manager')


@main.route('/settings/public', methods=['GET'])
def public_settings():
    return success_response(settings_crud.get_public_settings())


@main.route('/settings', methods=['GET'])
@jwt_required()
def get_settings():
    return success_response(settings_crud.get_settings_detail())


@main.route('/settings', methods=['PUT'])
@jwt_required()
@roles_required(*SETTINGS_ROLES)
def update_settings():
    payload = load_payload(SettingsUpdate)
    settings = settings_crud.update_settings(payload, current_user_id())
    return success_response(settings, 'Settings updated')


@main.route('/settings/logo', methods=['POST'])
@jwt_required()
@roles_required(*SETTINGS_ROLES)
def upload_logo():
    logo = settings_crud.upload_logo(request.files.get('logo'), current_user_id())
    return success_response(logo, 'Logo uploaded successfully')


@main.route('/settings/logo', methods=['DELETE'])
@jwt_required()
@roles_required(*SETTINGS_ROLES)
def delete_logo():
    settings_crud.delete_logo(current_user_id())
    return success_response(message='Logo deleted successfully')
