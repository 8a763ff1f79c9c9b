import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import create_access_token, jwt_required

from . import jwt
from .crud import user_crud
from .exceptions import ValidationError, error_body
from .models import User
from .schemas.users import ChangePasswordIn, LoginIn
from .utils.api_response import load_payload, success_response
from .utils.auth_utils import current_user_id
from .utils.date_utils import utc_now
from .utils.db_utils import transaction_scope
from .utils.logging_utils import log_action

logger = logging.getLogger(__name__)

auth = Blueprint('auth', __name__)

INVALID_CREDENTIALS = 'Invalid credentials'


@auth.route('/login', methods=['POST'])
def login():
    payload = load_payload(LoginIn)
    user = User.query.filter_by(email=payload.email.lower()).first()
    if user is None:
        raise ValidationError(INVALID_CREDENTIALS)
    if not user.is_active:
        raise ValidationError('Account is deactivated')
    if not user.check_password(payload.password):
        raise ValidationError(INVALID_CREDENTIALS)

    with transaction_scope():
        user.last_login = utc_now()
        log_action(user.id, 'LOGIN', 'users', user.id)

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={'role': user.role}
    )
    logger.info(f"User {user.email} logged in")
    return success_response({'token': access_token, 'user': user_crud.get_user_detail(user.id)}, 'Login successful')


@auth.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    # Tokens are stateless; the client discards its copy.
    return success_response(message='Logged out successfully')


@auth.route('/me', methods=['GET'])
@jwt_required()
def me():
    return success_response(user_crud.get_profile(current_user_id()))


@auth.route('/change-password', methods=['PUT'])
@jwt_required()
def change_password():
    payload = load_payload(ChangePasswordIn)
    user = user_crud.get_user(current_user_id())
    if not user.check_password(payload.current_password):
        raise ValidationError('Current password is incorrect')
    with transaction_scope():
        user.set_password(payload.new_password)
        user.last_updated_by = user.id
        log_action(user.id, 'CHANGE_PASSWORD', 'users', user.id)
    return success_response(message='Password changed successfully')


@jwt.unauthorized_loader
def missing_token(reason):
    return jsonify(error_body('No token, authorization denied')), 401


@jwt.invalid_token_loader
def invalid_token(reason):
    return jsonify(error_body('Token is not valid')), 401


@jwt.expired_token_loader
def expired_token(jwt_header, jwt_payload):
    return jsonify(error_body('Token has expired')), 401
