import logging

from flask import jsonify
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error carrying the HTTP status and the message sent to the caller."""
    status_code = 500

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class NotFoundError(ApiError):
    status_code = 404


class DuplicateKeyError(ApiError):
    status_code = 400


class ValidationError(ApiError):
    status_code = 400

    def __init__(self, message='Validation failed', errors=None):
        super().__init__(message, errors=errors)


class InvalidStateError(ApiError):
    status_code = 400


class ForbiddenError(ApiError):
    status_code = 403


def error_body(message, errors=None):
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return body


def format_validation_errors(error):
    formatted = []
    for item in error.errors():
        field = '.'.join(str(part) for part in item.get('loc', ()))
        formatted.append({'field': field or None, 'message': item.get('msg')})
    return formatted


def register_error_handlers(app):
    from . import db

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify(error_body(error.message, error.errors)), error.status_code

    @app.errorhandler(PydanticValidationError)
    def handle_validation_error(error):
        return jsonify(error_body('Validation failed', format_validation_errors(error))), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify(error_body(error.description or error.name)), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error: {str(error)}")
        db.session.rollback()
        return jsonify(error_body('Server error')), 500
