from flask import jsonify, request


def success_response(data=None, message=None, status=200, **extra):
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    body.update(extra)
    return jsonify(body), status


def load_payload(schema):
    """Validate the JSON body against a request schema; invalid bodies raise pydantic's ValidationError."""
    return schema.model_validate(request.get_json(silent=True) or {})
