from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import service_template_crud
from ..schemas.service_templates import TemplateCreate, TemplateUpdate
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id, roles_required

WORKSHOP_ROLES = ('admin', 'manager', 'workshop_employee')


@main.route('/service-templates', methods=['GET'])
@jwt_required()
@roles_required(*WORKSHOP_ROLES)
def list_service_templates():
    items, pagination = service_template_crud.list_templates(request.args)
    return success_response(items, pagination=pagination)


@main.route('/service-templates/category/<string:category>', methods=['GET'])
@jwt_required()
@roles_required(*WORKSHOP_ROLES)
def service_templates_by_category(category):
    return success_response(service_template_crud.get_templates_by_category(category))


@main.route('/service-templates/search/<string:query>', methods=['GET'])
@jwt_required()
@roles_required(*WORKSHOP_ROLES)
def search_service_templates(query):
    return success_response(service_template_crud.search_templates(query))


@main.route('/service-templates', methods=['POST'])
@jwt_required()
@roles_required(*WORKSHOP_ROLES)
def create_service_template():
    payload = load_payload(TemplateCreate)
    template = service_template_crud.create_template(payload, current_user_id())
    return success_response(template, 'Service template created successfully', 201)


@main.route('/service-templates/<string:id>', methods=['GET'])
@jwt_required()
@roles_required(*WORKSHOP_ROLES)
def get_service_template(id):
    return success_response(service_template_crud.get_template_detail(id))


@main.route('/service-templates/<string:id>', methods=['PUT'])
@jwt_required()
@roles_required(*WORKSHOP_ROLES)
def update_service_template(id):
    payload = load_payload(TemplateUpdate)
    template = service_template_crud.update_template(id, payload, current_user_id())
    return success_response(template, 'Service template updated successfully')


@main.route('/service-templates/<string:id>', methods=['DELETE'])
@jwt_required()
@roles_required('admin', 'manager')
def delete_service_template(id):
    service_template_crud.delete_template(id, current_user_id())
    return success_response(message='Service template deleted successfully')
