import logging

from erp_api import db
from erp_api.crud.list_query import ListQuery, equality_clause, search_clause
from erp_api.models import ServiceTemplate
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, iso, money, ref

logger = logging.getLogger(__name__)

NOT_FOUND = 'Service template not found'


def _row_to_dict(template):
    return {
        'id': str(template.id),
        'name': template.name,
        'description': template.description,
        'category': template.category,
        'estimatedDuration': template.estimated_duration,
        'estimatedCost': money(template.estimated_cost) or 0.0,
        'priority': template.priority,
        'requiredTools': template.required_tools or [],
        'requiredParts': template.required_parts or [],
        'tasks': template.tasks or [],
        'notes': template.notes,
        'isActive': template.is_active,
        'createdBy': ref(template.creator, *USER_NAME),
        'lastUpdatedBy': ref(template.updater, *USER_NAME),
        'createdAt': iso(template.created_at),
        'updatedAt': iso(template.updated_at),
    }


template_list = ListQuery(
    ServiceTemplate,
    _row_to_dict,
    search_fields=(ServiceTemplate.name, ServiceTemplate.description),
    filters={'category': ServiceTemplate.category},
    order_by=(ServiceTemplate.name.asc(),),
)


def _apply_fields(template, payload):
    data = payload.changes()
    if 'estimated_cost' in data:
        data['estimated_cost'] = payload.estimated_cost
    for key, value in data.items():
        setattr(template, key, value)


def _active_templates(*criteria):
    return ServiceTemplate.query.filter(ServiceTemplate.is_active.is_(True), *criteria) \
        .order_by(ServiceTemplate.name.asc()).all()


def list_templates(args):
    return template_list.run(args)


def get_template(template_id):
    return get_or_404(ServiceTemplate, template_id, NOT_FOUND)


def get_template_detail(template_id):
    return _row_to_dict(get_template(template_id))


def create_template(payload, current_user_id):
    template = ServiceTemplate(created_by=current_user_id)
    with transaction_scope():
        _apply_fields(template, payload)
        db.session.add(template)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'service_templates', template.id, None, payload.audit_values())
    logger.info(f"Service template {template.name} created")
    return _row_to_dict(template)


def update_template(template_id, payload, current_user_id):
    template = get_template(template_id)
    old_values = _row_to_dict(template)
    with transaction_scope():
        _apply_fields(template, payload)
        template.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'service_templates', template.id, old_values, payload.audit_values())
    return _row_to_dict(template)


def delete_template(template_id, current_user_id):
    template = get_template(template_id)
    with transaction_scope():
        template.is_active = False
        template.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'service_templates', template.id,
                   {'isActive': True}, {'isActive': False})
    return True


def get_templates_by_category(category):
    return [_row_to_dict(item) for item in _active_templates(equality_clause(ServiceTemplate.category, category))]


def search_templates(term):
    term = (term or '').strip()
    if not term:
        return []
    criteria = search_clause([ServiceTemplate.name, ServiceTemplate.description], term)
    return [_row_to_dict(item) for item in _active_templates(criteria)]
