import logging

from sqlalchemy import func

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.exceptions import ForbiddenError, NotFoundError, ValidationError
from erp_api.models import Invoice, User, Warehouse, WarehouseEmployee
from erp_api.utils.date_utils import utc_now
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import iso, money, ref, ref_id

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = 'User with this email already exists'
NOT_FOUND = 'User not found'

ASSIGNABLE_ROLES = ('admin', 'manager', 'customer', 'warehouse_manager',
                    'warehouse_employee', 'sales_person', 'workshop_employee')
ROLE_ALIASES = {
    'employee': 'warehouse_employee',
    'sales': 'sales_person',
    'workshop': 'workshop_employee',
}
EMPLOYEE_ROLES = ('employee', 'warehouse_employee')
USER_CREATOR_ROLES = ('admin', 'manager', 'warehouse_manager')


def _row_to_dict(user):
    return {
        'id': str(user.id),
        'firstName': user.first_name,
        'lastName': user.last_name,
        'fullName': user.full_name,
        'email': user.email,
        'phone': user.phone,
        'role': user.role,
        'avatar': user.avatar,
        'department': user.department,
        'position': user.position,
        'hireDate': iso(user.hire_date),
        'salary': money(user.salary),
        'address': user.address or {},
        'preferences': user.preferences or {},
        'lastLogin': iso(user.last_login),
        'walletBalance': money(user.wallet_balance) or 0.0,
        'warehouse': {
            'assignedWarehouse': ref(user.warehouse, 'name', 'code'),
            'warehousePosition': user.warehouse_position,
            'assignedAt': iso(user.warehouse_assigned_at),
        },
        'isActive': user.is_active,
        'createdBy': ref_id(user.created_by),
        'createdAt': iso(user.created_at),
        'updatedAt': iso(user.updated_at),
    }


user_list = ListQuery(
    User,
    _row_to_dict,
    search_fields=(User.first_name, User.last_name, User.email),
    filters={'role': User.role, 'department': User.department},
    order_by=(User.created_at.desc(),),
)


def normalize_role(role):
    """Map a free-text role (aliases, spaces, case) onto a stored role; None stays None."""
    if role is None:
        return None
    normalized = '_'.join(str(role).lower().split())
    normalized = ROLE_ALIASES.get(normalized, normalized)
    if normalized not in ASSIGNABLE_ROLES:
        raise ValidationError(f"Invalid role. Allowed roles: {', '.join(ASSIGNABLE_ROLES)}")
    return normalized


def _check_create_permission(current_user, role, warehouse_id):
    if current_user.role in EMPLOYEE_ROLES:
        raise ForbiddenError('Employees cannot create users')
    if current_user.role not in USER_CREATOR_ROLES:
        raise ForbiddenError('Unauthorized action')
    if current_user.role == 'manager' and role == 'admin':
        raise ForbiddenError('Managers can only create employees and customers')
    if current_user.role == 'warehouse_manager':
        if role != 'warehouse_employee':
            raise ForbiddenError('Warehouse managers can only create warehouse employees')
        if warehouse_id is not None and current_user.warehouse_id != warehouse_id:
            raise ForbiddenError('You can only create employees for warehouses you manage')


def _apply_fields(user, data):
    if data.get('email'):
        data['email'] = data['email'].lower()
    for key, value in data.items():
        setattr(user, key, value)


def list_users(args):
    return user_list.run(args)


def get_user(user_id):
    return get_or_404(User, user_id, NOT_FOUND)


def get_user_detail(user_id):
    return _row_to_dict(get_user(user_id))


def create_user(payload, current_user_id):
    """
    Create a user on behalf of the acting user. Warehouse employees are
    attached to their warehouse roster in the same commit.
    """
    current_user = get_user(current_user_id)
    data = payload.changes()
    password = data.pop('password')
    warehouse_id = data.pop('warehouse', None)
    role = normalize_role(data.pop('role', None))

    _check_create_permission(current_user, role, warehouse_id)

    warehouse = None
    if role == 'warehouse_employee':
        if warehouse_id is None:
            raise ValidationError('Warehouse is required for warehouse employee role')
        warehouse = db.session.get(Warehouse, warehouse_id)
        if warehouse is None:
            raise NotFoundError('Warehouse not found')

    user = User(created_by=current_user.id)
    with transaction_scope(DUPLICATE_EMAIL):
        _apply_fields(user, data)
        if role:
            user.role = role
        user.set_password(password)
        if warehouse is not None:
            user.warehouse_id = warehouse.id
            user.warehouse_position = 'warehouse_employee'
            user.warehouse_assigned_at = utc_now()
        db.session.add(user)
        db.session.flush()
        if warehouse is not None:
            warehouse.employees.append(WarehouseEmployee(
                user_id=user.id,
                position='warehouse_employee',
                assigned_by=current_user.id
            ))
        log_action(current_user.id, 'CREATE', 'users', user.id, None, payload.audit_values())
    logger.info(f"User {user.email} created with role {user.role}")
    return _row_to_dict(user)


def update_user(user_id, payload, current_user_id):
    user = get_user(user_id)
    current_user = get_user(current_user_id)
    if current_user.role == 'manager' and user.role == 'admin':
        raise ForbiddenError('Managers cannot modify admin accounts')
    old_values = _row_to_dict(user)
    data = payload.changes()
    if 'role' in data:
        data['role'] = normalize_role(data['role'])
        _check_create_permission(current_user, data['role'], user.warehouse_id)
    with transaction_scope(DUPLICATE_EMAIL):
        _apply_fields(user, data)
        user.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'users', user.id, old_values, payload.audit_values())
    return _row_to_dict(user)


def delete_user(user_id, current_user_id):
    user = get_user(user_id)
    with transaction_scope():
        user.is_active = False
        user.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'users', user.id, {'isActive': True}, {'isActive': False})
    return True


def get_profile(current_user_id):
    return _row_to_dict(get_user(current_user_id))


def update_profile(payload, current_user_id):
    user = get_user(current_user_id)
    old_values = _row_to_dict(user)
    with transaction_scope(DUPLICATE_EMAIL):
        _apply_fields(user, payload.changes())
        user.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE_PROFILE', 'users', user.id, old_values, payload.audit_values())
    return _row_to_dict(user)


def get_user_stats(user_id):
    user = get_user(user_id)
    total_invoices, total_sales = db.session.query(
        func.count(Invoice.id), func.coalesce(func.sum(Invoice.total), 0)
    ).filter(Invoice.created_by == user.id, Invoice.is_active.is_(True)).one()
    return {
        'totalInvoices': total_invoices,
        'totalSales': money(total_sales) or 0.0,
        'lastLogin': iso(user.last_login),
        'accountAge': (utc_now() - user.created_at).days if user.created_at else 0,
    }
