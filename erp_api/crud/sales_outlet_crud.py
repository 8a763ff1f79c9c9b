import logging

from sqlalchemy import func

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.exceptions import InvalidStateError
from erp_api.models import Invoice, SalesOutlet, User, Warehouse
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, iso, money, ref

logger = logging.getLogger(__name__)

DUPLICATE_CODE = 'Outlet code already exists'
NOT_FOUND = 'Sales outlet not found'
OUTLET_PAGE_SIZE = 50

ADDRESS_FIELDS = ('street', 'city', 'state', 'zip_code', 'country')


def _row_to_dict(outlet):
    return {
        'id': str(outlet.id),
        'outletCode': outlet.outlet_code,
        'name': outlet.name,
        'type': outlet.type,
        'description': outlet.description,
        'address': {
            'street': outlet.street,
            'city': outlet.city,
            'state': outlet.state,
            'zipCode': outlet.zip_code,
            'country': outlet.country,
        },
        'contact': outlet.contact or {},
        'warehouse': ref(outlet.warehouse, 'name', 'code'),
        'manager': ref(outlet.manager, *USER_NAME),
        'operatingHours': outlet.operating_hours or {},
        'settings': outlet.settings or {},
        'isActive': outlet.is_active,
        'createdBy': ref(outlet.creator, *USER_NAME),
        'createdAt': iso(outlet.created_at),
        'updatedAt': iso(outlet.updated_at),
    }


outlet_list = ListQuery(
    SalesOutlet,
    _row_to_dict,
    search_fields=(SalesOutlet.name, SalesOutlet.outlet_code, SalesOutlet.city),
    filters={'type': SalesOutlet.type, 'isActive': SalesOutlet.is_active},
    order_by=(SalesOutlet.created_at.desc(),),
    default_limit=OUTLET_PAGE_SIZE,
    active_only=False,
)


def _apply_fields(outlet, payload):
    data = payload.changes()
    if data.pop('address', None) is not None:
        for key, value in payload.address.values().items():
            setattr(outlet, key, value)
    if 'warehouse' in data:
        warehouse_id = data.pop('warehouse')
        if warehouse_id is not None:
            get_or_404(Warehouse, warehouse_id, 'Warehouse not found')
        outlet.warehouse_id = warehouse_id
    if 'manager' in data:
        manager_id = data.pop('manager')
        if manager_id is not None:
            get_or_404(User, manager_id, 'Manager not found')
        outlet.manager_id = manager_id
    if data.get('outlet_code'):
        data['outlet_code'] = data['outlet_code'].upper()
    for key, value in data.items():
        setattr(outlet, key, value)


def list_outlets(args):
    """Active outlets unless the caller filters on isActive explicitly."""
    base_query = None
    if args.get('isActive') in (None, ''):
        base_query = SalesOutlet.query.filter(SalesOutlet.is_active.is_(True))
    return outlet_list.run(args, base_query)


def get_outlet(outlet_id):
    return get_or_404(SalesOutlet, outlet_id, NOT_FOUND)


def get_outlet_detail(outlet_id):
    return _row_to_dict(get_outlet(outlet_id))


def create_outlet(payload, current_user_id):
    outlet = SalesOutlet(created_by=current_user_id)
    with transaction_scope(DUPLICATE_CODE):
        _apply_fields(outlet, payload)
        db.session.add(outlet)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'sales_outlets', outlet.id, None, payload.audit_values())
    logger.info(f"Sales outlet {outlet.outlet_code} created")
    return _row_to_dict(outlet)


def update_outlet(outlet_id, payload, current_user_id):
    outlet = get_outlet(outlet_id)
    old_values = _row_to_dict(outlet)
    with transaction_scope(DUPLICATE_CODE):
        _apply_fields(outlet, payload)
        outlet.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'sales_outlets', outlet.id, old_values, payload.audit_values())
    return _row_to_dict(outlet)


def delete_outlet(outlet_id, current_user_id):
    outlet = get_outlet(outlet_id)
    invoice_count = Invoice.query.filter(Invoice.sales_outlet_id == outlet.id).count()
    if invoice_count > 0:
        raise InvalidStateError(
            f"Cannot delete outlet. It has {invoice_count} associated invoice(s). "
            "Please reassign or remove these invoices first."
        )
    with transaction_scope():
        outlet.is_active = False
        outlet.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'sales_outlets', outlet.id, {'isActive': True}, {'isActive': False})
    return True


def get_active_outlets():
    outlets = SalesOutlet.query.filter(SalesOutlet.is_active.is_(True)).order_by(SalesOutlet.name.asc()).all()
    return [
        {
            'id': str(outlet.id),
            'outletCode': outlet.outlet_code,
            'name': outlet.name,
            'type': outlet.type,
            'address': {field: getattr(outlet, field) for field in ADDRESS_FIELDS},
        }
        for outlet in outlets
    ]


def get_outlet_stats(outlet_id):
    outlet = get_outlet(outlet_id)
    total_invoices, total_revenue, last_sale_at = db.session.query(
        func.count(Invoice.id),
        func.coalesce(func.sum(Invoice.total), 0),
        func.max(Invoice.invoice_date)
    ).filter(Invoice.sales_outlet_id == outlet.id, Invoice.is_active.is_(True)).one()
    total_revenue = money(total_revenue) or 0.0
    return {
        'outlet': {'id': str(outlet.id), 'name': outlet.name, 'outletCode': outlet.outlet_code},
        'totalInvoices': total_invoices,
        'totalRevenue': total_revenue,
        'averageOrderValue': round(total_revenue / total_invoices, 2) if total_invoices else 0,
        'lastSaleAt': iso(last_sale_at),
    }
