import logging
from decimal import Decimal

from erp_api import db
from erp_api.crud.list_query import ListQuery, parse_positive_int
from erp_api.exceptions import ValidationError
from erp_api.models import Category, Supplier
from erp_api.utils.db_utils import get_or_404, next_sequence, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, camelize, iso, money, ref, ref_id

logger = logging.getLogger(__name__)

DUPLICATE_CODE = 'Supplier with this code already exists'
NOT_FOUND = 'Supplier not found'

CONTACT_FIELDS = ('first_name', 'last_name', 'email', 'phone')
BUSINESS_FIELDS = ('company_name', 'tax_id', 'registration_number', 'website')
ADDRESS_FIELDS = ('street', 'city', 'state', 'zip_code', 'country')


def _row_to_dict(supplier):
    return {
        'id': str(supplier.id),
        'name': supplier.name,
        'code': supplier.code,
        'contactPerson': {
            'firstName': supplier.contact_first_name,
            'lastName': supplier.contact_last_name,
            'email': supplier.contact_email,
            'phone': supplier.contact_phone,
        },
        'businessInfo': {camelize(field): getattr(supplier, field) for field in BUSINESS_FIELDS},
        'address': {camelize(field): getattr(supplier, field) for field in ADDRESS_FIELDS},
        'paymentTerms': supplier.payment_terms,
        'creditLimit': money(supplier.credit_limit),
        'currency': supplier.currency,
        'status': supplier.status,
        'rating': supplier.rating,
        'notes': supplier.notes,
        'categories': [ref(category, 'name') for category in supplier.categories],
        'totalPurchases': {
            'count': supplier.total_purchases_count or 0,
            'amount': money(supplier.total_purchases_amount) or 0.0,
        },
        'lastPurchase': iso(supplier.last_purchase),
        'isActive': supplier.is_active,
        'createdBy': ref(supplier.creator, *USER_NAME),
        'lastUpdatedBy': ref_id(supplier.last_updated_by),
        'createdAt': iso(supplier.created_at),
        'updatedAt': iso(supplier.updated_at),
    }


supplier_list = ListQuery(
    Supplier,
    _row_to_dict,
    search_fields=(Supplier.name, Supplier.code, Supplier.company_name, Supplier.contact_email, Supplier.city),
    filters={'status': Supplier.status},
    order_by=(Supplier.created_at.desc(),),
)


def _apply_fields(supplier, data):
    contact = data.pop('contact_person', None) or {}
    for field in CONTACT_FIELDS:
        if camelize(field) in contact:
            setattr(supplier, f"contact_{field}", contact[camelize(field)])

    for group, fields in (('business_info', BUSINESS_FIELDS), ('address', ADDRESS_FIELDS)):
        values = data.pop(group, None) or {}
        for field in fields:
            if camelize(field) in values:
                setattr(supplier, field, values[camelize(field)])

    if 'categories' in data:
        supplier.categories = [get_or_404(Category, category_id, 'Category not found')
                               for category_id in data.pop('categories') or []]

    if data.get('code'):
        data['code'] = data['code'].upper()

    for key, value in data.items():
        setattr(supplier, key, value)


def list_suppliers(args):
    return supplier_list.run(args)


def get_supplier(supplier_id):
    return get_or_404(Supplier, supplier_id, NOT_FOUND)


def get_supplier_detail(supplier_id):
    return _row_to_dict(get_supplier(supplier_id))


def create_supplier(payload, current_user_id):
    supplier = Supplier(created_by=current_user_id)
    with transaction_scope(DUPLICATE_CODE):
        _apply_fields(supplier, payload.changes())
        if not supplier.code:
            supplier.code = next_sequence(Supplier.code, 'SUP', 4)
        db.session.add(supplier)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'suppliers', supplier.id, None, payload.audit_values())
    logger.info(f"Supplier {supplier.code} created")
    return _row_to_dict(supplier)


def update_supplier(supplier_id, payload, current_user_id):
    supplier = get_supplier(supplier_id)
    old_values = _row_to_dict(supplier)
    with transaction_scope(DUPLICATE_CODE):
        _apply_fields(supplier, payload.changes())
        supplier.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'suppliers', supplier.id, old_values, payload.audit_values())
    return _row_to_dict(supplier)


def delete_supplier(supplier_id, current_user_id):
    supplier = get_supplier(supplier_id)
    with transaction_scope():
        supplier.is_active = False
        supplier.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'suppliers', supplier.id, {'isActive': True}, {'isActive': False})
    return True


def get_supplier_stats(supplier_id):
    supplier = get_supplier(supplier_id)
    count = supplier.total_purchases_count or 0
    amount = Decimal(supplier.total_purchases_amount or 0)
    return {
        'totalPurchases': count,
        'totalAmount': money(amount),
        'averageOrderValue': money(amount / count) if count else 0,
        'lastPurchase': iso(supplier.last_purchase),
        'rating': supplier.rating,
    }


def get_top_suppliers(args):
    limit = parse_positive_int(args.get('limit'), 10)
    suppliers = Supplier.query.filter(Supplier.is_active.is_(True)) \
        .order_by(Supplier.total_purchases_amount.desc(), Supplier.rating.desc()) \
        .limit(limit).all()
    return [
        {
            'id': str(supplier.id),
            'name': supplier.name,
            'code': supplier.code,
            'rating': supplier.rating,
            'totalPurchases': {
                'count': supplier.total_purchases_count or 0,
                'amount': money(supplier.total_purchases_amount) or 0.0,
            },
        } for supplier in suppliers
    ]


def update_supplier_rating(supplier_id, payload, current_user_id):
    if payload.rating < 1 or payload.rating > 5:
        raise ValidationError('Rating must be between 1 and 5')

    supplier = get_supplier(supplier_id)
    old_rating = supplier.rating
    with transaction_scope():
        supplier.rating = payload.rating
        if payload.reason:
            note = f"Rating updated: {payload.reason}"
            supplier.notes = f"{supplier.notes}\n{note}" if supplier.notes else note
        supplier.last_updated_by = current_user_id
        log_action(current_user_id, 'RATE', 'suppliers', supplier.id,
                   {'rating': old_rating}, {'rating': supplier.rating})
    return {'rating': supplier.rating}
