import logging
from decimal import Decimal

from sqlalchemy import String, cast, func

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.exceptions import InvalidStateError, ValidationError
from erp_api.models import Category, Product, Supplier
from erp_api.utils.db_utils import get_or_404, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, camelize, iso, money, ref, ref_id

logger = logging.getLogger(__name__)

DUPLICATE_SKU = 'Product with this SKU or barcode already exists'
NOT_FOUND = 'Product not found'

PRICING_FIELDS = ('cost_price', 'selling_price', 'discount', 'tax_rate')
INVENTORY_FIELDS = ('current_stock', 'min_stock', 'max_stock', 'reorder_point', 'reorder_quantity')


def _row_to_dict(product):
    return {
        'id': str(product.id),
        'name': product.name,
        'sku': product.sku,
        'barcode': product.barcode,
        'description': product.description,
        'category': ref(product.category, 'name'),
        'brand': product.brand,
        'supplier': ref(product.supplier, 'name'),
        'pricing': {
            'costPrice': money(product.cost_price),
            'sellingPrice': money(product.selling_price),
            'markup': money(product.markup),
            'discount': money(product.discount),
            'taxRate': money(product.tax_rate),
        },
        'inventory': {camelize(field): getattr(product, field) for field in INVENTORY_FIELDS},
        'tags': product.tags or [],
        'images': product.images or [],
        'specifications': product.specifications or {},
        'isDigital': product.is_digital,
        'isActive': product.is_active,
        'createdBy': ref(product.creator, *USER_NAME),
        'lastUpdatedBy': ref_id(product.last_updated_by),
        'createdAt': iso(product.created_at),
        'updatedAt': iso(product.updated_at),
    }


def _filter_stock_status(query, value):
    if value == 'low_stock':
        return query.filter(Product.current_stock <= Product.min_stock)
    if value == 'out_of_stock':
        return query.filter(Product.current_stock == 0)
    return query


product_list = ListQuery(
    Product,
    _row_to_dict,
    search_fields=(Product.name, Product.sku, Product.description, cast(Product.tags, String)),
    filters={'category': Product.category_id, 'brand': Product.brand},
    custom_filters={'status': _filter_stock_status},
    order_by=(Product.created_at.desc(),),
)


def _apply_fields(product, data):
    pricing = data.pop('pricing', None) or {}
    for field in PRICING_FIELDS:
        value = pricing.get(camelize(field))
        if value is not None:
            setattr(product, field, Decimal(str(value)))

    inventory = data.pop('inventory', None) or {}
    for field in INVENTORY_FIELDS:
        if camelize(field) in inventory:
            setattr(product, field, inventory[camelize(field)])

    if 'category' in data:
        product.category_id = get_or_404(Category, data.pop('category'), 'Category not found').id
    if 'supplier' in data:
        supplier_id = data.pop('supplier')
        if supplier_id is not None:
            get_or_404(Supplier, supplier_id, 'Supplier not found')
        product.supplier_id = supplier_id

    if data.get('sku'):
        data['sku'] = data['sku'].upper()

    for key, value in data.items():
        setattr(product, key, value)

    if pricing:
        product.recalculate_markup()


def list_products(args):
    return product_list.run(args)


def get_product(product_id):
    return get_or_404(Product, product_id, NOT_FOUND)


def get_product_detail(product_id):
    return _row_to_dict(get_product(product_id))


def create_product(payload, current_user_id):
    product = Product(created_by=current_user_id)
    with transaction_scope(DUPLICATE_SKU):
        _apply_fields(product, payload.changes())
        db.session.add(product)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'products', product.id, None, payload.audit_values())
    logger.info(f"Product {product.sku} created")
    return _row_to_dict(product)


def update_product(product_id, payload, current_user_id):
    product = get_product(product_id)
    old_values = _row_to_dict(product)
    with transaction_scope(DUPLICATE_SKU):
        _apply_fields(product, payload.changes())
        product.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'products', product.id, old_values, payload.audit_values())
    return _row_to_dict(product)


def delete_product(product_id, current_user_id):
    product = get_product(product_id)
    with transaction_scope():
        product.is_active = False
        product.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'products', product.id, {'isActive': True}, {'isActive': False})
    return True


def update_stock(product_id, payload, current_user_id):
    """Apply an add, subtract or set operation to the product's current stock."""
    product = get_product(product_id)
    previous = product.current_stock or 0

    if payload.operation == 'add':
        new_stock = previous + payload.quantity
    elif payload.operation == 'subtract':
        new_stock = previous - payload.quantity
        if new_stock < 0:
            raise InvalidStateError('Insufficient stock')
    elif payload.operation == 'set':
        new_stock = payload.quantity
    else:
        raise ValidationError('Invalid operation')

    with transaction_scope():
        product.current_stock = new_stock
        product.last_updated_by = current_user_id
        log_action(current_user_id, 'STOCK_UPDATE', 'products', product.id,
                   {'currentStock': previous}, payload.audit_values() | {'currentStock': new_stock})
    return {
        'productId': str(product.id),
        'newStock': product.current_stock,
        'operation': payload.operation,
        'quantity': payload.quantity,
    }


def get_low_stock_products():
    products = Product.query.filter(
        Product.is_active.is_(True),
        Product.current_stock <= Product.min_stock
    ).order_by(Product.current_stock.asc(), Product.name.asc()).all()
    return [_row_to_dict(product) for product in products]


def get_product_stats():
    active = Product.is_active.is_(True)
    total = Product.query.filter(active).count()
    low_stock = Product.query.filter(active, Product.current_stock <= Product.min_stock).count()
    out_of_stock = Product.query.filter(active, Product.current_stock == 0).count()
    stock_value = db.session.query(
        func.coalesce(func.sum(Product.current_stock * Product.cost_price), 0)
    ).filter(active).scalar()
    return {
        'totalProducts': total,
        'lowStockProducts': low_stock,
        'outOfStockProducts': out_of_stock,
        'totalStockValue': money(stock_value) or 0.0,
    }
