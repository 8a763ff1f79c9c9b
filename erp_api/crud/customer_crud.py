import logging
from decimal import Decimal

from erp_api import db
from erp_api.crud.list_query import ListQuery, parse_positive_int, search_clause
from erp_api.exceptions import DuplicateKeyError, InvalidStateError
from erp_api.models import Customer, CustomerWalletTransaction, User
from erp_api.utils.db_utils import get_or_404, next_sequence, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_CONTACT, USER_NAME, camelize, iso, money, ref, ref_id

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = 'Customer with this email already exists'
DUPLICATE_PHONE = 'Customer with this phone already exists'
NOT_FOUND = 'Customer not found'

BUSINESS_FIELDS = ('company_name', 'tax_id', 'registration_number', 'website')


def _row_to_dict(customer):
    return {
        'id': str(customer.id),
        'customerCode': customer.customer_code,
        'firstName': customer.first_name,
        'lastName': customer.last_name,
        'fullName': f"{customer.first_name} {customer.last_name}",
        'email': customer.email,
        'phone': customer.phone,
        'dateOfBirth': iso(customer.date_of_birth),
        'gender': customer.gender,
        'avatar': customer.avatar,
        'type': customer.type,
        'businessInfo': {
            'companyName': customer.company_name,
            'taxId': customer.tax_id,
            'registrationNumber': customer.registration_number,
            'website': customer.website,
        },
        'address': customer.address or {},
        'preferences': customer.preferences or {},
        'creditLimit': money(customer.credit_limit),
        'paymentTerms': customer.payment_terms,
        'isVerified': customer.is_verified,
        'lastPurchase': iso(customer.last_purchase),
        'totalPurchases': {
            'count': customer.total_purchases_count or 0,
            'amount': money(customer.total_purchases_amount) or 0.0,
        },
        'walletBalance': money(customer.wallet_balance) or 0.0,
        'notes': customer.notes,
        'user': ref(customer.user, *USER_CONTACT),
        'isActive': customer.is_active,
        'createdBy': ref(customer.creator, *USER_NAME),
        'lastUpdatedBy': ref_id(customer.last_updated_by),
        'createdAt': iso(customer.created_at),
        'updatedAt': iso(customer.updated_at),
    }


def _wallet_to_dict(entry):
    return {
        'id': str(entry.id),
        'type': entry.type,
        'amount': money(entry.amount),
        'balanceAfter': money(entry.balance_after),
        'description': entry.description,
        'reference': entry.reference,
        'date': iso(entry.created_at),
        'createdBy': ref_id(entry.created_by),
    }


def _filter_phone(query, value):
    return query.filter(search_clause([Customer.phone], value))


customer_list = ListQuery(
    Customer,
    _row_to_dict,
    search_fields=(Customer.first_name, Customer.last_name, Customer.email,
                   Customer.customer_code, Customer.phone, Customer.company_name),
    filters={'type': Customer.type},
    custom_filters={'phone': _filter_phone},
    order_by=(Customer.created_at.desc(),),
)

wallet_list = ListQuery(
    CustomerWalletTransaction,
    _wallet_to_dict,
    order_by=(CustomerWalletTransaction.created_at.desc(),),
    active_only=False,
)


def _check_phone_available(customer, phone):
    taken = Customer.query.filter(Customer.phone == phone, Customer.id != customer.id).first()
    if taken is not None:
        raise DuplicateKeyError(DUPLICATE_PHONE)


def _apply_fields(customer, data):
    business_info = data.pop('business_info', None) or {}
    for field in BUSINESS_FIELDS:
        if camelize(field) in business_info:
            setattr(customer, field, business_info[camelize(field)])

    if 'user' in data:
        user_id = data.pop('user')
        if user_id is not None:
            get_or_404(User, user_id, 'User not found')
        customer.user_id = user_id

    if data.get('phone'):
        _check_phone_available(customer, data['phone'])

    if data.get('email'):
        data['email'] = data['email'].lower()

    for key, value in data.items():
        setattr(customer, key, value)


def list_customers(args):
    return customer_list.run(args)


def get_customer(customer_id):
    return get_or_404(Customer, customer_id, NOT_FOUND)


def get_customer_detail(customer_id):
    return _row_to_dict(get_customer(customer_id))


def create_customer(payload, current_user_id):
    customer = Customer(created_by=current_user_id)
    with transaction_scope(DUPLICATE_EMAIL):
        _apply_fields(customer, payload.changes())
        customer.customer_code = next_sequence(Customer.customer_code, 'CUST', 6)
        db.session.add(customer)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'customers', customer.id, None, payload.audit_values())
    logger.info(f"Customer {customer.customer_code} created")
    return _row_to_dict(customer)


def update_customer(customer_id, payload, current_user_id):
    customer = get_customer(customer_id)
    old_values = _row_to_dict(customer)
    with transaction_scope(DUPLICATE_EMAIL):
        _apply_fields(customer, payload.changes())
        customer.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'customers', customer.id, old_values, payload.audit_values())
    return _row_to_dict(customer)


def delete_customer(customer_id, current_user_id):
    customer = get_customer(customer_id)
    with transaction_scope():
        customer.is_active = False
        customer.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'customers', customer.id, {'isActive': True}, {'isActive': False})
    return True


def add_wallet_transaction(customer_id, payload, current_user_id):
    """
    Credit or debit the customer's wallet, recording the entry and the new
    balance in one commit. Debits may not take the balance below zero.
    """
    customer = get_customer(customer_id)
    previous = Decimal(customer.wallet_balance or 0)
    if payload.type == 'debit':
        if payload.amount > previous:
            raise InvalidStateError('Insufficient wallet balance')
        balance = previous - payload.amount
    else:
        balance = previous + payload.amount

    entry = CustomerWalletTransaction(
        customer_id=customer.id,
        type=payload.type,
        amount=payload.amount,
        balance_after=balance,
        description=payload.description,
        reference=payload.reference,
        created_by=current_user_id
    )
    with transaction_scope():
        customer.wallet_balance = balance
        db.session.add(entry)
        db.session.flush()
        log_action(current_user_id, f"WALLET_{payload.type.upper()}", 'customers', customer.id,
                   {'walletBalance': money(previous)}, {'walletBalance': money(balance)})
    return {'newBalance': money(balance), 'transaction': _wallet_to_dict(entry)}


def list_wallet_transactions(customer_id, args):
    customer = get_customer(customer_id)
    base_query = CustomerWalletTransaction.query.filter(CustomerWalletTransaction.customer_id == customer.id)
    return wallet_list.run(args, base_query)


def get_customer_stats(customer_id):
    customer = get_customer(customer_id)
    count = customer.total_purchases_count or 0
    amount = Decimal(customer.total_purchases_amount or 0)
    return {
        'totalInvoices': count,
        'totalPurchases': money(amount),
        'averageOrderValue': money(amount / count) if count else 0,
        'lastPurchase': iso(customer.last_purchase),
        'walletBalance': money(customer.wallet_balance) or 0.0,
    }


def get_top_customers(args):
    limit = parse_positive_int(args.get('limit'), 10)
    customers = Customer.query.filter(Customer.is_active.is_(True)) \
        .order_by(Customer.total_purchases_amount.desc(), Customer.created_at.asc()) \
        .limit(limit).all()
    return [
        {
            'id': str(customer.id),
            'firstName': customer.first_name,
            'lastName': customer.last_name,
            'email': customer.email,
            'customerCode': customer.customer_code,
            'totalPurchases': {
                'count': customer.total_purchases_count or 0,
                'amount': money(customer.total_purchases_amount) or 0.0,
            },
        } for customer in customers
    ]
