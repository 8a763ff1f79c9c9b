import logging
from collections import defaultdict
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy import func

from erp_api import db
from erp_api.crud.list_query import ListQuery
from erp_api.exceptions import InvalidStateError, NotFoundError, ValidationError
from erp_api.models import Account, Customer, Invoice, Supplier, Transaction, TransactionEntry, User
from erp_api.utils.date_utils import parse_date_param, utc_now
from erp_api.utils.db_utils import get_or_404, next_sequence, parse_uuid, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_CONTACT, USER_NAME, iso, money, ref, ref_id
from erp_api.utils.state_machine import TRANSACTION_FLOW

logger = logging.getLogger(__name__)

DUPLICATE_NUMBER = 'Transaction with this number already exists'
NOT_FOUND = 'Transaction not found'
UNBALANCED = 'Transaction is not balanced. Total debit and credit must be equal.'
LOCKED_STATUSES = ('posted', 'reconciled')
BALANCE_TOLERANCE = Decimal('0.01')

REFERENCE_FIELDS = {
    'customer': ('customer_id', Customer, 'Customer not found'),
    'supplier': ('supplier_id', Supplier, 'Supplier not found'),
    'invoice': ('invoice_id', Invoice, 'Invoice not found'),
}


def _entry_to_dict(entry):
    return {
        'id': str(entry.id) if entry.id else None,
        'account': ref(entry.account, 'name', 'code', 'type'),
        'debit': money(entry.debit),
        'credit': money(entry.credit),
        'description': entry.description,
    }


def _row_to_dict(transaction):
    return {
        'id': str(transaction.id),
        'transactionNumber': transaction.transaction_number,
        'date': iso(transaction.date),
        'description': transaction.description,
        'type': transaction.type,
        'reference': transaction.reference,
        'amount': money(transaction.amount),
        'currency': transaction.currency,
        'entries': [_entry_to_dict(entry) for entry in transaction.entries],
        'totalDebit': money(transaction.total_debit),
        'totalCredit': money(transaction.total_credit),
        'customer': ref(transaction.customer, *USER_CONTACT),
        'supplier': ref(transaction.supplier, 'name', 'code'),
        'invoice': ref(transaction.invoice, 'invoice_number'),
        'paymentMethod': transaction.payment_method,
        'bankAccount': transaction.bank_account,
        'attachments': transaction.attachments or [],
        'status': transaction.status,
        'isReconciled': transaction.is_reconciled,
        'reconciledAt': iso(transaction.reconciled_at),
        'reconciledBy': ref(transaction.reconciler, *USER_NAME),
        'notes': transaction.notes,
        'approvedBy': ref(transaction.approver, *USER_NAME),
        'approvedAt': iso(transaction.approved_at),
        'postedAt': iso(transaction.posted_at),
        'metadata': transaction.extra_metadata or {},
        'isActive': transaction.is_active,
        'createdBy': ref(transaction.creator, *USER_NAME),
        'lastUpdatedBy': ref_id(transaction.last_updated_by),
        'createdAt': iso(transaction.created_at),
        'updatedAt': iso(transaction.updated_at),
    }


transaction_list = ListQuery(
    Transaction,
    _row_to_dict,
    search_fields=(Transaction.description, Transaction.transaction_number, Transaction.reference),
    filters={'type': Transaction.type, 'status': Transaction.status},
    date_field=Transaction.date,
    order_by=(Transaction.date.desc(), Transaction.created_at.desc()),
)


def _build_entries(entries_in):
    entries = []
    for position, entry_in in enumerate(entries_in):
        if db.session.get(Account, entry_in.account) is None:
            raise NotFoundError(f"Account {entry_in.account} not found")
        entries.append(TransactionEntry(
            account_id=entry_in.account,
            debit=entry_in.debit,
            credit=entry_in.credit,
            description=entry_in.description,
            position=position
        ))
    return entries


def _entries_total(entries, side):
    return sum((Decimal(getattr(entry, side) or 0) for entry in entries), Decimal('0'))


def _check_balanced(entries):
    debit = _entries_total(entries, 'debit')
    credit = _entries_total(entries, 'credit')
    if abs(debit - credit) > BALANCE_TOLERANCE:
        raise ValidationError(UNBALANCED)
    return debit if debit > 0 else credit


def _apply_fields(transaction, data):
    data.pop('entries', None)
    for field, (column, model, message) in REFERENCE_FIELDS.items():
        if field in data:
            value = data.pop(field)
            if value is not None:
                get_or_404(model, value, message)
            setattr(transaction, column, value)
    if 'metadata' in data:
        transaction.extra_metadata = data.pop('metadata') or {}
    for key, value in data.items():
        setattr(transaction, key, value)


def list_transactions(args):
    return transaction_list.run(args)


def get_transaction(transaction_id):
    return get_or_404(Transaction, transaction_id, NOT_FOUND)


def get_transaction_detail(transaction_id):
    return _row_to_dict(get_transaction(transaction_id))


def create_transaction(payload, current_user_id):
    entries = _build_entries(payload.entries)
    amount = _check_balanced(entries)

    transaction = Transaction(created_by=current_user_id, status='draft')
    with transaction_scope(DUPLICATE_NUMBER):
        _apply_fields(transaction, payload.changes())
        transaction.entries = entries
        transaction.amount = amount
        transaction.transaction_number = next_sequence(
            Transaction.transaction_number, transaction.type[:3].upper(), 6)
        db.session.add(transaction)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'transactions', transaction.id, None, payload.audit_values())
    logger.info(f"Transaction {transaction.transaction_number} created")
    return _row_to_dict(transaction)


def update_transaction(transaction_id, payload, current_user_id):
    transaction = get_transaction(transaction_id)
    if transaction.status in LOCKED_STATUSES:
        raise InvalidStateError('Posted transactions cannot be modified')

    old_values = _row_to_dict(transaction)
    with transaction_scope(DUPLICATE_NUMBER):
        if payload.entries is not None:
            entries = _build_entries(payload.entries)
            transaction.amount = _check_balanced(entries)
            transaction.entries = entries
        _apply_fields(transaction, payload.changes())
        transaction.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'transactions', transaction.id, old_values, payload.audit_values())
    return _row_to_dict(transaction)


def delete_transaction(transaction_id, current_user_id):
    transaction = get_transaction(transaction_id)
    if transaction.status in LOCKED_STATUSES:
        raise InvalidStateError('Cannot delete posted transactions')

    old_values = _row_to_dict(transaction)
    with transaction_scope():
        db.session.delete(transaction)
        log_action(current_user_id, 'DELETE', 'transactions', old_values['id'], old_values, None)
    return True


def approve_transaction(transaction_id, current_user_id):
    transaction = get_transaction(transaction_id)
    with transaction_scope():
        transaction.status = TRANSACTION_FLOW.apply(transaction.status, 'approve')
        transaction.approved_by = current_user_id
        transaction.approved_at = utc_now()
        transaction.last_updated_by = current_user_id
        log_action(current_user_id, 'APPROVE', 'transactions', transaction.id,
                   {'status': 'draft'}, {'status': transaction.status})
    return _row_to_dict(transaction)


def post_transaction(transaction_id, current_user_id):
    """
    Move an approved transaction to posted and apply each entry's
    (debit - credit) to its account's current balance in the same commit.
    """
    transaction = get_transaction(transaction_id)
    new_status = TRANSACTION_FLOW.apply(transaction.status, 'post')
    if not transaction.is_balanced:
        raise InvalidStateError('Transaction is not balanced')

    with transaction_scope():
        for entry in transaction.entries:
            account = entry.account
            balance = Decimal(account.current_balance or 0) + Decimal(entry.debit or 0) - Decimal(entry.credit or 0)
            if balance < 0 and account.allow_negative_balance is False:
                raise InvalidStateError(f"Account {account.code} does not allow a negative balance")
            account.current_balance = balance
        transaction.status = new_status
        transaction.posted_at = utc_now()
        transaction.last_updated_by = current_user_id
        log_action(current_user_id, 'POST', 'transactions', transaction.id,
                   {'status': 'approved'}, {'status': new_status})
    logger.info(f"Transaction {transaction.transaction_number} posted")
    return _row_to_dict(transaction)


def reconcile_transaction(transaction_id, current_user_id):
    transaction = get_transaction(transaction_id)
    with transaction_scope():
        transaction.status = TRANSACTION_FLOW.apply(transaction.status, 'reconcile')
        transaction.is_reconciled = True
        transaction.reconciled_at = utc_now()
        transaction.reconciled_by = current_user_id
        transaction.last_updated_by = current_user_id
        log_action(current_user_id, 'RECONCILE', 'transactions', transaction.id,
                   {'status': 'posted'}, {'status': transaction.status})
    return _row_to_dict(transaction)


def _stats_window(args):
    now = utc_now()
    start = parse_date_param(args.get('startDate'), 'startDate') or now - relativedelta(months=1)
    end = parse_date_param(args.get('endDate'), 'endDate', end_of_day=True) or now
    return Transaction.date >= start, Transaction.date <= end


def get_transaction_stats(args):
    window = _stats_window(args)
    total = Transaction.query.filter(*window).count()

    def grouped(column):
        return db.session.query(column, func.count(Transaction.id), func.coalesce(func.sum(Transaction.amount), 0)) \
            .filter(*window).group_by(column).all()

    monthly = defaultdict(lambda: {'count': 0, 'totalAmount': Decimal('0')})
    for date, amount in db.session.query(Transaction.date, Transaction.amount).filter(*window).all():
        bucket = monthly[date.strftime('%Y-%m')]
        bucket['count'] += 1
        bucket['totalAmount'] += Decimal(amount or 0)

    return {
        'totalTransactions': total,
        'statusStats': [{'status': status, 'count': count, 'totalAmount': money(amount)}
                        for status, count, amount in grouped(Transaction.status)],
        'typeStats': [{'type': kind, 'count': count, 'totalAmount': money(amount)}
                      for kind, count, amount in grouped(Transaction.type)],
        'monthlyTrend': [{'month': month, 'count': bucket['count'], 'totalAmount': money(bucket['totalAmount'])}
                         for month, bucket in sorted(monthly.items())],
    }


def get_salesperson_performance(args):
    window = _stats_window(args)
    sales = Transaction.query.filter(Transaction.type == 'sale', *window).all()

    totals = defaultdict(lambda: {'totalSales': Decimal('0'), 'transactionCount': 0})
    for sale in sales:
        sales_person = (sale.extra_metadata or {}).get('salesPerson')
        if not sales_person:
            continue
        totals[str(sales_person)]['totalSales'] += Decimal(sale.amount or 0)
        totals[str(sales_person)]['transactionCount'] += 1

    result = []
    for sales_person, bucket in totals.items():
        user_key = parse_uuid(sales_person)
        user = db.session.get(User, user_key) if user_key else None
        result.append({
            'salesPerson': ref(user, *USER_CONTACT) or {'id': sales_person},
            'totalSales': money(bucket['totalSales']),
            'transactionCount': bucket['transactionCount'],
            'averageSale': money(bucket['totalSales'] / bucket['transactionCount']),
        })
    result.sort(key=lambda item: item['totalSales'], reverse=True)
    return result
