import logging

from sqlalchemy import func

from erp_api import db
from erp_api.crud.list_query import ListQuery, equality_clause
from erp_api.crud.transaction_crud import transaction_list
from erp_api.models import Account, Transaction, TransactionEntry
from erp_api.utils.date_utils import parse_date_param, utc_now
from erp_api.utils.db_utils import get_or_404, next_sequence, transaction_scope
from erp_api.utils.logging_utils import log_action
from erp_api.utils.serializers import USER_NAME, iso, money, ref, ref_id

logger = logging.getLogger(__name__)

DUPLICATE_CODE = 'Account with this code already exists'
NOT_FOUND = 'Account not found'

# Statuses whose entries count towards an account balance
BOOKED_STATUSES = ('posted', 'reconciled')


def _row_to_dict(account):
    return {
        'id': str(account.id),
        'name': account.name,
        'code': account.code,
        'type': account.type,
        'category': account.category,
        'parentAccount': ref(account.parent_account, 'name', 'code'),
        'description': account.description,
        'currency': account.currency,
        'openingBalance': money(account.opening_balance),
        'currentBalance': money(account.current_balance),
        'isSystemAccount': account.is_system_account,
        'settings': {
            'allowNegativeBalance': account.allow_negative_balance,
            'requireApproval': account.require_approval,
        },
        'isActive': account.is_active,
        'createdBy': ref(account.creator, *USER_NAME),
        'lastUpdatedBy': ref_id(account.last_updated_by),
        'createdAt': iso(account.created_at),
        'updatedAt': iso(account.updated_at),
    }


account_list = ListQuery(
    Account,
    _row_to_dict,
    search_fields=(Account.name, Account.code, Account.description),
    filters={'type': Account.type, 'category': Account.category},
    order_by=(Account.type.asc(), Account.code.asc()),
)


def _apply_fields(account, data):
    settings = data.pop('settings', None) or {}
    if 'allowNegativeBalance' in settings:
        account.allow_negative_balance = settings['allowNegativeBalance']
    if 'requireApproval' in settings:
        account.require_approval = settings['requireApproval']

    if 'parent_account' in data:
        parent_id = data.pop('parent_account')
        if parent_id is not None:
            get_or_404(Account, parent_id, 'Parent account not found')
        account.parent_account_id = parent_id

    if data.get('code'):
        data['code'] = data['code'].upper()

    for key, value in data.items():
        setattr(account, key, value)


def list_accounts(args):
    return account_list.run(args)


def get_account(account_id):
    return get_or_404(Account, account_id, NOT_FOUND)


def get_account_detail(account_id):
    return _row_to_dict(get_account(account_id))


def create_account(payload, current_user_id):
    data = payload.changes()
    account = Account(created_by=current_user_id)
    with transaction_scope(DUPLICATE_CODE):
        _apply_fields(account, data)
        if not account.code:
            account.code = next_sequence(Account.code, account.type[:3].upper(), 4)
        account.current_balance = account.opening_balance or 0
        db.session.add(account)
        db.session.flush()
        log_action(current_user_id, 'CREATE', 'accounts', account.id, None, payload.audit_values())
    logger.info(f"Account {account.code} created")
    return _row_to_dict(account)


def update_account(account_id, payload, current_user_id):
    account = get_account(account_id)
    old_values = _row_to_dict(account)
    with transaction_scope(DUPLICATE_CODE):
        _apply_fields(account, payload.changes())
        account.last_updated_by = current_user_id
        log_action(current_user_id, 'UPDATE', 'accounts', account.id, old_values, payload.audit_values())
    return _row_to_dict(account)


def delete_account(account_id, current_user_id):
    account = get_account(account_id)
    with transaction_scope():
        account.is_active = False
        account.last_updated_by = current_user_id
        log_action(current_user_id, 'DELETE', 'accounts', account.id, {'isActive': True}, {'isActive': False})
    return True


def get_chart_of_accounts():
    accounts = Account.query.filter(Account.is_active.is_(True)) \
        .order_by(Account.type.asc(), Account.code.asc()).all()
    return [_row_to_dict(account) for account in accounts]


def get_accounts_by_type(account_type, args):
    query = Account.query.filter(Account.is_active.is_(True), equality_clause(Account.type, account_type))
    if args.get('category'):
        query = query.filter(Account.category == args['category'])
    if args.get('parentAccount'):
        query = query.filter(equality_clause(Account.parent_account_id, args['parentAccount']))
    return [_row_to_dict(account) for account in query.order_by(Account.code.asc()).all()]


def get_account_balance(account_id, as_of=None):
    account = get_account(account_id)
    as_of_date = parse_date_param(as_of, 'asOfDate', end_of_day=True) or utc_now()
    balance = db.session.query(
        func.coalesce(func.sum(TransactionEntry.debit - TransactionEntry.credit), 0)
    ).select_from(TransactionEntry).join(
        Transaction, TransactionEntry.transaction_id == Transaction.id
    ).filter(
        TransactionEntry.account_id == account.id,
        Transaction.status.in_(BOOKED_STATUSES),
        Transaction.date <= as_of_date
    ).scalar()
    return {
        'accountId': str(account.id),
        'accountName': account.name,
        'balance': money(balance) or 0.0,
        'asOfDate': iso(as_of_date),
    }


def list_account_transactions(account_id, args):
    account = get_account(account_id)
    base_query = Transaction.query.filter(Transaction.entries.any(TransactionEntry.account_id == account.id))
    return transaction_list.run(args, base_query)


def get_account_stats():
    active = Account.is_active.is_(True)
    total = Account.query.filter(active).count()

    type_rows = db.session.query(Account.type, func.count(Account.id)) \
        .filter(active).group_by(Account.type).all()
    category_rows = db.session.query(Account.category, func.count(Account.id)) \
        .filter(active).group_by(Account.category).all()
    balance_rows = db.session.query(Account.type, func.coalesce(func.sum(Account.current_balance), 0)) \
        .filter(active).group_by(Account.type).all()

    return {
        'totalAccounts': total,
        'typeStats': [{'type': account_type, 'count': count} for account_type, count in type_rows],
        'categoryStats': [{'category': category, 'count': count} for category, count in category_rows],
        'balanceStats': [{'type': account_type, 'totalBalance': money(amount)} for account_type, amount in balance_rows],
    }
