"""Accounts and the transaction approve/post/reconcile lifecycle."""

from erp_api.models import Account, Transaction


def _account(client, headers, **fields):
    body = {'name': 'Cash', 'type': 'asset', **fields}
    return client.post('/api/accounts', json=body, headers=headers).get_json()['data']


def _transaction(client, headers, debit_account, credit_account, debit=100, credit=100, **fields):
    return client.post('/api/transactions', json={
        'description': 'Cash sale',
        'type': 'sale',
        'entries': [
            {'account': debit_account['id'], 'debit': debit},
            {'account': credit_account['id'], 'credit': credit},
        ],
        **fields,
    }, headers=headers)


def test_duplicate_account_code(client, auth_headers):
    first = client.post('/api/accounts', json={'name': 'Cash', 'type': 'asset', 'code': '1000'},
                        headers=auth_headers)
    second = client.post('/api/accounts', json={'name': 'Bank', 'type': 'asset', 'code': '1000'},
                         headers=auth_headers)

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.get_json()['message'] == 'Account with this code already exists'


def test_account_code_generated_from_type(client, auth_headers):
    account = _account(client, auth_headers, type='revenue', name='Sales')

    assert account['code'] == 'REV0001'
    assert account['currentBalance'] == account['openingBalance']


def test_accounts_listed_by_type_then_code(client, auth_headers):
    _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    _account(client, auth_headers, name='Bank', type='asset', code='1100')
    _account(client, auth_headers, name='Cash', type='asset', code='1000')

    codes = [item['code'] for item in client.get('/api/accounts', headers=auth_headers).get_json()['data']]

    assert codes == ['1000', '1100', '4000']


def test_unbalanced_transaction_is_rejected(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')

    response = _transaction(client, auth_headers, cash, sales, debit=100, credit=90)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Transaction is not balanced. Total debit and credit must be equal.'
    assert Transaction.query.count() == 0


def test_entry_account_must_exist(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    ghost = {'id': '00000000-0000-0000-0000-000000000001'}

    response = _transaction(client, auth_headers, cash, ghost)

    assert response.status_code == 404
    assert response.get_json()['message'] == f"Account {ghost['id']} not found"


def test_approve_post_reconcile(client, auth_headers, admin_user):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    created = _transaction(client, auth_headers, cash, sales).get_json()['data']
    url = f"/api/transactions/{created['id']}"

    assert created['status'] == 'draft'
    assert created['amount'] == 100.0
    assert created['transactionNumber'] == 'SAL000001'

    approved = client.put(f"{url}/approve", headers=auth_headers).get_json()['data']
    assert approved['status'] == 'approved'
    assert approved['approvedBy']['id'] == str(admin_user.id)

    posted = client.put(f"{url}/post", headers=auth_headers).get_json()['data']
    assert posted['status'] == 'posted'
    assert float(Account.query.filter_by(code='1000').one().current_balance) == 100.0
    assert float(Account.query.filter_by(code='4000').one().current_balance) == -100.0

    reconciled = client.put(f"{url}/reconcile", headers=auth_headers).get_json()['data']
    assert reconciled['status'] == 'reconciled'
    assert reconciled['isReconciled'] is True


def test_approving_a_non_draft_transaction(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    created = _transaction(client, auth_headers, cash, sales).get_json()['data']
    client.put(f"/api/transactions/{created['id']}/approve", headers=auth_headers)

    response = client.put(f"/api/transactions/{created['id']}/approve", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'message': 'Only draft transactions can be approved'}


def test_posting_requires_approval(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    created = _transaction(client, auth_headers, cash, sales).get_json()['data']

    response = client.put(f"/api/transactions/{created['id']}/post", headers=auth_headers)

    assert response.status_code == 400
    assert float(Account.query.filter_by(code='1000').one().current_balance) == 0.0


def test_posted_transactions_are_locked(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    created = _transaction(client, auth_headers, cash, sales).get_json()['data']
    url = f"/api/transactions/{created['id']}"
    client.put(f"{url}/approve", headers=auth_headers)
    client.put(f"{url}/post", headers=auth_headers)

    update = client.put(url, json={'notes': 'late edit'}, headers=auth_headers)
    delete = client.delete(url, headers=auth_headers)

    assert update.status_code == 400
    assert delete.status_code == 400
    assert delete.get_json()['message'] == 'Cannot delete posted transactions'


def test_draft_transactions_are_hard_deleted(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    created = _transaction(client, auth_headers, cash, sales).get_json()['data']

    response = client.delete(f"/api/transactions/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert Transaction.query.count() == 0


def test_account_balance_counts_posted_entries_only(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    posted = _transaction(client, auth_headers, cash, sales).get_json()['data']
    _transaction(client, auth_headers, cash, sales, debit=40, credit=40)
    client.put(f"/api/transactions/{posted['id']}/approve", headers=auth_headers)
    client.put(f"/api/transactions/{posted['id']}/post", headers=auth_headers)

    balance = client.get(f"/api/accounts/{cash['id']}/balance", headers=auth_headers).get_json()['data']
    history = client.get(f"/api/accounts/{cash['id']}/transactions", headers=auth_headers).get_json()

    assert balance['balance'] == 100.0
    assert balance['accountName'] == 'Cash'
    assert history['pagination']['total'] == 2


def test_transaction_stats_group_by_status(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    _transaction(client, auth_headers, cash, sales)
    _transaction(client, auth_headers, cash, sales, debit=50, credit=50)

    stats = client.get('/api/transactions/stats', headers=auth_headers).get_json()['data']

    assert stats['totalTransactions'] == 2
    assert stats['statusStats'] == [{'status': 'draft', 'count': 2, 'totalAmount': 150.0}]


def test_posting_rejects_a_negative_balance_when_not_allowed(client, auth_headers):
    cash = _account(client, auth_headers, code='1000', settings={'allowNegativeBalance': False})
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    created = _transaction(client, auth_headers, sales, cash).get_json()['data']
    url = f"/api/transactions/{created['id']}"
    client.put(f"{url}/approve", headers=auth_headers)

    response = client.put(f"{url}/post", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'message': 'Account 1000 does not allow a negative balance'}
    assert Transaction.query.one().status == 'approved'
    assert float(Account.query.filter_by(code='1000').one().current_balance) == 0.0
    assert float(Account.query.filter_by(code='4000').one().current_balance) == 0.0


def test_list_date_window_includes_the_whole_end_day(client, auth_headers):
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    for date in ('2024-01-01T00:00:00Z', '2024-01-31T18:00:00Z', '2024-02-01T00:00:00Z'):
        _transaction(client, auth_headers, cash, sales, date=date)

    response = client.get('/api/transactions?startDate=2024-01-01&endDate=2024-01-31', headers=auth_headers)

    body = response.get_json()
    assert body['pagination']['total'] == 2
    assert [item['date'] for item in body['data']] == ['2024-01-31T18:00:00', '2024-01-01T00:00:00']


def test_list_rejects_a_malformed_date(client, auth_headers):
    response = client.get('/api/transactions?startDate=soon', headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'] == [{'field': 'startDate', 'message': 'Invalid date: soon'}]


def test_salesperson_performance(client, auth_headers, make_user):
    seller = make_user('sales_person', first_name='Sal')
    other = make_user('sales_person', first_name='Otto')
    cash = _account(client, auth_headers, code='1000')
    sales = _account(client, auth_headers, name='Sales', type='revenue', code='4000')
    _transaction(client, auth_headers, cash, sales, metadata={'salesPerson': str(seller.id)})
    _transaction(client, auth_headers, cash, sales, debit=50, credit=50, metadata={'salesPerson': str(seller.id)})
    _transaction(client, auth_headers, cash, sales, debit=300, credit=300, metadata={'salesPerson': str(other.id)})
    _transaction(client, auth_headers, cash, sales, type='purchase', metadata={'salesPerson': str(seller.id)})
    _transaction(client, auth_headers, cash, sales)

    performance = client.get('/api/transactions/salesperson-performance', headers=auth_headers).get_json()['data']

    assert [item['salesPerson']['firstName'] for item in performance] == ['Otto', 'Sal']
    assert performance[1] == {
        'salesPerson': {'id': str(seller.id), 'firstName': 'Sal', 'lastName': seller.last_name,
                        'email': seller.email},
        'totalSales': 150.0,
        'transactionCount': 2,
        'averageSale': 75.0,
    }
