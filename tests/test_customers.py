"""Customer endpoints: lifecycle, duplicates and wallet."""

import uuid

from erp_api.models import DetailedLog

NEW_CUSTOMER = {'firstName': 'A', 'lastName': 'B', 'email': 'a@b.com'}


def test_create_then_duplicate_email(client, auth_headers):
    first = client.post('/api/customers', json=NEW_CUSTOMER, headers=auth_headers)
    second = client.post('/api/customers', json=NEW_CUSTOMER, headers=auth_headers)

    assert first.status_code == 201
    assert first.get_json()['data']['email'] == 'a@b.com'
    assert first.get_json()['message'] == 'Customer created successfully'
    assert second.status_code == 400
    assert second.get_json() == {'success': False, 'message': 'Customer with this email already exists'}


def test_duplicate_phone_is_reported_as_phone(client, auth_headers):
    first = client.post('/api/customers', json={**NEW_CUSTOMER, 'phone': '555-0100'}, headers=auth_headers)
    other = client.post('/api/customers', json={**NEW_CUSTOMER, 'email': 'c@d.com'}, headers=auth_headers)

    created = client.post('/api/customers', json={**NEW_CUSTOMER, 'email': 'e@f.com', 'phone': '555-0100'},
                          headers=auth_headers)
    updated = client.put(f"/api/customers/{other.get_json()['data']['id']}", json={'phone': '555-0100'},
                         headers=auth_headers)
    unchanged = client.put(f"/api/customers/{first.get_json()['data']['id']}", json={'phone': '555-0100'},
                           headers=auth_headers)

    assert created.status_code == 400
    assert created.get_json() == {'success': False, 'message': 'Customer with this phone already exists'}
    assert updated.get_json()['message'] == 'Customer with this phone already exists'
    assert unchanged.status_code == 200


def test_email_is_lower_cased_and_code_generated(client, auth_headers):
    response = client.post('/api/customers', json={**NEW_CUSTOMER, 'email': 'Mixed@Case.COM'}, headers=auth_headers)

    data = response.get_json()['data']
    assert data['email'] == 'mixed@case.com'
    assert data['customerCode'] == 'CUST000001'


def test_soft_delete_hides_from_list_but_detail_still_resolves(client, auth_headers):
    created = client.post('/api/customers', json=NEW_CUSTOMER, headers=auth_headers).get_json()['data']

    deleted = client.delete(f"/api/customers/{created['id']}", headers=auth_headers)
    listing = client.get('/api/customers', headers=auth_headers).get_json()
    detail = client.get(f"/api/customers/{created['id']}", headers=auth_headers)

    assert deleted.get_json() == {'success': True, 'message': 'Customer deactivated successfully'}
    assert listing['data'] == []
    assert listing['pagination']['pages'] == 0
    assert detail.status_code == 200
    assert detail.get_json()['data']['isActive'] is False


def test_unknown_and_malformed_ids_are_not_found(client, auth_headers):
    missing = client.get(f"/api/customers/{uuid.uuid4()}", headers=auth_headers)
    malformed = client.get('/api/customers/not-a-uuid', headers=auth_headers)

    for response in (missing, malformed):
        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'message': 'Customer not found'}


def test_unknown_fields_are_rejected(client, auth_headers):
    response = client.post('/api/customers', json={**NEW_CUSTOMER, 'favouriteColour': 'red'}, headers=auth_headers)

    body = response.get_json()
    assert response.status_code == 400
    assert body['success'] is False
    assert body['message'] == 'Validation failed'
    assert body['errors'][0]['field'] == 'favouriteColour'


def test_update_merges_only_sent_fields(client, auth_headers):
    created = client.post('/api/customers', json={**NEW_CUSTOMER, 'phone': '555-0100'},
                          headers=auth_headers).get_json()['data']

    response = client.put(f"/api/customers/{created['id']}", json={'notes': 'VIP'}, headers=auth_headers)

    data = response.get_json()['data']
    assert data['notes'] == 'VIP'
    assert data['phone'] == '555-0100'


def test_mutations_write_audit_rows(client, auth_headers, admin_user):
    created = client.post('/api/customers', json=NEW_CUSTOMER, headers=auth_headers).get_json()['data']
    client.delete(f"/api/customers/{created['id']}", headers=auth_headers)

    actions = [log.action for log in DetailedLog.query.filter_by(record_id=created['id']).all()]
    assert sorted(actions) == ['CREATE', 'DELETE']
    assert all(log.user_id == admin_user.id for log in DetailedLog.query.all())


def test_wallet_credit_and_overdraw(client, auth_headers):
    created = client.post('/api/customers', json=NEW_CUSTOMER, headers=auth_headers).get_json()['data']
    wallet_url = f"/api/customers/{created['id']}/wallet"

    credit = client.post(wallet_url, json={'type': 'credit', 'amount': 50}, headers=auth_headers)
    overdraw = client.post(wallet_url, json={'type': 'debit', 'amount': 80}, headers=auth_headers)
    history = client.get(f"{wallet_url}/transactions", headers=auth_headers).get_json()

    assert credit.get_json()['data']['newBalance'] == 50.0
    assert overdraw.status_code == 400
    assert overdraw.get_json()['message'] == 'Insufficient wallet balance'
    assert history['pagination']['total'] == 1
    assert history['data'][0]['balanceAfter'] == 50.0


def test_routes_require_a_token(client):
    response = client.get('/api/customers')

    assert response.status_code == 401
    assert response.get_json()['success'] is False
