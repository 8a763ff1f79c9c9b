"""Users, role-gated creation and token authentication."""

from erp_api import db
from erp_api.models import DetailedLog, User, Warehouse, WarehouseEmployee


def _new_user(**fields):
    return {'firstName': 'Nia', 'lastName': 'New', 'email': 'nia@example.com', 'password': 'secret123', **fields}


def test_login_returns_token_and_user(client, admin_user):
    response = client.post('/api/auth/login', json={'email': 'ADMIN@example.com', 'password': 'secret123'})

    body = response.get_json()
    assert response.status_code == 200
    assert body['message'] == 'Login successful'
    assert body['data']['user']['email'] == 'admin@example.com'
    assert body['data']['user']['lastLogin'] is not None

    me = client.get('/api/auth/me', headers={'Authorization': f"Bearer {body['data']['token']}"})
    assert me.get_json()['data']['id'] == str(admin_user.id)
    assert DetailedLog.query.filter_by(action='LOGIN').count() == 1


def test_login_with_wrong_password(client, admin_user):
    response = client.post('/api/auth/login', json={'email': 'admin@example.com', 'password': 'nope'})

    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'message': 'Invalid credentials'}


def test_login_deactivated_account(client, make_user):
    make_user('manager', email='gone@example.com', is_active=False)

    response = client.post('/api/auth/login', json={'email': 'gone@example.com', 'password': 'secret123'})

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Account is deactivated'


def test_invalid_token(client):
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})

    assert response.status_code == 401
    assert response.get_json() == {'success': False, 'message': 'Token is not valid'}


def test_change_password(client, admin_user, auth_headers):
    wrong = client.put('/api/auth/change-password',
                       json={'currentPassword': 'bad', 'newPassword': 'another1'}, headers=auth_headers)
    right = client.put('/api/auth/change-password',
                       json={'currentPassword': 'secret123', 'newPassword': 'another1'}, headers=auth_headers)

    assert wrong.get_json()['message'] == 'Current password is incorrect'
    assert right.get_json()['message'] == 'Password changed successfully'
    assert db.session.get(User, admin_user.id).check_password('another1')


def test_admin_creates_user_with_role_alias(client, auth_headers):
    response = client.post('/api/users', json=_new_user(email='NIA@Example.com', role='Sales'), headers=auth_headers)

    data = response.get_json()['data']
    assert response.status_code == 201
    assert data['role'] == 'sales_person'
    assert data['email'] == 'nia@example.com'
    assert 'password' not in data
    audit = DetailedLog.query.filter_by(action='CREATE', table_name='users').one()
    assert 'password' not in audit.new_values


def test_unknown_role_is_rejected(client, auth_headers):
    response = client.post('/api/users', json=_new_user(role='pilot'), headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'].startswith('Invalid role. Allowed roles: admin, manager')


def test_manager_cannot_create_admin(client, make_user, headers_for):
    manager = make_user('manager')

    response = client.post('/api/users', json=_new_user(role='admin'), headers=headers_for(manager))

    assert response.status_code == 403
    assert response.get_json()['message'] == 'Managers can only create employees and customers'


def test_employee_cannot_create_users(client, make_user, headers_for):
    employee = make_user('warehouse_employee')

    response = client.post('/api/users', json=_new_user(role='customer'), headers=headers_for(employee))

    assert response.status_code == 403
    assert response.get_json()['message'] == 'Employees cannot create users'


def test_customer_cannot_create_users(client, make_user, headers_for):
    customer = make_user('customer')

    response = client.post('/api/users', json=_new_user(role='customer'), headers=headers_for(customer))

    assert response.status_code == 403
    assert User.query.filter_by(email='nia@example.com').first() is None


def test_warehouse_employee_needs_a_warehouse(client, auth_headers):
    response = client.post('/api/users', json=_new_user(role='warehouse_employee'), headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Warehouse is required for warehouse employee role'


def test_warehouse_employee_joins_the_roster(client, auth_headers):
    warehouse = Warehouse(name='Main', code='WH1')
    db.session.add(warehouse)
    db.session.commit()

    response = client.post('/api/users', json=_new_user(role='employee', warehouse=str(warehouse.id)),
                           headers=auth_headers)

    data = response.get_json()['data']
    assert data['role'] == 'warehouse_employee'
    assert data['warehouse']['assignedWarehouse']['code'] == 'WH1'
    roster = WarehouseEmployee.query.one()
    assert str(roster.user_id) == data['id']


def test_warehouse_manager_limited_to_own_warehouse(client, make_user, headers_for):
    own = Warehouse(name='Own', code='WH1')
    other = Warehouse(name='Other', code='WH2')
    db.session.add_all([own, other])
    db.session.commit()
    manager = make_user('warehouse_manager', warehouse_id=own.id)

    response = client.post('/api/users', json=_new_user(role='warehouse_employee', warehouse=str(other.id)),
                           headers=headers_for(manager))

    assert response.status_code == 403
    assert response.get_json()['message'] == 'You can only create employees for warehouses you manage'


def test_list_users_is_limited_to_admins_and_managers(client, make_user, headers_for, auth_headers):
    employee = make_user('warehouse_employee')

    forbidden = client.get('/api/users', headers=headers_for(employee))
    allowed = client.get('/api/users', headers=auth_headers)

    assert forbidden.status_code == 403
    assert forbidden.get_json() == {'success': False, 'message': 'Unauthorized action'}
    assert allowed.get_json()['pagination']['total'] == 2


def test_profile_update_ignores_role(client, admin_user, auth_headers):
    response = client.put('/api/users/profile', json={'firstName': 'Ada', 'role': 'customer', 'phone': '555'},
                          headers=auth_headers)

    data = response.get_json()['data']
    assert data['role'] == 'admin'
    assert data['phone'] == '555'


def test_delete_user_deactivates(client, auth_headers, make_user):
    other = make_user('manager')

    response = client.delete(f"/api/users/{other.id}", headers=auth_headers)

    assert response.get_json()['message'] == 'User deactivated successfully'
    assert db.session.get(User, other.id).is_active is False


def test_customer_cannot_update_users(client, make_user, headers_for):
    customer = make_user('customer')
    manager = make_user('manager')

    promote = client.put(f"/api/users/{customer.id}", json={'role': 'admin'}, headers=headers_for(customer))
    deactivate = client.put(f"/api/users/{manager.id}", json={'isActive': False}, headers=headers_for(customer))

    assert promote.status_code == 403
    assert promote.get_json() == {'success': False, 'message': 'Unauthorized action'}
    assert deactivate.status_code == 403
    assert db.session.get(User, customer.id).role == 'customer'
    assert db.session.get(User, manager.id).is_active is True


def test_manager_cannot_grant_admin(client, make_user, headers_for):
    manager = make_user('manager')
    employee = make_user('warehouse_employee')

    response = client.put(f"/api/users/{employee.id}", json={'role': 'admin'}, headers=headers_for(manager))

    assert response.status_code == 403
    assert response.get_json()['message'] == 'Managers can only create employees and customers'
    assert db.session.get(User, employee.id).role == 'warehouse_employee'


def test_manager_cannot_modify_admin(client, admin_user, make_user, headers_for):
    manager = make_user('manager')

    response = client.put(f"/api/users/{admin_user.id}", json={'isActive': False}, headers=headers_for(manager))

    assert response.status_code == 403
    assert response.get_json()['message'] == 'Managers cannot modify admin accounts'
    assert db.session.get(User, admin_user.id).is_active is True


def test_admin_changes_user_role(client, make_user, auth_headers):
    employee = make_user('warehouse_employee')

    response = client.put(f"/api/users/{employee.id}", json={'role': 'manager', 'firstName': 'Mo'}, headers=auth_headers)

    data = response.get_json()['data']
    assert response.get_json()['message'] == 'User updated successfully'
    assert data['role'] == 'manager'
    assert data['firstName'] == 'Mo'
