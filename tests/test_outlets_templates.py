"""Sales outlets, service templates and the audit log endpoints."""

import uuid

from erp_api import db
from erp_api.models import Invoice


def _outlet(client, headers, code='dt-01', **fields):
    body = {'outletCode': code, 'name': 'Downtown', 'address': {'city': 'Harare'}, **fields}
    return client.post('/api/sales-outlets', json=body, headers=headers)


def _template(client, headers, **fields):
    body = {'name': 'Brake service', 'category': 'brakes', 'estimatedDuration': 90,
            'estimatedCost': 120, 'tasks': [{'name': 'Replace pads'}], **fields}
    return client.post('/api/service-templates', json=body, headers=headers)


def test_outlet_code_is_upper_cased_and_unique(client, auth_headers):
    created = _outlet(client, auth_headers)
    duplicate = _outlet(client, auth_headers, code='DT-01', name='Other')

    data = created.get_json()['data']
    assert created.status_code == 201
    assert data['outletCode'] == 'DT-01'
    assert data['type'] == 'retail'
    assert data['address']['city'] == 'Harare'
    assert duplicate.status_code == 400
    assert duplicate.get_json() == {'success': False, 'message': 'Outlet code already exists'}


def test_outlet_writes_need_admin_or_manager(client, make_user, headers_for):
    seller = make_user('sales_person')

    response = _outlet(client, headers_for(seller))

    assert response.status_code == 403


def test_deleted_outlets_only_listed_on_request(client, auth_headers):
    kept = _outlet(client, auth_headers).get_json()['data']
    closed = _outlet(client, auth_headers, code='UP-02', name='Uptown').get_json()['data']
    client.delete(f"/api/sales-outlets/{closed['id']}", headers=auth_headers)

    default = client.get('/api/sales-outlets', headers=auth_headers).get_json()
    inactive = client.get('/api/sales-outlets?isActive=false', headers=auth_headers).get_json()
    active_list = client.get('/api/sales-outlets/active/list', headers=auth_headers).get_json()['data']

    assert [item['id'] for item in default['data']] == [kept['id']]
    assert default['pagination']['limit'] == 50
    assert [item['id'] for item in inactive['data']] == [closed['id']]
    assert [item['outletCode'] for item in active_list] == ['DT-01']


def test_outlet_with_invoices_cannot_be_deleted(client, auth_headers):
    outlet = _outlet(client, auth_headers).get_json()['data']
    db.session.add(Invoice(invoice_number='INV-1', sales_outlet_id=uuid.UUID(outlet['id']), total=40))
    db.session.commit()

    response = client.delete(f"/api/sales-outlets/{outlet['id']}", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'].startswith('Cannot delete outlet. It has 1 associated invoice(s).')


def test_outlet_stats(client, auth_headers):
    outlet = _outlet(client, auth_headers).get_json()['data']
    db.session.add_all([
        Invoice(invoice_number='INV-1', sales_outlet_id=uuid.UUID(outlet['id']), total=40),
        Invoice(invoice_number='INV-2', sales_outlet_id=uuid.UUID(outlet['id']), total=60),
    ])
    db.session.commit()

    stats = client.get(f"/api/sales-outlets/{outlet['id']}/stats", headers=auth_headers).get_json()['data']

    assert stats['totalInvoices'] == 2
    assert stats['totalRevenue'] == 100.0
    assert stats['averageOrderValue'] == 50.0
    assert stats['lastSaleAt'] is not None


def test_template_create_and_lookup(client, make_user, headers_for):
    mechanic = headers_for(make_user('workshop_employee'))
    created = _template(client, mechanic)
    _template(client, mechanic, name='Oil change', category='maintenance')

    by_category = client.get('/api/service-templates/category/brakes', headers=mechanic).get_json()['data']
    found = client.get('/api/service-templates/search/OIL', headers=mechanic).get_json()['data']

    data = created.get_json()['data']
    assert created.status_code == 201
    assert data['estimatedCost'] == 120.0
    assert data['priority'] == 'medium'
    assert data['tasks'] == [{'name': 'Replace pads', 'description': None, 'estimatedDuration': None,
                              'order': None, 'required': True}]
    assert [item['name'] for item in by_category] == ['Brake service']
    assert [item['name'] for item in found] == ['Oil change']


def test_template_duration_is_bounded(client, auth_headers):
    response = _template(client, auth_headers, estimatedDuration=20000)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'estimatedDuration'


def test_template_delete_needs_admin_or_manager(client, auth_headers, make_user, headers_for):
    template = _template(client, auth_headers).get_json()['data']
    mechanic = headers_for(make_user('workshop_employee'))

    forbidden = client.delete(f"/api/service-templates/{template['id']}", headers=mechanic)
    deleted = client.delete(f"/api/service-templates/{template['id']}", headers=auth_headers)
    listed = client.get('/api/service-templates', headers=auth_headers).get_json()['data']

    assert forbidden.status_code == 403
    assert deleted.status_code == 200
    assert listed == []


def test_templates_hidden_from_other_roles(client, make_user, headers_for):
    customer = make_user('customer')

    response = client.get('/api/service-templates', headers=headers_for(customer))

    assert response.status_code == 403


def test_logs_are_admin_only_and_filterable(client, auth_headers, make_user, headers_for):
    _outlet(client, auth_headers)
    _template(client, auth_headers)
    manager = make_user('manager')

    forbidden = client.get('/api/logs', headers=headers_for(manager))
    outlet_logs = client.get('/api/logs?tableName=sales_outlets', headers=auth_headers).get_json()
    summary = client.get('/api/logs/summary', headers=auth_headers).get_json()['data']
    entry = client.get(f"/api/logs/{outlet_logs['data'][0]['id']}", headers=auth_headers).get_json()['data']

    assert forbidden.status_code == 403
    assert outlet_logs['pagination']['total'] == 1
    assert outlet_logs['data'][0]['action'] == 'CREATE'
    assert summary['totalLogs'] == 2
    assert summary['byAction'] == [{'action': 'CREATE', 'count': 2}]
    assert entry['newValues']['outletCode'] == 'dt-01'
