"""Support tickets: numbering, status moves, replies and ratings."""

import uuid
from datetime import timedelta

from erp_api import db
from erp_api.models import SupportTicket
from erp_api.utils.date_utils import utc_now


def _ticket(client, headers, customer, **fields):
    body = {'subject': 'Engine light', 'description': 'Stays on after service',
            'customer': str(customer.id), 'category': 'technical', **fields}
    return client.post('/api/support', json=body, headers=headers)


def _age(ticket_id, created_at, **fields):
    ticket = db.session.get(SupportTicket, uuid.UUID(ticket_id))
    ticket.created_at = created_at
    for key, value in fields.items():
        setattr(ticket, key, value)
    db.session.commit()


def test_create_numbers_tickets(client, auth_headers, customer):
    first = _ticket(client, auth_headers, customer)
    second = _ticket(client, auth_headers, customer, subject='Invoice copy', category='billing')

    assert first.status_code == 201
    data = first.get_json()['data']
    assert data['ticketNumber'] == 'TKT000001'
    assert data['status'] == 'open'
    assert data['priority'] == 'medium'
    assert data['customer']['email'] == 'cara@example.com'
    assert second.get_json()['data']['ticketNumber'] == 'TKT000002'


def test_create_requires_existing_customer(client, auth_headers):
    response = client.post('/api/support', json={
        'subject': 'Hello', 'description': 'x', 'customer': str(uuid.uuid4()), 'category': 'general',
    }, headers=auth_headers)

    assert response.status_code == 404
    assert response.get_json()['message'] == 'Customer not found'
    assert SupportTicket.query.count() == 0


def test_setting_the_current_status_is_rejected(client, auth_headers, customer):
    ticket = _ticket(client, auth_headers, customer).get_json()['data']

    response = client.put(f"/api/support/{ticket['id']}/status", json={'status': 'open'}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'message': 'Ticket is already open'}


def test_resolving_stamps_resolved_at(client, auth_headers, customer):
    ticket = _ticket(client, auth_headers, customer).get_json()['data']

    response = client.put(f"/api/support/{ticket['id']}/status", json={'status': 'resolved'}, headers=auth_headers)

    data = response.get_json()['data']
    assert data['status'] == 'resolved'
    assert data['sla']['resolvedAt'] is not None
    assert data['sla']['closedAt'] is None


def test_unknown_status_is_a_validation_error(client, auth_headers, customer):
    ticket = _ticket(client, auth_headers, customer).get_json()['data']

    response = client.put(f"/api/support/{ticket['id']}/status", json={'status': 'lost'}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'status'


def test_reply_from_creator_is_not_a_first_response(client, auth_headers, customer, make_user, headers_for):
    ticket = _ticket(client, auth_headers, customer).get_json()['data']
    url = f"/api/support/{ticket['id']}"
    agent = make_user('sales_person')

    client.post(f"{url}/conversations", json={'message': 'More detail'}, headers=auth_headers)
    after_own = client.get(url, headers=auth_headers).get_json()['data']
    client.post(f"{url}/conversations", json={'message': 'Looking into it'}, headers=headers_for(agent))
    after_agent = client.get(url, headers=auth_headers).get_json()['data']

    assert after_own['sla']['firstResponseAt'] is None
    assert after_agent['sla']['firstResponseAt'] is not None
    assert [item['message'] for item in after_agent['conversations']] == ['More detail', 'Looking into it']


def test_rating_out_of_range(client, auth_headers, customer):
    ticket = _ticket(client, auth_headers, customer).get_json()['data']

    response = client.post(f"/api/support/{ticket['id']}/satisfaction", json={'rating': 6}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Rating must be between 1 and 5'
    assert SupportTicket.query.one().rated_at is None


def test_rating_is_recorded(client, auth_headers, customer):
    ticket = _ticket(client, auth_headers, customer).get_json()['data']

    response = client.post(f"/api/support/{ticket['id']}/satisfaction",
                           json={'rating': 4.5, 'feedback': 'Quick fix'}, headers=auth_headers)

    data = response.get_json()['data']
    assert data['rating'] == 4.5
    assert data['feedback'] == 'Quick fix'
    assert data['ratedAt'] is not None


def test_assign_to_unknown_user(client, auth_headers, customer):
    ticket = _ticket(client, auth_headers, customer).get_json()['data']

    response = client.put(f"/api/support/{ticket['id']}/assign", json={'assignedTo': str(uuid.uuid4())},
                          headers=auth_headers)

    assert response.status_code == 404
    assert response.get_json()['message'] == 'Assignee not found'


def test_stats_count_by_status(client, auth_headers, customer):
    _ticket(client, auth_headers, customer)
    _ticket(client, auth_headers, customer, priority='high')

    stats = client.get('/api/support/stats', headers=auth_headers).get_json()['data']

    assert stats['totalTickets'] == 2
    assert stats['statusStats'] == [{'status': 'open', 'count': 2}]
    assert stats['overdueTickets'] == 0


def test_overdue_tickets(client, auth_headers, customer):
    unanswered = _ticket(client, auth_headers, customer, subject='Unanswered').get_json()['data']
    answered = _ticket(client, auth_headers, customer, subject='Answered').get_json()['data']
    stale = _ticket(client, auth_headers, customer, subject='Stale').get_json()['data']
    _ticket(client, auth_headers, customer, subject='Fresh')
    closed = _ticket(client, auth_headers, customer, subject='Closed').get_json()['data']
    now = utc_now()
    _age(unanswered['id'], now - timedelta(hours=30))
    _age(answered['id'], now - timedelta(hours=30), first_response_at=now - timedelta(hours=29))
    _age(stale['id'], now - timedelta(hours=80), first_response_at=now - timedelta(hours=79))
    _age(closed['id'], now - timedelta(hours=80), status='closed')

    response = client.get('/api/support/overdue', headers=auth_headers)

    assert response.status_code == 200
    assert [item['subject'] for item in response.get_json()['data']] == ['Stale', 'Unanswered']
