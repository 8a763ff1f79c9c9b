"""Booking, release and maintenance of machines, tools and workstations."""

from erp_api import db
from erp_api.models import MaintenanceRecord, WorkshopJob


def _machine(client, headers, **fields):
    body = {'name': 'Lift 1', 'category': 'lifting', 'serialNumber': 'SN-1', **fields}
    return client.post('/api/machines', json=body, headers=headers).get_json()['data']


def test_duplicate_serial_number(client, auth_headers):
    _machine(client, auth_headers)

    response = client.post('/api/machines', json={'name': 'Lift 2', 'category': 'lifting', 'serialNumber': 'SN-1'},
                           headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Machine with this serial number already exists'


def test_booking_a_booked_machine_is_rejected(client, auth_headers, admin_user):
    machine = _machine(client, auth_headers)
    url = f"/api/machines/{machine['id']}"

    first = client.post(f"{url}/book", json={}, headers=auth_headers)
    second = client.post(f"{url}/book", json={}, headers=auth_headers)

    assert first.status_code == 200
    assert first.get_json()['data']['availability']['isAvailable'] is False
    assert first.get_json()['data']['availability']['bookedBy']['id'] == str(admin_user.id)
    assert second.status_code == 400
    assert second.get_json() == {'success': False, 'message': 'Machine is not available'}


def test_releasing_an_available_machine_is_rejected(client, auth_headers):
    machine = _machine(client, auth_headers)

    response = client.post(f"/api/machines/{machine['id']}/release", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Machine is not booked'


def test_book_with_job_then_release(client, auth_headers):
    job = WorkshopJob(title='Brake service')
    db.session.add(job)
    db.session.commit()
    machine = _machine(client, auth_headers)
    url = f"/api/machines/{machine['id']}"

    booked = client.post(f"{url}/book", json={'jobId': str(job.id), 'bookedUntil': '2030-01-01T10:00:00Z'},
                         headers=auth_headers).get_json()['data']
    released = client.post(f"{url}/release", headers=auth_headers).get_json()['data']

    assert booked['availability']['currentJob']['title'] == 'Brake service'
    assert booked['availability']['bookedUntil'] == '2030-01-01T10:00:00'
    assert released['availability'] == {
        'isAvailable': True, 'currentJob': None, 'bookedUntil': None, 'bookedBy': None,
    }


def test_machine_maintenance_record_schedules_next_date(client, auth_headers):
    machine = _machine(client, auth_headers, maintenance={'schedule': 'monthly'})

    response = client.post(f"/api/machines/{machine['id']}/maintenance",
                           json={'type': 'preventive', 'description': 'Oil change', 'cost': 25},
                           headers=auth_headers)

    data = response.get_json()['data']
    assert response.status_code == 200
    assert data['maintenance']['lastMaintenance'] is not None
    assert data['maintenance']['nextMaintenance'] > data['maintenance']['lastMaintenance']
    assert MaintenanceRecord.query.count() == 1


def test_tool_assign_and_return(client, auth_headers):
    tool = client.post('/api/tools', json={'name': 'Torque wrench', 'category': 'hand_tool', 'toolNumber': 'T-1'},
                       headers=auth_headers).get_json()['data']
    url = f"/api/tools/{tool['id']}"

    assigned = client.post(f"{url}/assign", json={}, headers=auth_headers).get_json()['data']
    again = client.post(f"{url}/assign", json={}, headers=auth_headers)
    returned = client.post(f"{url}/return", json={'condition': 'fair'}, headers=auth_headers).get_json()['data']

    assert assigned['status'] == 'in_use'
    assert again.get_json()['message'] == 'Tool is not available'
    assert returned['status'] == 'available'
    assert returned['condition'] == 'fair'
    assert returned['usage']['usageCount'] == 1


def test_calibrating_a_tool_that_does_not_need_it(client, auth_headers):
    tool = client.post('/api/tools', json={'name': 'Hammer', 'category': 'hand_tool'},
                       headers=auth_headers).get_json()['data']

    response = client.post(f"/api/tools/{tool['id']}/calibrate", json={}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'This tool does not require calibration'


def test_calibration_sets_next_due_date(client, auth_headers):
    tool = client.post('/api/tools', json={
        'name': 'Gauge', 'category': 'measuring_tool',
        'calibration': {'requiresCalibration': True, 'calibrationInterval': 30},
    }, headers=auth_headers).get_json()['data']

    response = client.post(f"/api/tools/{tool['id']}/calibrate",
                           json={'calibrationDate': '2030-01-01T00:00:00Z', 'certificate': 'CERT-9'},
                           headers=auth_headers)

    calibration = response.get_json()['data']['calibration']
    assert calibration['lastCalibrated'] == '2030-01-01T00:00:00'
    assert calibration['nextCalibration'] == '2030-01-31T00:00:00'
    assert calibration['certificate'] == 'CERT-9'


def test_workstation_release_updates_utilization(client, auth_headers):
    station = client.post('/api/workstations', json={
        'name': 'Bay 1', 'stationNumber': 'WS-1', 'type': 'repair_bay', 'location': {'building': 'A'},
    }, headers=auth_headers).get_json()['data']
    url = f"/api/workstations/{station['id']}"

    booked = client.post(f"{url}/book", json={}, headers=auth_headers).get_json()['data']
    released = client.post(f"{url}/release", json={'jobDuration': 90}, headers=auth_headers).get_json()['data']

    assert booked['status'] == 'occupied'
    assert station['location']['building'] == 'A'
    assert released['status'] == 'available'
    assert released['utilization']['totalJobsCompleted'] == 1
    assert released['utilization']['totalHoursUsed'] == 1.5
    assert released['utilization']['averageJobDuration'] == 90


def test_workstation_release_without_duration_counts_job(client, auth_headers):
    station = client.post('/api/workstations', json={
        'name': 'Bay 2', 'stationNumber': 'WS-2', 'type': 'repair_bay',
    }, headers=auth_headers).get_json()['data']
    url = f"/api/workstations/{station['id']}"

    client.post(f"{url}/book", json={}, headers=auth_headers)
    released = client.post(f"{url}/release", json={}, headers=auth_headers).get_json()['data']

    assert released['utilization']['totalJobsCompleted'] == 1
    assert released['utilization']['lastUsed'] is not None
    assert released['utilization']['totalHoursUsed'] == 0


def test_list_machines_by_availability(client, auth_headers):
    booked = _machine(client, auth_headers)
    free = _machine(client, auth_headers, name='Welder', category='welding', serialNumber='SN-2')
    client.post(f"/api/machines/{booked['id']}/book", json={}, headers=auth_headers)

    unavailable = client.get('/api/machines?available=false', headers=auth_headers).get_json()
    available = client.get('/api/machines?available=true', headers=auth_headers).get_json()

    assert [item['id'] for item in unavailable['data']] == [booked['id']]
    assert [item['id'] for item in available['data']] == [free['id']]
    assert available['pagination']['total'] == 1


def test_machine_stats(client, auth_headers):
    first = _machine(client, auth_headers)
    _machine(client, auth_headers, name='Welder', category='welding', serialNumber='SN-2')
    client.post(f"/api/machines/{first['id']}/book", json={}, headers=auth_headers)

    stats = client.get('/api/machines/stats', headers=auth_headers).get_json()['data']

    assert stats['total'] == 2
    assert stats['available'] == 1
