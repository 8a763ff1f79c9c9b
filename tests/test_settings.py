"""Singleton settings, section merges and the company logo."""

import io
import os

from erp_api.models import Setting


def _upload(client, headers, name='logo.png', content=b'\x89PNG fake'):
    return client.post('/api/settings/logo', data={'logo': (io.BytesIO(content), name)},
                       headers=headers, content_type='multipart/form-data')


def test_settings_created_once_with_defaults(client, auth_headers):
    first = client.get('/api/settings', headers=auth_headers).get_json()['data']
    second = client.get('/api/settings', headers=auth_headers).get_json()['data']

    assert first['id'] == second['id']
    assert Setting.query.count() == 1
    assert first['company']['defaultCurrency'] == 'USD'
    assert [c['code'] for c in first['company']['currencySettings']['supportedCurrencies']] == ['USD', 'ZWL']
    assert first['appearance']['theme'] == 'light'


def test_update_merges_into_sections(client, auth_headers):
    response = client.put('/api/settings', json={
        'company': {'name': 'Acme Motors'},
        'appearance': {'theme': 'dark'},
    }, headers=auth_headers)

    data = response.get_json()['data']
    assert response.get_json()['message'] == 'Settings updated'
    assert data['company']['name'] == 'Acme Motors'
    assert data['company']['defaultCurrency'] == 'USD'
    assert data['company']['invoiceSettings']['prefix'] == 'INV'
    assert data['appearance'] == {'theme': 'dark', 'language': 'en', 'timezone': 'UTC', 'dateFormat': 'MM/DD/YYYY'}


def test_update_rejects_unknown_section(client, auth_headers):
    response = client.put('/api/settings', json={'billing': {}}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['errors'][0]['field'] == 'billing'


def test_update_needs_admin_or_manager(client, make_user, headers_for):
    seller = make_user('sales_person')

    response = client.put('/api/settings', json={'appearance': {'theme': 'dark'}}, headers=headers_for(seller))

    assert response.status_code == 403


def test_public_settings_without_token(client, auth_headers):
    client.put('/api/settings', json={'company': {'name': 'Acme Motors'}}, headers=auth_headers)

    response = client.get('/api/settings/public')

    data = response.get_json()['data']
    assert response.status_code == 200
    assert data['company'] == {
        'name': 'Acme Motors',
        'logo': {'url': '', 'filename': '', 'originalName': ''},
        'defaultCurrency': 'USD',
    }
    assert 'system' not in data


def test_logo_upload_replaces_previous_file(app, client, auth_headers):
    first = _upload(client, auth_headers).get_json()['data']
    second = _upload(client, auth_headers, name='new-logo.jpg').get_json()['data']

    logo_dir = os.path.join(app.config['UPLOAD_FOLDER'], 'logos')
    assert first['url'] == f"/uploads/logos/{first['filename']}"
    assert second['originalName'] == 'new-logo.jpg'
    assert os.listdir(logo_dir) == [second['filename']]

    served = client.get(second['url'])
    assert served.status_code == 200
    assert served.data == b'\x89PNG fake'
    served.close()

    public = client.get('/api/settings/public').get_json()['data']
    assert public['company']['logo'] == second


def test_logo_upload_rejects_non_images(client, auth_headers):
    response = _upload(client, auth_headers, name='notes.txt')

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Only image files are allowed'


def test_logo_upload_without_file(client, auth_headers):
    response = client.post('/api/settings/logo', data={}, headers=auth_headers, content_type='multipart/form-data')

    assert response.status_code == 400
    assert response.get_json()['message'] == 'No file uploaded'


def test_logo_too_large(app, client, auth_headers):
    app.config['LOGO_MAX_BYTES'] = 4

    response = _upload(client, auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Logo file is too large'


def test_delete_logo_removes_file(app, client, auth_headers):
    _upload(client, auth_headers)

    response = client.delete('/api/settings/logo', headers=auth_headers)

    assert response.get_json()['message'] == 'Logo deleted successfully'
    assert os.listdir(os.path.join(app.config['UPLOAD_FOLDER'], 'logos')) == []
    settings = client.get('/api/settings', headers=auth_headers).get_json()['data']
    assert settings['company']['logo']['url'] == ''
