"""Unit tests for the shared listing helpers."""

from erp_api.crud.list_query import page_count, parse_pagination, pagination_meta


def test_page_count_rounds_up():
    assert page_count(21, 10) == 3
    assert page_count(20, 10) == 2
    assert page_count(1, 50) == 1


def test_page_count_is_zero_for_empty_result():
    assert page_count(0, 10) == 0


def test_parse_pagination_defaults_and_bad_values():
    assert parse_pagination({}) == (1, 10)
    assert parse_pagination({'page': 'abc', 'limit': '-5'}) == (1, 10)
    assert parse_pagination({'page': '3', 'limit': '25'}) == (3, 25)
    assert parse_pagination({}, default_limit=50) == (1, 50)


def test_pagination_meta_shape():
    assert pagination_meta(2, 10, 35) == {'page': 2, 'limit': 10, 'total': 35, 'pages': 4}


def test_listing_returns_envelope_with_pagination(client, auth_headers):
    for index in range(3):
        client.post('/api/customers', json={
            'firstName': f"First{index}", 'lastName': 'Last', 'email': f"c{index}@example.com",
        }, headers=auth_headers)

    response = client.get('/api/customers?page=2&limit=2', headers=auth_headers)

    body = response.get_json()
    assert response.status_code == 200
    assert body['success'] is True
    assert len(body['data']) == 1
    assert body['pagination'] == {'page': 2, 'limit': 2, 'total': 3, 'pages': 2}


def test_search_matches_case_insensitive_substring(client, auth_headers):
    client.post('/api/customers', json={'firstName': 'Jonathan', 'lastName': 'Doe', 'email': 'jd@example.com'},
                headers=auth_headers)
    client.post('/api/customers', json={'firstName': 'Mary', 'lastName': 'Major', 'email': 'mm@example.com'},
                headers=auth_headers)

    response = client.get('/api/customers?search=NATH', headers=auth_headers)

    emails = [item['email'] for item in response.get_json()['data']]
    assert emails == ['jd@example.com']


def test_search_treats_wildcards_literally(client, auth_headers):
    client.post('/api/customers', json={'firstName': 'Plain', 'lastName': 'Name', 'email': 'p@example.com'},
                headers=auth_headers)

    response = client.get('/api/customers?search=%25', headers=auth_headers)

    assert response.get_json()['pagination']['total'] == 0
