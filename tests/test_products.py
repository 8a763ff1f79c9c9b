"""Product catalogue, pricing and stock operations."""

import pytest

from erp_api.models import Product


def _product(client, headers, category, sku='oil-5w30', stock=10, min_stock=5, **fields):
    body = {
        'name': 'Engine oil', 'sku': sku, 'category': str(category.id),
        'pricing': {'costPrice': 80, 'sellingPrice': 100},
        'inventory': {'currentStock': stock, 'minStock': min_stock},
        **fields,
    }
    return client.post('/api/products', json=body, headers=headers)


def test_create_upper_cases_sku_and_computes_markup(client, auth_headers, category):
    response = _product(client, auth_headers, category)

    data = response.get_json()['data']
    assert response.status_code == 201
    assert data['sku'] == 'OIL-5W30'
    assert data['category']['name'] == 'Spare parts'
    assert data['pricing']['markup'] == 25.0
    assert data['inventory']['currentStock'] == 10


def test_create_requires_both_prices(client, auth_headers, category):
    response = client.post('/api/products', json={
        'name': 'Filter', 'sku': 'F-1', 'category': str(category.id), 'pricing': {'costPrice': 5},
    }, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Validation failed'
    assert Product.query.count() == 0


def test_duplicate_sku(client, auth_headers, category):
    _product(client, auth_headers, category)

    response = _product(client, auth_headers, category, sku='OIL-5W30')

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Product with this SKU or barcode already exists'


def test_price_update_recomputes_markup(client, auth_headers, category):
    product = _product(client, auth_headers, category).get_json()['data']

    response = client.put(f"/api/products/{product['id']}", json={'pricing': {'sellingPrice': 120}},
                          headers=auth_headers)

    pricing = response.get_json()['data']['pricing']
    assert pricing['costPrice'] == 80.0
    assert pricing['markup'] == 50.0


@pytest.mark.parametrize('operation, quantity, expected', [
    ('add', 5, 15),
    ('subtract', 4, 6),
    ('set', 3, 3),
])
def test_stock_operations(client, auth_headers, category, operation, quantity, expected):
    product = _product(client, auth_headers, category).get_json()['data']

    response = client.put(f"/api/products/{product['id']}/stock",
                          json={'operation': operation, 'quantity': quantity}, headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()['data'] == {
        'productId': product['id'], 'newStock': expected, 'operation': operation, 'quantity': quantity,
    }


def test_subtracting_more_than_in_stock(client, auth_headers, category):
    product = _product(client, auth_headers, category).get_json()['data']

    response = client.put(f"/api/products/{product['id']}/stock",
                          json={'operation': 'subtract', 'quantity': 11}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Insufficient stock'
    assert Product.query.one().current_stock == 10


def test_unknown_stock_operation(client, auth_headers, category):
    product = _product(client, auth_headers, category).get_json()['data']

    response = client.put(f"/api/products/{product['id']}/stock",
                          json={'operation': 'double', 'quantity': 1}, headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Invalid operation'


def test_low_stock_listing_and_filter(client, auth_headers, category):
    _product(client, auth_headers, category)
    _product(client, auth_headers, category, sku='PAD-1', stock=2, name='Brake pads')

    low = client.get('/api/products/low-stock', headers=auth_headers).get_json()['data']
    filtered = client.get('/api/products?status=low_stock', headers=auth_headers).get_json()['data']

    assert [item['sku'] for item in low] == ['PAD-1']
    assert [item['sku'] for item in filtered] == ['PAD-1']


def test_out_of_stock_filter(client, auth_headers, category):
    _product(client, auth_headers, category)
    _product(client, auth_headers, category, sku='PAD-1', stock=2, name='Brake pads')
    _product(client, auth_headers, category, sku='BELT-1', stock=0, name='Timing belt')

    response = client.get('/api/products?status=out_of_stock', headers=auth_headers).get_json()

    assert [item['sku'] for item in response['data']] == ['BELT-1']
    assert response['pagination']['total'] == 1


def test_stats(client, auth_headers, category):
    _product(client, auth_headers, category)
    _product(client, auth_headers, category, sku='PAD-1', stock=0)

    stats = client.get('/api/products/stats', headers=auth_headers).get_json()['data']

    assert stats == {
        'totalProducts': 2,
        'lowStockProducts': 1,
        'outOfStockProducts': 1,
        'totalStockValue': 800.0,
    }
