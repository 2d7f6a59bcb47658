"""
Dashboard statistics, global search and autocomplete
"""

from loan_inventory.test.conftest import (
    create_asset_item, create_asset_model, create_employee, create_loan, create_stock_item
)


def _inventory(test_client):
    employee = create_employee(test_client)
    keyboard = create_asset_model(test_client)['asset_model']
    first = create_asset_item(test_client, keyboard['id'])
    create_asset_item(test_client, keyboard['id'], asset_tag='KB-002', serial='SN-002')
    cable = create_asset_model(test_client, type='Câble', brand='Belkin', model_name='HDMI 2m')['asset_model']
    create_stock_item(test_client, cable['id'], quantity=2)
    adapter = create_asset_model(test_client, type='Adaptateur', brand='Belkin', model_name='USB-C')['asset_model']
    create_stock_item(test_client, adapter['id'], quantity=0)
    loan = create_loan(test_client, employee['id'])
    test_client.post(f"/api/loans/{loan['id']}/lines", json={'asset_item_id': first['id']})
    return employee, loan


def test_dashboard_stats(manager_client):
    _inventory(manager_client)

    stats = manager_client.get('/api/dashboard/stats').get_json()['data']
    assert stats == {
        'total_employees': 1,
        'total_assets': 2,
        'available_assets': 1,
        'loaned_assets': 1,
        'active_loans': 1,
        'low_stock_items': 1,
        'out_of_stock_items': 1,
    }


def test_dashboard_overview(reader_client, manager_client):
    _, loan = _inventory(manager_client)

    data = reader_client.get('/api/dashboard').get_json()['data']
    assert data['stats']['active_loans'] == 1
    assert [item['id'] for item in data['recent_loans']] == [loan['id']]
    assert len(data['low_stock']) == 2

    data = reader_client.get('/api/dashboard/low-stock?threshold=0').get_json()['data']
    assert len(data) == 1
    assert data[0]['asset_model']['model_name'] == 'USB-C'
    assert len(reader_client.get('/api/dashboard/recent-loans?limit=500').get_json()['data']) == 1


def test_dashboard_requires_login(client):
    response = client.get('/api/dashboard')
    assert response.status_code == 401


def test_refresh_admin_only(admin_client, manager_client):
    assert manager_client.post('/api/dashboard/refresh').status_code == 403
    response = admin_client.post('/api/dashboard/refresh')
    assert response.status_code == 200
    assert response.get_json()['data']['total_employees'] == 0


def test_global_search(manager_client):
    _inventory(manager_client)

    data = manager_client.get('/api/search?q=belkin').get_json()['data']
    assert data['employees'] == []
    assert {m['model_name'] for m in data['asset_models']} == {'HDMI 2m', 'USB-C'}
    assert len(data['stock_items']) == 2

    data = manager_client.get('/api/search?q=dupont').get_json()['data']
    assert data['employees'][0]['last_name'] == 'Dupont'

    data = manager_client.get('/api/search?q=kb-00&limit=1').get_json()['data']
    assert len(data['asset_items']) == 1
    assert data['asset_items'][0]['asset_model']['brand'] == 'Logitech'


def test_global_search_query_too_short(manager_client):
    response = manager_client.get('/api/search?q=a')
    assert response.status_code == 400
    assert response.get_json()['error'] == 'La recherche doit contenir au moins 2 caractères'
    assert manager_client.get('/api/search').status_code == 400


def test_autocomplete(manager_client):
    _inventory(manager_client)

    assert manager_client.get('/api/search/autocomplete/employees?q=j').get_json()['data'] == []
    data = manager_client.get('/api/search/autocomplete/employees?q=jea').get_json()['data']
    assert data[0]['email'] == 'jean.dupont@example.com'

    data = manager_client.get('/api/search/autocomplete/asset-items?q=KB').get_json()['data']
    assert [item['asset_tag'] for item in data] == ['KB-002']
    data = manager_client.get('/api/search/autocomplete/asset-items?q=KB&available_only=false').get_json()['data']
    assert [item['asset_tag'] for item in data] == ['KB-001', 'KB-002']

    data = manager_client.get('/api/search/autocomplete/asset-models?q=logi').get_json()['data']
    assert data[0]['model_name'] == 'K120'
