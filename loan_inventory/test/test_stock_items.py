"""
Consumable stock: quantity rules, adjustments, low stock filter and delete guard
"""

from loan_inventory.test.conftest import create_asset_model, create_employee, create_loan, create_stock_item


def _cable_model(test_client, model_name='HDMI 2m'):
    return create_asset_model(test_client, type='Câble', brand='Generic', model_name=model_name)['asset_model']


def test_create_and_get(manager_client, reader_client):
    model = _cable_model(manager_client)
    stock = create_stock_item(manager_client, model['id'], quantity=10)
    assert stock['available'] == 10
    assert stock['loaned'] == 0

    data = reader_client.get(f"/api/stock-items/{stock['id']}").get_json()['data']
    assert data['asset_model']['model_name'] == 'HDMI 2m'
    response = reader_client.get('/api/stock-items/9999')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Article de stock non trouvé'


def test_create_negative_quantity(manager_client):
    model = _cable_model(manager_client)
    response = manager_client.post('/api/stock-items', json={'asset_model_id': model['id'], 'quantity': -1})
    assert response.status_code == 400


def test_adjust_quantity(manager_client):
    model = _cable_model(manager_client)
    stock = create_stock_item(manager_client, model['id'], quantity=5)

    response = manager_client.patch(f"/api/stock-items/{stock['id']}/quantity", json={'delta': 3})
    assert response.get_json()['data']['quantity'] == 8

    response = manager_client.patch(f"/api/stock-items/{stock['id']}/quantity", json={'delta': -10})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'La quantité ne peut pas être négative'


def test_quantity_never_below_loaned(manager_client):
    model = _cable_model(manager_client)
    stock = create_stock_item(manager_client, model['id'], quantity=5)
    employee = create_employee(manager_client)
    loan = create_loan(manager_client, employee['id'])
    manager_client.post(f"/api/loans/{loan['id']}/lines", json={'stock_item_id': stock['id'], 'quantity': 4})

    response = manager_client.patch(f"/api/stock-items/{stock['id']}", json={'quantity': 3})
    assert response.status_code == 400
    response = manager_client.patch(f"/api/stock-items/{stock['id']}/quantity", json={'delta': -2})
    assert response.status_code == 400

    response = manager_client.delete(f"/api/stock-items/{stock['id']}")
    assert response.status_code == 400


def test_low_stock_filter(manager_client):
    low = create_stock_item(manager_client, _cable_model(manager_client)['id'], quantity=3)
    create_stock_item(manager_client, _cable_model(manager_client, 'USB-C 1m')['id'], quantity=50)

    data = manager_client.get('/api/stock-items?low_stock=true').get_json()['data']
    assert [item['id'] for item in data['items']] == [low['id']]
    data = manager_client.get('/api/stock-items?search=usb').get_json()['data']
    assert len(data['items']) == 1


def test_delete_with_history(manager_client):
    model = _cable_model(manager_client)
    stock = create_stock_item(manager_client, model['id'], quantity=5)
    employee = create_employee(manager_client)
    loan = create_loan(manager_client, employee['id'])
    manager_client.post(f"/api/loans/{loan['id']}/lines", json={'stock_item_id': stock['id'], 'quantity': 2})
    manager_client.delete(f"/api/loans/{loan['id']}")

    assert manager_client.delete(f"/api/stock-items/{stock['id']}").status_code == 200
