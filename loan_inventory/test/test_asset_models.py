"""
Asset models: automatic unit creation, updates with quantity, cascading deletes
"""

from datetime import date
from loan_inventory.test.conftest import create_asset_model, create_employee, create_loan


def test_create_without_quantity(manager_client):
    result = create_asset_model(manager_client)
    assert result['asset_model']['brand'] == 'Logitech'
    assert result['created'] == {'asset_items': [], 'stock_item': None}


def test_create_equipment_with_quantity_generates_tags(manager_client):
    result = create_asset_model(manager_client, quantity=3)
    tags = [item['asset_tag'] for item in result['created']['asset_items']]
    assert tags == ['KB-001', 'KB-002', 'KB-003']
    assert all(item['status'] == 'EN_STOCK' for item in result['created']['asset_items'])
    assert result['created']['stock_item'] is None
    assert result['asset_model']['available_count'] == 3


def test_create_consumable_with_quantity_creates_stock(manager_client):
    result = create_asset_model(manager_client, type='Câble', brand='Generic', model_name='HDMI', quantity=25)
    assert result['created']['asset_items'] == []
    assert result['created']['stock_item']['quantity'] == 25
    assert result['asset_model']['stock'] == {'quantity': 25, 'loaned': 0, 'available': 25}


def test_create_unknown_type(manager_client):
    response = manager_client.post('/api/asset-models', json={
        'type': 'Inconnu', 'brand': 'X', 'model_name': 'Y',
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == "Type d'équipement inconnu : Inconnu"


def test_update_quantity_only_adds_items(manager_client):
    model = create_asset_model(manager_client, quantity=2)['asset_model']
    response = manager_client.patch(f"/api/asset-models/{model['id']}", json={'quantity': 2})
    assert response.status_code == 200
    result = response.get_json()['data']
    assert [item['asset_tag'] for item in result['created']['asset_items']] == ['KB-003', 'KB-004']
    expected_note = f"Ajouté le {date.today().strftime('%d/%m/%Y')}"
    assert all(item['notes'] == expected_note for item in result['created']['asset_items'])
    assert result['asset_model']['brand'] == 'Logitech'
    assert result['asset_model']['item_count'] == 4


def test_update_consumable_quantity(manager_client):
    model = create_asset_model(manager_client, type='Adaptateur', brand='Anker', model_name='USB-C')['asset_model']
    response = manager_client.patch(f"/api/asset-models/{model['id']}", json={'quantity': 5})
    stock = response.get_json()['data']['created']['stock_item']
    assert stock['quantity'] == 5
    assert stock['notes'].startswith('Créé le')

    response = manager_client.patch(f"/api/asset-models/{model['id']}", json={'quantity': 3})
    stock = response.get_json()['data']['created']['stock_item']
    assert stock['quantity'] == 8
    assert stock['notes'] == 'Stock augmenté de 3'


def test_list_with_filters(reader_client, manager_client):
    create_asset_model(manager_client, quantity=1)
    create_asset_model(manager_client, type='Écran', brand='LG', model_name='27UL500')
    data = reader_client.get('/api/asset-models?type=Écran').get_json()['data']
    assert [m['brand'] for m in data['items']] == ['LG']
    data = reader_client.get('/api/asset-models?search=logi').get_json()['data']
    assert data['items'][0]['available_count'] == 1


def test_get_with_items(manager_client):
    model = create_asset_model(manager_client, quantity=2)['asset_model']
    data = manager_client.get(f"/api/asset-models/{model['id']}").get_json()['data']
    assert len(data['items']) == 2
    response = manager_client.get('/api/asset-models/9999')
    assert response.status_code == 404
    assert response.get_json()['error'] == "Modèle d'équipement non trouvé"


def test_delete_cascades(manager_client):
    model = create_asset_model(manager_client, quantity=2)['asset_model']
    response = manager_client.delete(f"/api/asset-models/{model['id']}")
    assert response.status_code == 200
    assert response.get_json()['data']['asset_items_deleted'] == 2
    assert manager_client.get('/api/asset-items').get_json()['data']['pagination']['total_items'] == 0


def test_delete_refused_while_lent(manager_client):
    result = create_asset_model(manager_client, quantity=1)
    item = result['created']['asset_items'][0]
    employee = create_employee(manager_client)
    loan = create_loan(manager_client, employee['id'])
    manager_client.post(f"/api/loans/{loan['id']}/lines", json={'asset_item_id': item['id']})

    response = manager_client.delete(f"/api/asset-models/{result['asset_model']['id']}")
    assert response.status_code == 400
    assert '1 équipement(s)' in response.get_json()['error']


def test_batch_delete(admin_client, manager_client):
    first = create_asset_model(manager_client)['asset_model']
    second = create_asset_model(manager_client, model_name='K270')['asset_model']

    assert manager_client.post('/api/asset-models/batch-delete',
                               json={'ids': [first['id']]}).status_code == 403

    response = admin_client.post('/api/asset-models/batch-delete', json={'ids': []})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Au moins un modèle doit être sélectionné'
    response = admin_client.post('/api/asset-models/batch-delete', json={})
    assert response.get_json()['error'] == 'Au moins un modèle doit être sélectionné'

    response = admin_client.post('/api/asset-models/batch-delete', json={'ids': list(range(1, 102))})
    assert response.status_code == 400

    response = admin_client.post('/api/asset-models/batch-delete', json={'ids': [9998, 9999]})
    assert response.status_code == 404

    response = admin_client.post('/api/asset-models/batch-delete', json={'ids': [first['id'], second['id']]})
    assert response.status_code == 200
    assert response.get_json()['data']['message'] == '2 modèle(s) supprimé(s) avec succès'
