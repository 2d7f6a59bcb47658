"""
Equipment types: default list, admin-only writes, rename propagation, delete guard
"""

from loan_inventory.data.core.constants import DEFAULT_EQUIPMENT_TYPES
from loan_inventory.test.conftest import create_asset_model


def test_default_types_listed(reader_client):
    response = reader_client.get('/api/equipment-types')
    assert response.status_code == 200
    names = [item['name'] for item in response.get_json()['data']]
    assert sorted(names) == sorted(DEFAULT_EQUIPMENT_TYPES)
    assert all(item['model_count'] == 0 for item in response.get_json()['data'])


def test_only_admin_writes(manager_client):
    response = manager_client.post('/api/equipment-types', json={'name': 'Tablette'})
    assert response.status_code == 403


def test_create_and_validate(admin_client):
    response = admin_client.post('/api/equipment-types', json={'name': '  Tablette  '})
    assert response.status_code == 201
    assert response.get_json()['data']['name'] == 'Tablette'

    response = admin_client.post('/api/equipment-types', json={'name': 'Tablette'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Un type avec ce nom existe déjà'

    assert admin_client.post('/api/equipment-types', json={'name': 'X'}).status_code == 400
    assert admin_client.post('/api/equipment-types', json={'name': 'X' * 51}).status_code == 400


def test_rename_propagates_to_models(admin_client):
    created = admin_client.post('/api/equipment-types', json={'name': 'Tablette'}).get_json()['data']
    model = create_asset_model(admin_client, type='Tablette', brand='Apple', model_name='iPad')

    response = admin_client.patch(f"/api/equipment-types/{created['id']}", json={'name': 'Tablette tactile'})
    assert response.status_code == 200

    data = admin_client.get(f"/api/asset-models/{model['asset_model']['id']}").get_json()['data']
    assert data['type'] == 'Tablette tactile'


def test_delete_refused_when_used(admin_client):
    created = admin_client.post('/api/equipment-types', json={'name': 'Tablette'}).get_json()['data']
    create_asset_model(admin_client, type='Tablette', brand='Apple', model_name='iPad')

    response = admin_client.delete(f"/api/equipment-types/{created['id']}")
    assert response.status_code == 400
    assert response.get_json()['error'] == \
        "Impossible de supprimer ce type : il est utilisé par 1 modèle(s) d'équipement"


def test_delete_unused(admin_client):
    created = admin_client.post('/api/equipment-types', json={'name': 'Tablette'}).get_json()['data']
    assert admin_client.delete(f"/api/equipment-types/{created['id']}").status_code == 200
    assert admin_client.get(f"/api/equipment-types/{created['id']}").status_code == 404
