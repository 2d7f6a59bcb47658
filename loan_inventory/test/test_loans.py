"""
Loan lifecycle: lines, signatures, close, soft delete and batch delete
"""

import io
import base64
from loan_inventory.test.conftest import (
    TINY_PNG, create_asset_item, create_asset_model, create_employee, create_loan, create_stock_item
)


def _setup(test_client):
    """An employee, one asset item and a stock item of 10 units"""
    employee = create_employee(test_client)
    model = create_asset_model(test_client)['asset_model']
    item = create_asset_item(test_client, model['id'])
    cable = create_asset_model(test_client, type='Câble', brand='Generic', model_name='HDMI')['asset_model']
    stock = create_stock_item(test_client, cable['id'], quantity=10)
    return employee, item, stock


def _sign(test_client, loan_id, kind='pickup'):
    return test_client.post(f'/api/loans/{loan_id}/{kind}-signature', json={'signature': TINY_PNG})


def test_create_loan(manager_client, reader_client):
    employee = create_employee(manager_client)
    loan = create_loan(manager_client, employee['id'])
    assert loan['status'] == 'OPEN'
    assert loan['employee']['id'] == employee['id']
    assert loan['created_by']['email'] == 'gestion@example.com'

    response = manager_client.post('/api/loans', json={'employee_id': 9999})
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Employé non trouvé'

    assert reader_client.post('/api/loans', json={'employee_id': employee['id']}).status_code == 403


def test_add_lines_reserve_equipment(manager_client):
    employee, item, stock = _setup(manager_client)
    loan = create_loan(manager_client, employee['id'])

    response = manager_client.post(f"/api/loans/{loan['id']}/lines", json={'asset_item_id': item['id']})
    assert response.status_code == 201
    response = manager_client.post(f"/api/loans/{loan['id']}/lines",
                                   json={'stock_item_id': stock['id'], 'quantity': 4})
    data = response.get_json()['data']
    assert len(data['lines']) == 2

    assert manager_client.get(f"/api/asset-items/{item['id']}").get_json()['data']['status'] == 'PRETE'
    assert manager_client.get(f"/api/stock-items/{stock['id']}").get_json()['data']['loaned'] == 4


def test_add_line_rules(manager_client):
    employee, item, stock = _setup(manager_client)
    loan = create_loan(manager_client, employee['id'])
    url = f"/api/loans/{loan['id']}/lines"

    assert manager_client.post(url, json={}).status_code == 400
    assert manager_client.post(url, json={'asset_item_id': item['id'],
                                          'stock_item_id': stock['id']}).status_code == 400

    manager_client.post(url, json={'asset_item_id': item['id']})
    response = manager_client.post(url, json={'asset_item_id': item['id']})
    assert response.status_code == 400
    assert response.get_json()['error'] == "Cet article n'est pas disponible"

    response = manager_client.post(url, json={'stock_item_id': stock['id'], 'quantity': 11})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Quantité insuffisante en stock'
    assert manager_client.post(url, json={'stock_item_id': stock['id'], 'quantity': 0}).status_code == 400

    response = manager_client.post(url, json={'stock_item_id': stock['id']})
    assert response.get_json()['data']['lines'][-1]['quantity'] == 1


def test_remove_line_releases_equipment(manager_client):
    employee, item, stock = _setup(manager_client)
    loan = create_loan(manager_client, employee['id'])
    other = create_loan(manager_client, employee['id'])
    lines = manager_client.post(f"/api/loans/{loan['id']}/lines",
                                json={'stock_item_id': stock['id'], 'quantity': 3}).get_json()['data']['lines']

    response = manager_client.delete(f"/api/loans/{other['id']}/lines/{lines[0]['id']}")
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Ligne de prêt non trouvée'

    response = manager_client.delete(f"/api/loans/{loan['id']}/lines/{lines[0]['id']}")
    assert response.status_code == 200
    assert manager_client.get(f"/api/stock-items/{stock['id']}").get_json()['data']['loaned'] == 0


def test_signatures_and_close(app, manager_client):
    employee, item, stock = _setup(manager_client)
    loan = create_loan(manager_client, employee['id'])
    manager_client.post(f"/api/loans/{loan['id']}/lines", json={'asset_item_id': item['id']})
    manager_client.post(f"/api/loans/{loan['id']}/lines", json={'stock_item_id': stock['id'], 'quantity': 2})

    response = manager_client.patch(f"/api/loans/{loan['id']}/close")
    assert response.status_code == 400
    assert response.get_json()['error'] == 'La signature de retrait est requise avant de fermer le prêt'

    response = _sign(manager_client, loan['id'], 'return')
    assert response.status_code == 400

    response = _sign(manager_client, loan['id'])
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['pickup_signature_url'].startswith('/uploads/signatures/')
    assert data['pickup_signature_url'].endswith('-signature.png')
    assert data['pickup_signed_at']

    assert manager_client.get(data['pickup_signature_url']).status_code == 200
    assert app.test_client().get(data['pickup_signature_url']).status_code == 401

    assert _sign(manager_client, loan['id'], 'return').status_code == 200

    response = manager_client.patch(f"/api/loans/{loan['id']}/close")
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['status'] == 'CLOSED'
    assert data['closed_at']
    assert manager_client.get(f"/api/asset-items/{item['id']}").get_json()['data']['status'] == 'EN_STOCK'
    assert manager_client.get(f"/api/stock-items/{stock['id']}").get_json()['data']['loaned'] == 0

    response = manager_client.patch(f"/api/loans/{loan['id']}/close")
    assert response.get_json()['error'] == 'Ce prêt est déjà fermé'
    response = manager_client.post(f"/api/loans/{loan['id']}/lines", json={'asset_item_id': item['id']})
    assert response.status_code == 400
    assert _sign(manager_client, loan['id']).status_code == 400


def test_signature_file_upload_and_validation(manager_client):
    employee = create_employee(manager_client)
    loan = create_loan(manager_client, employee['id'])
    png = base64.b64decode(TINY_PNG.split(',', 1)[1])

    response = manager_client.post(
        f"/api/loans/{loan['id']}/pickup-signature",
        data={'file': (io.BytesIO(png), 'signature.png', 'image/png')},
        content_type='multipart/form-data',
    )
    assert response.status_code == 200

    response = manager_client.post(
        f"/api/loans/{loan['id']}/pickup-signature",
        data={'file': (io.BytesIO(b'GIF89a...'), 'signature.gif', 'image/gif')},
        content_type='multipart/form-data',
    )
    assert response.status_code == 400

    response = manager_client.post(f"/api/loans/{loan['id']}/pickup-signature", json={})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Aucune signature fournie'

    response = manager_client.post(f"/api/loans/{loan['id']}/pickup-signature",
                                   json={'signature': 'data:image/png;base64,R0lGODlhAQABAAAAACw='})
    assert response.status_code == 400


def test_delete_signature_admin_only(admin_client, manager_client):
    employee = create_employee(manager_client)
    loan = create_loan(manager_client, employee['id'])
    url = _sign(manager_client, loan['id']).get_json()['data']['pickup_signature_url']

    assert manager_client.delete(f"/api/loans/{loan['id']}/pickup-signature").status_code == 403
    response = admin_client.delete(f"/api/loans/{loan['id']}/pickup-signature")
    assert response.status_code == 200
    assert response.get_json()['data']['pickup_signature_url'] is None
    assert admin_client.get(url).status_code == 404


def test_soft_delete_open_loan_restores_equipment(manager_client):
    employee, item, stock = _setup(manager_client)
    loan = create_loan(manager_client, employee['id'])
    manager_client.post(f"/api/loans/{loan['id']}/lines", json={'asset_item_id': item['id']})
    manager_client.post(f"/api/loans/{loan['id']}/lines", json={'stock_item_id': stock['id'], 'quantity': 5})

    response = manager_client.delete(f"/api/loans/{loan['id']}")
    assert response.status_code == 200
    assert response.get_json()['message'] == 'Prêt supprimé avec succès'

    assert manager_client.get(f"/api/asset-items/{item['id']}").get_json()['data']['status'] == 'EN_STOCK'
    assert manager_client.get(f"/api/stock-items/{stock['id']}").get_json()['data']['loaned'] == 0
    assert manager_client.get(f"/api/loans/{loan['id']}").status_code == 404
    assert manager_client.get('/api/loans').get_json()['data']['pagination']['total_items'] == 0

    response = manager_client.delete(f"/api/loans/{loan['id']}")
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Prêt déjà supprimé'


def test_deleted_loan_rejects_changes(admin_client, manager_client):
    employee, item, stock = _setup(manager_client)
    loan = create_loan(manager_client, employee['id'])
    line = manager_client.post(f"/api/loans/{loan['id']}/lines",
                               json={'stock_item_id': stock['id'], 'quantity': 1}).get_json()['data']['lines'][0]
    assert manager_client.delete(f"/api/loans/{loan['id']}").status_code == 200

    response = manager_client.patch(f"/api/loans/{loan['id']}/close")
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Impossible de fermer un prêt supprimé'

    response = _sign(manager_client, loan['id'])
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Impossible de signer un prêt supprimé'

    response = manager_client.post(f"/api/loans/{loan['id']}/lines", json={'asset_item_id': item['id']})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Ce prêt a été supprimé'

    response = manager_client.delete(f"/api/loans/{loan['id']}/lines/{line['id']}")
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Ce prêt a été supprimé'

    response = admin_client.delete(f"/api/loans/{loan['id']}/pickup-signature")
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Impossible de modifier un prêt supprimé'

    assert manager_client.get(f"/api/loans/{loan['id']}").status_code == 404
    assert manager_client.patch('/api/loans/9999/close').status_code == 404


def test_list_filters(manager_client):
    employee = create_employee(manager_client)
    other = create_employee(manager_client, email='other@example.com')
    create_loan(manager_client, employee['id'])
    latest = create_loan(manager_client, other['id'])

    data = manager_client.get('/api/loans').get_json()['data']
    assert data['items'][0]['id'] == latest['id']
    data = manager_client.get(f"/api/loans?employee_id={other['id']}").get_json()['data']
    assert [loan['id'] for loan in data['items']] == [latest['id']]
    assert manager_client.get('/api/loans?status=CLOSED').get_json()['data']['items'] == []
    assert manager_client.get('/api/loans?status=LOST').status_code == 400


def test_batch_delete(admin_client, manager_client):
    employee = create_employee(manager_client)
    first = create_loan(manager_client, employee['id'])
    second = create_loan(manager_client, employee['id'])

    assert manager_client.post('/api/loans/batch-delete', json={'ids': [first['id']]}).status_code == 403

    response = admin_client.post('/api/loans/batch-delete', json={'ids': []})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Au moins un prêt doit être sélectionné'
    response = admin_client.post('/api/loans/batch-delete', json={})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Au moins un prêt doit être sélectionné'
    assert admin_client.post('/api/loans/batch-delete', json={'ids': [9999]}).status_code == 404

    response = admin_client.post('/api/loans/batch-delete', json={'ids': [first['id'], second['id']]})
    assert response.status_code == 200
    assert response.get_json()['data'] == {
        'deleted_count': 2, 'message': '2 prêt(s) supprimé(s) avec succès',
    }
