"""
Employees: listing, CRUD, bulk import and deletion rules
"""

from loan_inventory import db
from loan_inventory.data.core.loan_info.loan import Loan
from loan_inventory.test.conftest import TINY_PNG, create_employee, create_loan


def test_reader_can_list_but_not_write(reader_client, manager_client):
    create_employee(manager_client)
    response = reader_client.get('/api/employees')
    assert response.status_code == 200
    assert response.get_json()['data']['pagination']['total_items'] == 1

    response = reader_client.post('/api/employees', json={'first_name': 'A', 'last_name': 'B'})
    assert response.status_code == 403


def test_list_filters_and_order(manager_client):
    create_employee(manager_client, first_name='Zoé', last_name='Martin', email='zoe@example.com', dept='RH')
    create_employee(manager_client, first_name='Anne', last_name='Martin', email='anne@example.com', dept='IT')
    create_employee(manager_client, first_name='Paul', last_name='Bernard', email='paul@example.com', dept='IT')

    items = manager_client.get('/api/employees').get_json()['data']['items']
    assert [(e['last_name'], e['first_name']) for e in items] == [
        ('Bernard', 'Paul'), ('Martin', 'Anne'), ('Martin', 'Zoé'),
    ]

    items = manager_client.get('/api/employees?dept=IT').get_json()['data']['items']
    assert {e['first_name'] for e in items} == {'Anne', 'Paul'}

    items = manager_client.get('/api/employees?search=mart').get_json()['data']['items']
    assert len(items) == 2


def test_pagination(manager_client):
    for index in range(5):
        create_employee(manager_client, last_name=f'Nom{index}', email=f'e{index}@example.com')
    data = manager_client.get('/api/employees?page=2&page_size=2').get_json()['data']
    assert len(data['items']) == 2
    assert data['pagination'] == {
        'page': 2, 'page_size': 2, 'total_items': 5, 'total_pages': 3,
        'has_next_page': True, 'has_previous_page': True,
    }

    data = manager_client.get('/api/employees?page_size=1000').get_json()['data']
    assert data['pagination']['page_size'] == 100


def test_get_employee_with_loans(manager_client):
    employee = create_employee(manager_client)
    create_loan(manager_client, employee['id'])
    data = manager_client.get(f"/api/employees/{employee['id']}").get_json()['data']
    assert len(data['loans']) == 1

    response = manager_client.get('/api/employees/9999')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Employé non trouvé'


def test_duplicate_email(manager_client):
    create_employee(manager_client, email='same@example.com')
    response = manager_client.post('/api/employees', json={
        'first_name': 'Autre', 'last_name': 'Personne', 'email': 'SAME@example.com',
    })
    assert response.status_code == 409
    assert response.get_json()['error'] == 'Un employé avec cet email existe déjà'


def test_update_employee(manager_client):
    employee = create_employee(manager_client)
    other = create_employee(manager_client, email='other@example.com')
    response = manager_client.patch(f"/api/employees/{employee['id']}", json={'dept': 'Finance'})
    assert response.status_code == 200
    assert response.get_json()['data']['dept'] == 'Finance'

    response = manager_client.patch(f"/api/employees/{employee['id']}", json={'email': other['email']})
    assert response.status_code == 409


def test_bulk_create(manager_client):
    create_employee(manager_client, email='existing@example.com')
    response = manager_client.post('/api/employees/bulk', json={'employees': [
        {'first_name': 'A', 'last_name': 'Un', 'email': 'a@example.com'},
        {'first_name': 'B', 'last_name': 'Deux', 'email': 'A@example.com'},
        {'first_name': 'C', 'last_name': 'Trois', 'email': 'existing@example.com'},
        {'first_name': '', 'last_name': 'Quatre'},
        {'first_name': 'E', 'last_name': 'Cinq'},
    ]})
    assert response.status_code == 201
    result = response.get_json()['data']
    assert result['created'] == 2
    assert result['skipped'] == 2
    assert len(result['errors']) == 1
    assert result['errors'][0]['row'] == 4

    response = manager_client.post('/api/employees/bulk', json={'employees': []})
    assert response.status_code == 400


def test_delete_refused_with_loans(app, manager_client):
    employee = create_employee(manager_client)
    create_loan(manager_client, employee['id'])
    response = manager_client.delete(f"/api/employees/{employee['id']}")
    assert response.status_code == 400
    assert response.get_json()['error'] == "Impossible de supprimer cet employé : il a 1 prêt(s) actif(s)"


def _closed_loan(test_client, employee_id):
    loan = create_loan(test_client, employee_id)
    test_client.post(f"/api/loans/{loan['id']}/pickup-signature", json={'signature': TINY_PNG})
    response = test_client.patch(f"/api/loans/{loan['id']}/close")
    assert response.status_code == 200, response.get_json()
    return loan


def test_delete_refused_with_open_and_closed_loans(manager_client):
    employee = create_employee(manager_client)
    create_loan(manager_client, employee['id'])
    _closed_loan(manager_client, employee['id'])
    _closed_loan(manager_client, employee['id'])

    response = manager_client.delete(f"/api/employees/{employee['id']}")
    assert response.status_code == 400
    assert response.get_json()['error'] == (
        "Impossible de supprimer cet employé : il a 1 prêt(s) actif(s) et 2 prêt(s) fermé(s) dans l'historique"
    )


def test_delete_refused_with_closed_loans_only(manager_client):
    employee = create_employee(manager_client)
    _closed_loan(manager_client, employee['id'])

    response = manager_client.delete(f"/api/employees/{employee['id']}")
    assert response.status_code == 400
    assert response.get_json()['error'] == "Impossible de supprimer cet employé : il a 1 prêt(s) dans l'historique"
    assert manager_client.get(f"/api/employees/{employee['id']}").status_code == 200


def test_delete_purges_soft_deleted_loans(app, manager_client):
    employee = create_employee(manager_client)
    loan = create_loan(manager_client, employee['id'])
    assert manager_client.delete(f"/api/loans/{loan['id']}").status_code == 200

    response = manager_client.delete(f"/api/employees/{employee['id']}")
    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(Loan, loan['id']) is None
