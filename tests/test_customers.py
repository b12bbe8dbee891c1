import math

import pytest

from supplychain_admin import close_db, create_app, db
from supplychain_admin.models import Customer


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    })
    with app.app_context():
        db.create_all()
        yield app
    close_db(app)


@pytest.fixture
def client(app):
    return app.test_client()


def add_customers(n):
    db.session.add_all(
        Customer(name=f'Customer {i:02d}', email=f'customer{i:02d}@shop-mail.com') for i in range(n)
    )
    db.session.commit()


def test_create_customer(client):
    resp = client.post('/api/customers', json={
        'name': 'Grace Hopper',
        'email': 'grace@navy-mail.com',
        'phone': '555-0100',
        'address': '1 Harbor Rd',
    })
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['name'] == 'Grace Hopper'
    assert body['email'] == 'grace@navy-mail.com'
    assert body['id'] > 0


def test_create_customer_from_form_fields(client):
    resp = client.post('/api/customers', json={
        'firstName': 'Ada',
        'lastName': 'Lovelace',
        'email': '',
        'street': '12 St James Sq',
    })
    assert resp.status_code == 201
    body = resp.get_json()
    assert body['name'] == 'Ada Lovelace'
    assert body['address'] == '12 St James Sq'
    assert body['email'] is None


def test_create_customer_validation(client):
    resp = client.post('/api/customers', json={'name': 'Bad Email', 'email': 'not-an-email'})
    assert resp.status_code == 400
    assert resp.get_json()['details'][0]['field'] == 'email'

    resp = client.post('/api/customers', json={'email': 'someone@shop-mail.com'})
    assert resp.status_code == 400
    assert Customer.query.count() == 0


@pytest.mark.parametrize('n', [0, 1, 10, 23])
def test_pages_cover_every_customer_once(client, n):
    """
    Walking every page with limit=10 visits each customer exactly once
    and the page count is ceil(n / 10).
    """
    add_customers(n)

    first = client.get('/api/customers?page=1&limit=10&search=').get_json()
    assert first['pagination']['total'] == n
    assert first['pagination']['pages'] == math.ceil(n / 10)

    seen = []
    for page in range(1, first['pagination']['pages'] + 1):
        body = client.get(f'/api/customers?page={page}&limit=10&search=').get_json()
        assert body['pagination']['page'] == page
        seen.extend(c['id'] for c in body['items'])

    assert len(seen) == n
    assert len(set(seen)) == n
    assert set(seen) == {c.id for c in Customer.query.all()}


def test_page_past_the_end_is_empty(client):
    add_customers(3)
    body = client.get('/api/customers?page=5&limit=2').get_json()
    assert body['items'] == []
    assert body['pagination'] == {'total': 3, 'page': 5, 'limit': 2, 'pages': 2}


def test_invalid_paging_arguments(client):
    assert client.get('/api/customers?page=0').status_code == 400
    assert client.get('/api/customers?limit=0').status_code == 400
    # Non-numeric values fall back to the defaults
    body = client.get('/api/customers?page=abc&limit=xyz').get_json()
    assert body['pagination']['page'] == 1
    assert body['pagination']['limit'] == 10
    # Oversized limits are capped
    assert client.get('/api/customers?limit=5000').get_json()['pagination']['limit'] == 100


def test_page_beyond_storable_offset_is_rejected(client):
    add_customers(2)
    resp = client.get(f'/api/customers?page={10 ** 20}')
    assert resp.status_code == 400
    assert resp.get_json()['details'][0]['field'] == 'page'

    # Far past the end but still storable: just an empty page
    body = client.get(f'/api/customers?page={10 ** 12}').get_json()
    assert body['items'] == []
    assert body['pagination']['total'] == 2


def test_search_is_case_insensitive_substring(client):
    db.session.add_all([
        Customer(name='Alice Brown', email='alice@shop-mail.com'),
        Customer(name='Bob Stone', email='bob@ALICE-corp.com'),
        Customer(name='Carol 100% Real', email='carol@shop-mail.com'),
    ])
    db.session.commit()

    names = {c['name'] for c in client.get('/api/customers?search=aLiCe').get_json()['items']}
    assert names == {'Alice Brown', 'Bob Stone'}

    # Wildcards are matched literally
    names = {c['name'] for c in client.get('/api/customers?search=100%25').get_json()['items']}
    assert names == {'Carol 100% Real'}
    assert client.get('/api/customers?search=_').get_json()['items'] == []


def test_update_and_delete_customer(client):
    cid = client.post('/api/customers', json={'name': 'Temp'}).get_json()['id']

    resp = client.put(f'/api/customers/{cid}', json={'phone': '555-0199'})
    assert resp.status_code == 200
    assert resp.get_json()['phone'] == '555-0199'
    assert resp.get_json()['name'] == 'Temp'

    assert client.get(f'/api/customers/{cid}').get_json()['phone'] == '555-0199'
    assert client.delete(f'/api/customers/{cid}').status_code == 204
    assert client.get(f'/api/customers/{cid}').status_code == 404
    assert client.put(f'/api/customers/{cid}', json={'name': 'Ghost'}).status_code == 404
    assert client.delete(f'/api/customers/{cid}').status_code == 404


def test_customer_with_orders_cannot_be_deleted(client):
    cid = client.post('/api/customers', json={'name': 'Loyal'}).get_json()['id']
    client.post('/api/orders', json={'customerId': cid, 'total': 10})

    resp = client.delete(f'/api/customers/{cid}')
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Cannot delete customer because it is referenced by other records'
    assert client.get(f'/api/customers/{cid}').status_code == 200
