import pytest

from supplychain_admin import close_db, create_app, db


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


def test_create_category_derives_slug(client):
    resp = client.post('/api/categories', json={'name': 'Garden Tools', 'description': 'Outdoor'})
    assert resp.status_code == 201
    assert resp.get_json() == {'id': 'garden-tools', 'name': 'Garden Tools', 'description': 'Outdoor'}

    resp = client.post('/api/categories', json={'id': 'misc', 'name': 'Miscellaneous'})
    assert resp.status_code == 201
    assert resp.get_json()['id'] == 'misc'

    body = client.get('/api/categories').get_json()
    assert [c['name'] for c in body['items']] == ['Garden Tools', 'Miscellaneous']


def test_category_uniqueness(client):
    client.post('/api/categories', json={'name': 'Garden Tools'})

    resp = client.post('/api/categories', json={'name': 'Garden Tools', 'id': 'other'})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Category name already exists.'

    resp = client.post('/api/categories', json={'name': 'Different', 'id': 'garden-tools'})
    assert resp.status_code == 400

    assert client.post('/api/categories', json={'name': '!!!'}).status_code == 400


def test_created_category_can_be_used_by_products(client):
    client.post('/api/categories', json={'name': 'Garden Tools'})
    resp = client.post('/api/products', json={
        'name': 'Rake', 'sku': 'RK-1', 'price': 15, 'cost': 6, 'categoryId': 'garden-tools',
    })
    assert resp.status_code == 201
    assert resp.get_json()['category']['name'] == 'Garden Tools'


def test_update_and_delete_category(client):
    client.post('/api/categories', json={'name': 'Garden Tools'})
    client.post('/api/categories', json={'name': 'Kitchen'})

    resp = client.put('/api/categories/garden-tools', json={'description': 'Everything outdoors'})
    assert resp.status_code == 200
    assert resp.get_json()['description'] == 'Everything outdoors'

    resp = client.put('/api/categories/garden-tools', json={'name': 'Kitchen'})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Another category with that name already exists.'

    assert client.delete('/api/categories/kitchen').status_code == 204
    assert client.get('/api/categories/kitchen').status_code == 404
    assert client.put('/api/categories/kitchen', json={'name': 'Back'}).status_code == 404


def test_category_in_use_cannot_be_deleted(client):
    client.post('/api/products', json={
        'name': 'Shirt', 'sku': 'SH-1', 'price': 20, 'cost': 8, 'categoryId': 'clothing',
    })
    resp = client.delete('/api/categories/clothing')
    assert resp.status_code == 400
    assert client.get('/api/categories/clothing').status_code == 200
