"""
BOOTSTRAP POLICY TESTS
Covers the resolve-or-create helpers used by product and supplier creation,
asserting which branch (found / created / rejected) fired, and the seeding
routines exposed over HTTP and the Flask CLI.
"""

import pytest

from supplychain_admin import close_db, create_app, db
from supplychain_admin.bootstrap import (
    ResolveStatus,
    resolve_category,
    resolve_user,
    seed_categories,
    slugify,
)
from supplychain_admin.models import Category, User


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


def test_resolve_user_creates_admin_once(app):
    first = resolve_user(None)
    assert first.status is ResolveStatus.CREATED
    assert first.entity.email == 'admin@example.com'
    assert first.entity.role == 'ADMIN'

    second = resolve_user('default-user')
    assert second.status is ResolveStatus.FOUND
    assert second.entity.id == first.entity.id
    assert User.query.count() == 1


def test_resolve_user_prefers_given_id(app):
    user = User(name='Clerk', email='clerk@acme-supplies.com', role='USER')
    db.session.add(user)
    db.session.commit()

    result = resolve_user(user.id)
    assert result.status is ResolveStatus.FOUND
    assert result.entity is user

    # String ids are accepted as long as they name an existing row
    assert resolve_user(str(user.id)).entity is user


@pytest.mark.parametrize('user_id', [10 ** 20, -(10 ** 20), str(10 ** 20)])
def test_resolve_user_with_oversized_id_falls_back_to_admin(app, user_id):
    result = resolve_user(user_id)
    assert result.status is ResolveStatus.CREATED
    assert result.entity.email == 'admin@example.com'


def test_resolve_user_honours_configured_admin(app):
    app.config['ADMIN_EMAIL'] = 'ops@acme-supplies.com'
    result = resolve_user(None)
    assert result.status is ResolveStatus.CREATED
    assert result.entity.email == 'ops@acme-supplies.com'


def test_resolve_category_branches(app):
    created = resolve_category('home-office')
    assert created.status is ResolveStatus.CREATED
    assert created.entity.name == 'Home Office'
    assert created.entity.description == 'Home Office category'

    found = resolve_category('home-office')
    assert found.status is ResolveStatus.FOUND
    assert found.entity is created.entity

    rejected = resolve_category('garden')
    assert rejected.status is ResolveStatus.REJECTED
    assert not rejected.ok
    assert rejected.entity is None
    assert 'Category not found' in rejected.reason
    assert Category.query.count() == 1


def test_resolve_category_reuses_row_with_same_name(app):
    # Seeded under a different id; the on-demand slug must not clash with it
    db.session.add(Category(id='cat-1', name='Clothing'))
    db.session.commit()

    result = resolve_category('clothing')
    assert result.status is ResolveStatus.FOUND
    assert result.entity.id == 'cat-1'


@pytest.mark.parametrize('name, slug', [
    ('Electronics', 'electronics'),
    ('Home Office', 'home-office'),
    ('Food & Beverages', 'food-beverages'),
    ('  Spare  Parts ', 'spare-parts'),
])
def test_slugify(name, slug):
    assert slugify(name) == slug


def test_seed_categories_only_on_empty_table(app):
    result = seed_categories()
    assert result['seeded'] is True
    assert Category.query.count() == 5
    assert db.session.get(Category, 'food-beverages').name == 'Food & Beverages'

    again = seed_categories()
    assert again['seeded'] is False
    assert again['message'] == 'Database already has 5 categories.'


def test_seed_endpoints(client):
    resp = client.post('/api/seed/users')
    assert resp.status_code == 201
    assert resp.get_json()['user']['email'] == 'admin@example.com'

    resp = client.post('/api/seed/users')
    assert resp.status_code == 200
    assert resp.get_json()['seeded'] is False

    resp = client.post('/api/seed/categories')
    assert resp.status_code == 201
    assert len(resp.get_json()['categories']) == 5


def test_seed_cli_commands(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed-categories'])
    assert 'Successfully seeded 5 categories.' in result.output

    result = runner.invoke(args=['seed-users'])
    assert 'Successfully created default user' in result.output
    assert User.query.count() == 1
