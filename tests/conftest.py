"""Pytest configuration and fixtures."""

import pytest
from flask_jwt_extended import create_access_token

from erp_api import create_app, db
from erp_api.models import Category, Customer, User


@pytest.fixture
def app(tmp_path):
    """Application on an in-memory database, with uploads under a temp dir."""
    app = create_app('config.TestingConfig')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Factory for persisted users; the password is always 'secret123'."""
    counter = {'n': 0}

    def _make(role='admin', **fields):
        counter['n'] += 1
        user = User(
            first_name=fields.pop('first_name', 'Test'),
            last_name=fields.pop('last_name', role.title()),
            email=fields.pop('email', f"{role}{counter['n']}@example.com"),
            role=role,
            **fields
        )
        user.set_password('secret123')
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def headers_for(app):
    def _headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
        return {'Authorization': f"Bearer {token}"}
    return _headers


@pytest.fixture
def admin_user(make_user):
    return make_user('admin', first_name='Ada', last_name='Admin', email='admin@example.com')


@pytest.fixture
def auth_headers(admin_user, headers_for):
    return headers_for(admin_user)


@pytest.fixture
def category(app):
    category = Category(name='Spare parts')
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def customer(app):
    customer = Customer(first_name='Cara', last_name='Customer', email='cara@example.com',
                        customer_code='CUST000001')
    db.session.add(customer)
    db.session.commit()
    return customer
