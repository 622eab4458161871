import pytest

from khandeshwar_backend import create_app
from khandeshwar_backend.extensions import db as _db
from khandeshwar_backend.extensions import limiter
from khandeshwar_backend.models import User

PASSWORD = "secret123"
ROLES = {"admin": "Admin", "treasurer": "Treasurer", "viewer": "Viewer"}


@pytest.fixture
def app():
    app = create_app("khandeshwar_backend.config.TestingConfig")
    with app.app_context():
        limiter.reset()
        _db.create_all()
        for username, role in ROLES.items():
            user = User(username=username, email=f"{username}@example.com", role=role, status="Active")
            user.set_password(PASSWORD)
            _db.session.add(user)
        _db.session.commit()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email, password=PASSWORD):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]["token"]


@pytest.fixture
def headers(client):
    """``headers["admin"]`` etc. carry a bearer token for that role."""
    return {
        name: {"Authorization": f"Bearer {login(client, f'{name}@example.com')}"}
        for name in ROLES
    }


@pytest.fixture
def make_shop(client, headers):
    def _make(shop_number="A-010", monthly_rent=6000, deposit=18000, **extra):
        body = dict(shop_number=shop_number, size=120, monthly_rent=monthly_rent, deposit=deposit, **extra)
        resp = client.post("/api/shops", json=body, headers=headers["admin"])
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]
    return _make


@pytest.fixture
def make_tenant(client, headers):
    def _make(name="T1", phone="9999999999", **extra):
        body = dict(name=name, phone=phone, address="Main Road, Kusalamb", business_type="Grocery", **extra)
        resp = client.post("/api/tenants", json=body, headers=headers["admin"])
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]
    return _make


@pytest.fixture
def make_agreement(client, headers, make_shop, make_tenant):
    def _make(shop=None, tenant=None, **extra):
        shop = shop or make_shop()
        tenant = tenant or make_tenant()
        body = dict(
            shop_id=shop["id"],
            tenant_id=tenant["id"],
            agreement_date="2025-01-01",
            duration=11,
            monthly_rent=6000,
        )
        body.update(extra)
        resp = client.post("/api/agreements", json=body, headers=headers["admin"])
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _make
