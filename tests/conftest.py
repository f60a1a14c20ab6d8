from dataclasses import replace

import httpx
from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine, text

from rtalks.model.seed import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD
from rtalks.payments import RazorpayLinks
from rtalks.server import create_app
from rtalks.settings import PLACEHOLDER_KEY_ID, Settings
from tests.route_constant import ADMIN_LOGIN, ORDERS


JWT_SECRET = 'jwt-secret-for-tests'
RAZORPAY_SECRET = 'rzp-secret-for-tests'
FRONTEND_URL = 'https://rtalks.example'
PUBLIC_API_URL = 'https://api.rtalks.example'

ORDER_BODY = {
    'name': 'Jane Doe',
    'email': 'Jane@Example.com',
    'phone': '+919876543210',
    'package': 'Professional',
    'price': 299,
}


@pytest.fixture
def db_file(tmp_path):
    return tmp_path / 'rtalks.db'


@pytest.fixture
def settings(tmp_path, db_file):
    # placeholder key id: test mode, but the secret still verifies signatures
    return Settings(
        database_url=f'sqlite:///{db_file}',
        environment='test',
        jwt_secret=JWT_SECRET,
        razorpay_key_id=PLACEHOLDER_KEY_ID,
        razorpay_key_secret=RAZORPAY_SECRET,
        frontend_url=FRONTEND_URL,
        public_api_url=PUBLIC_API_URL,
        upload_dir=str(tmp_path / 'uploads'),
        log_level='WARNING',
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # https so the Secure session cookie is sent back
    with TestClient(app, base_url='https://testserver') as c:
        yield c


@pytest.fixture
def make_client(settings):
    clients = []

    def _make(**overrides):
        c = TestClient(
            create_app(replace(settings, **overrides)),
            base_url='https://testserver',
            raise_server_exceptions=False,
        )
        c.__enter__()
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.__exit__(None, None, None)


@pytest.fixture
def admin_client(client):
    response = client.post(
        ADMIN_LOGIN,
        json={'email': DEFAULT_ADMIN_EMAIL, 'password': DEFAULT_ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def sql(db_file):
    engine = create_engine(f'sqlite:///{db_file}')

    def _execute(statement: str, params: dict | None = None):
        with engine.begin() as conn:
            result = conn.execute(text(statement), params or {})
            if result.returns_rows:
                return [dict(r) for r in result.mappings().all()]
            return None

    yield _execute
    engine.dispose()


@pytest.fixture
def create_order(client):
    def _create(**overrides):
        response = client.post(ORDERS, json={**ORDER_BODY, **overrides})
        assert response.status_code == 200, response.text
        return response.json()['orderId']

    return _create


@pytest.fixture
def razorpay(app, client):
    """Swap in a live-mode adapter whose HTTP calls hit a mock handler."""
    calls = []
    state = {'response': httpx.Response(
        200, json={'id': 'plink_T3st', 'short_url': 'https://rzp.io/i/t3st'}
    )}

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return state['response']

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    app.state.payments = RazorpayLinks(
        key_id='rzp_test_key',
        key_secret=RAZORPAY_SECRET,
        api_url='https://api.razorpay.test/v1',
        callback_base_url=PUBLIC_API_URL,
        http=http,
    )
    state['calls'] = calls
    yield state
