import os
from datetime import datetime

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-for-the-order-api-suite')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from order_api.auth import jwt_handler  # noqa: E402
from order_api.auth.dependencies import Principal  # noqa: E402
from order_api.database import Base, get_db  # noqa: E402
from order_api.main import app  # noqa: E402
from order_api.models.order import Order  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin() -> Principal:
    return Principal(email='admin@shop.com', role='admin', subject_id='1')


@pytest.fixture
def customer() -> Principal:
    return Principal(email='customer@shop.com', role='customer', subject_id='2')


def bearer_for(principal: Principal) -> dict:
    token = jwt_handler.create_access_token(
        subject=principal.subject_id,
        claims={'email': principal.email, 'role': principal.role},
    )
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(admin) -> dict:
    return bearer_for(admin)


@pytest.fixture
def customer_headers(customer) -> dict:
    return bearer_for(customer)


@pytest.fixture
def add_order(db):
    def _add_order(**overrides) -> Order:
        values = {
            'customer_name': 'John Doe',
            'product_name': 'Laptop',
            'product_category': 'Electronics',
            'price': 1200,
            'order_date': datetime(2026, 3, 2, 10, 0),
            'created_by': 'customer@shop.com',
        }
        values.update(overrides)
        order = Order(**values)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _add_order
