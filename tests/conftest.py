import os

# Must be set before cart_fees modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import cart_fees.db as db
import cart_fees.config as config_mod
from cart_fees.main import app
from cart_fees.models import Base, TaxRate
from cart_fees.services.session import SESSION_CACHE

# Test admin credentials
TEST_ADMIN_USERNAME = "testadmin"
TEST_ADMIN_PASSWORD = "testpassword123"


def _memory_engine():
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def db_session():
    """Standalone in-memory SQLite session for service-level tests."""
    SESSION_CACHE.clear()

    engine = _memory_engine()
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    yield session
    session.close()

    SESSION_CACHE.clear()


@pytest.fixture
def client(monkeypatch):
    """Shared FastAPI TestClient using an in-memory SQLite DB.

    Uses StaticPool so all connections share the same in-memory database.
    Seeds a 10% "reduced" tax class and sets test admin credentials.
    """
    monkeypatch.setattr(config_mod, "ADMIN_USERNAME", TEST_ADMIN_USERNAME)
    monkeypatch.setattr(config_mod, "ADMIN_PASSWORD", TEST_ADMIN_PASSWORD)
    monkeypatch.setattr(config_mod, "TAX_ENABLED", True)

    engine = _memory_engine()
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "SessionLocal", TestingSessionLocal)

    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    session.add(TaxRate(tax_class="reduced", name="Reduced VAT", rate=10, priority=1, active=True))
    session.commit()
    session.close()

    def override_get_db():
        db_sess = TestingSessionLocal()
        try:
            yield db_sess
        finally:
            db_sess.close()

    app.dependency_overrides[db.get_db] = override_get_db

    SESSION_CACHE.clear()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    SESSION_CACHE.clear()


@pytest.fixture
def admin_auth():
    """Returns HTTP Basic Auth tuple for admin endpoints."""
    return (TEST_ADMIN_USERNAME, TEST_ADMIN_PASSWORD)


@pytest.fixture
def handling_and_insurance(client, admin_auth):
    """
    Saves two fees through the admin API and returns the stored list:
    a required "Handling" fee and an optional "Insurance" fee (10% class)
    offered from a subtotal of 50.
    """
    resp = client.put(
        "/admin/fees",
        json={
            "fees": [
                {
                    "internal_name": "Handling (all orders)",
                    "public_name": "Handling",
                    "price": 2.0,
                    "type": "required",
                    "condition": "always",
                },
                {
                    "internal_name": "Insurance over 50",
                    "public_name": "Insurance",
                    "price": 11.0,
                    "tax_class": "reduced",
                    "type": "optional",
                    "checkbox_text": "Insure my parcel",
                    "help_text": "Covers loss and damage in transit.",
                    "condition": "minimum",
                    "condition_minimum": 50,
                },
            ]
        },
        auth=admin_auth,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture(autouse=True)
def _restore_logger_levels():
    """Undo logger-level changes (e.g. setup_logging) so they don't leak across tests."""
    import logging
    from cart_fees.logging_config import NOISY_LOGGERS

    names = ["", "cart_fees", *NOISY_LOGGERS]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)
