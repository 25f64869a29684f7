"""
Shared fixtures: in-memory SQLite database, identities and a TestClient with
the database and caller dependencies overridden.
"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
for _name in ("REDIS_URL", "SUPABASE_URL", "SUPABASE_KEY"):
    os.environ.pop(_name, None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.v1.dependencies import get_current_identity
from app.core.billing import AppRole
from app.core.security import Identity
from app.db.base import Base
from app.db.session import get_db
from app.models import SubscriptionPackage, UserSubscription  # noqa: F401  (registers every model)
from app.repositories.package_repository import PackageRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user_identity():
    return Identity(user_id="user-1", role=AppRole.USER, email="user@example.com")


@pytest.fixture
def other_identity():
    return Identity(user_id="user-2", role=AppRole.USER)


@pytest.fixture
def admin_identity():
    return Identity(user_id="admin-1", role=AppRole.ADMIN, email="admin@example.com")


@pytest.fixture
def make_package(db):
    """Insert a catalog package directly, bypassing the admin form."""
    repo = PackageRepository(db)

    def _make(name="Pro", price="499", billing_cycle="monthly", features=None, is_active=True):
        return repo.insert(
            {
                "name": name,
                "price": Decimal(price),
                "currency": "BDT",
                "billing_cycle": billing_cycle,
                "features": features or [],
                "is_active": is_active,
            }
        )

    return _make


@pytest.fixture
def make_credit_source(db, make_package):
    """Give a user an active purchased subscription holding some credit."""
    repo = UserSubscriptionRepository(db)

    def _make(user_id, credits, package=None):
        package = package or make_package(name="Starter", price="100")
        return repo.insert(
            {
                "user_id": user_id,
                "package_id": package.id,
                "status": "active",
                "credits_remaining": Decimal(credits),
                "total_paid": Decimal("100"),
            }
        )

    return _make


@pytest.fixture
def api(session_factory):
    """TestClient whose caller is switched with ``api.login_as(identity)``."""
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)

    def login_as(identity):
        app.dependency_overrides[get_current_identity] = lambda: identity
        return client

    client.login_as = login_as
    yield client
    app.dependency_overrides.clear()
