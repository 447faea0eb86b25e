"""Pytest fixtures for test suite."""

from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine
from sqlmodel.pool import StaticPool

from identity.accounts import Account, AccountService, LabelService
from identity.accounts.router import get_recomputer
from identity.core.database import get_session, init_db
from identity.engine import LabelRecomputer
from identity.events import MemoryEventPublisher
from identity.main import app
from identity.policy import StaticPolicySource


# =============================================================================
# Policy Fixtures
# =============================================================================


@pytest.fixture
def all_mapping_policy() -> dict[str, Any]:
    """Two activation requirements plus two ANY triggers."""
    return {
        "activation_requirements": {
            "phone": "verified",
            "documents": "verified",
        },
        "state_triggers": {
            "active_one_of_1_label": ["email"],
            "active_one_of_3_labels": ["first", "second", "third"],
        },
    }


@pytest.fixture
def any_mapping_policy() -> dict[str, Any]:
    """A single lock trigger reachable through either of two keys."""
    return {
        "activation_requirements": {"email": "verified"},
        "state_triggers": {"locked": ["trade", "withdraw"]},
    }


@pytest.fixture
def level_policy() -> dict[str, Any]:
    return {
        "activation_requirements": {"email": "verified", "phone": "verified"},
        "level_rules": [
            {"level": 3, "requires": {"email": "verified", "phone": "verified", "document": "verified"}},
            {"level": 2, "requires": {"email": "verified", "phone": "verified"}},
            {"level": 1, "requires": {"email": "verified"}},
        ],
    }


@pytest.fixture
def policy_source(all_mapping_policy: dict[str, Any]) -> StaticPolicySource:
    return StaticPolicySource(all_mapping_policy)


@pytest.fixture
def publisher() -> MemoryEventPublisher:
    return MemoryEventPublisher()


@pytest.fixture
def recomputer(policy_source: StaticPolicySource, publisher: MemoryEventPublisher) -> LabelRecomputer:
    return LabelRecomputer(policy_source, publisher)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    return engine


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def account_service(session: Session) -> AccountService:
    return AccountService(session, uid_prefix="ID")


@pytest.fixture
def label_service(session: Session, recomputer: LabelRecomputer) -> LabelService:
    return LabelService(session, recomputer)


@pytest.fixture
def account(account_service: AccountService) -> Account:
    """A fresh pending account."""
    return account_service.create_account("member@example.com")


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture(name="client")
def client_fixture(engine, recomputer: LabelRecomputer):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_recomputer] = lambda: recomputer
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
