from __future__ import annotations

import pytest
import structlog
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from rhmaster.remote import RemoteStore
from rhmaster.storage import LocalStore
from rhmaster.sync import SessionContext, SynchronizedStore


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()


@pytest.fixture
def remote() -> RemoteStore:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = RemoteStore(engine)
    store.create_schema()
    return store


@pytest.fixture
def unreachable_remote(tmp_path) -> RemoteStore:
    return RemoteStore.from_url(f"sqlite:///{tmp_path / 'missing' / 'remote.db'}")


@pytest.fixture
def local(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "local.json")


@pytest.fixture
def online_store(remote, local) -> SynchronizedStore:
    store = SynchronizedStore(SessionContext(), local, remote=remote)
    store.load()
    return store
