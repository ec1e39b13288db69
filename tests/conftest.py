import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# keep logs and the default database out of the real user profile
os.environ.setdefault("SIGDMUS_DATA_DIR", tempfile.mkdtemp(prefix="sigdmus-tests-"))

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401
from models.queued_operation import QueuedOperation
from services.operation_processor import ReplayError
from services.operation_queue import OperationQueue
from storage.kv import KeyValueStore


class FakeProcessor:
    """Records replayed operations and fails those matching ``fail_when``."""

    def __init__(self, fail_when=None):
        self.fail_when = fail_when or (lambda op: False)
        self.calls: list[QueuedOperation] = []

    def process(self, operation):
        self.calls.append(operation)
        if self.fail_when(operation):
            raise ReplayError(operation, "simulated failure")


class RecordingNotifier:
    """Keeps every notification in memory, newest last."""

    def __init__(self):
        self.messages: list[tuple[str, str, str]] = []

    def notify(self, title, message, level="info"):
        self.messages.append((title, message, level))


class FlakyStore(KeyValueStore):
    """Key-value store whose reads or writes can be switched to fail."""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key):
        if self.fail_reads:
            raise OperationalError("SELECT", {}, Exception("database is locked"))
        return super().get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise OperationalError("UPDATE", {}, Exception("disk I/O error"))
        super().set(key, value)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory


@pytest.fixture()
def kv_store(session_factory):
    return KeyValueStore(session_factory)


@pytest.fixture()
def queue(kv_store):
    return OperationQueue(kv_store)


@pytest.fixture()
def flaky_store(session_factory):
    return FlakyStore(session_factory)
