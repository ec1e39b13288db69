import json

import pytest

from core.settings import OFFLINE_SYNC
from models.queued_operation import QueuedOperation
from services.operation_queue import OperationQueue


def test_load_empty_queue(queue):
    assert queue.load() == []
    assert queue.count() == 0


def test_enqueue_assigns_identity_and_persists(queue, kv_store):
    result = queue.enqueue("create", "partituras", {"titulo": "Sinfonia"})

    assert len(result) == 1
    op = result[0]
    assert op.kind == "create"
    assert op.resource == "partituras"
    assert op.payload == {"titulo": "Sinfonia"}
    assert op.retry_count == 0
    assert op.enqueued_at > 0

    stored = json.loads(kv_store.get(OFFLINE_SYNC.storage_key))
    assert stored == [
        {
            "id": op.id,
            "kind": "create",
            "resource": "partituras",
            "payload": {"titulo": "Sinfonia"},
            "enqueuedAt": op.enqueued_at,
            "retryCount": 0,
        }
    ]


def test_reload_is_idempotent(queue):
    queue.enqueue("create", "partituras", {"titulo": "A"})
    queue.enqueue("delete", "performances", {"id": 7})

    first = queue.load()
    second = queue.load()
    assert first == second
    assert [op.resource for op in first] == ["partituras", "performances"]


def test_ids_are_unique(queue):
    for i in range(5):
        queue.enqueue("update", "partituras", {"id": i})
    ids = [op.id for op in queue.load()]
    assert len(set(ids)) == 5


def test_insert_alias_is_normalised(queue):
    queue.enqueue("insert", "performances", {"titulo": "Concerto"})
    assert queue.load()[0].kind == "create"


def test_unknown_kind_is_rejected(queue):
    with pytest.raises(ValueError):
        queue.enqueue("upsert", "partituras", {})
    assert queue.load() == []


def test_append_rejects_duplicate_id(queue):
    op = QueuedOperation.new("create", "partituras", {"titulo": "A"})
    queue.append(op)
    with pytest.raises(ValueError):
        queue.append(op)
    assert queue.count() == 1


def test_corrupted_storage_loads_as_empty(queue, kv_store):
    kv_store.set(OFFLINE_SYNC.storage_key, "[{broken json")
    assert queue.load() == []


def test_invalid_entries_are_skipped(queue, kv_store):
    good = QueuedOperation.new("delete", "partituras", {"id": 3}).to_dict()
    kv_store.set(
        OFFLINE_SYNC.storage_key,
        json.dumps([good, "junk", {"id": "x", "kind": "explode", "resource": "partituras"}]),
    )
    loaded = queue.load()
    assert [op.id for op in loaded] == [good["id"]]


def test_save_overwrites_whole_queue(queue):
    queue.enqueue("create", "partituras", {"titulo": "A"})
    queue.enqueue("create", "partituras", {"titulo": "B"})
    keep = queue.load()[1:]

    queue.save(keep)
    assert queue.load() == keep


def test_clear_removes_everything(queue, kv_store):
    queue.enqueue("create", "partituras", {"titulo": "A"})
    queue.clear()
    assert queue.load() == []
    assert kv_store.get(OFFLINE_SYNC.storage_key) is None


def test_queues_with_different_keys_are_independent(kv_store):
    first = OperationQueue(kv_store, key="first")
    second = OperationQueue(kv_store, key="second")
    first.enqueue("create", "partituras", {"titulo": "A"})
    assert second.load() == []


def test_unreadable_storage_loads_as_empty(flaky_store):
    queue = OperationQueue(flaky_store)
    queue.enqueue("create", "partituras", {"titulo": "A"})

    flaky_store.fail_reads = True
    assert queue.load() == []
    assert queue.count() == 0


def test_failed_save_is_reported_not_raised(flaky_store):
    queue = OperationQueue(flaky_store)
    queue.enqueue("create", "partituras", {"titulo": "A"})
    before = queue.load()

    flaky_store.fail_writes = True
    assert queue.save([]) is False
    assert queue.load() == before


def test_append_returns_persisted_queue_when_save_fails(flaky_store):
    queue = OperationQueue(flaky_store)
    queue.enqueue("create", "partituras", {"titulo": "A"})

    flaky_store.fail_writes = True
    result = queue.enqueue("create", "partituras", {"titulo": "B"})

    assert [op.payload["titulo"] for op in result] == ["A"]
    assert queue.count() == 1
