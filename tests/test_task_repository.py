# tests/test_task_repository.py

from __future__ import annotations

from dataclasses import FrozenInstanceError, replace
from datetime import datetime, timedelta, timezone

import pytest

from taskdeck.tasks.task_models import SortBy, Task, TaskStatus, create_task
from taskdeck.tasks.task_repository import (
    MSG_ADD_FAILED,
    MSG_DELETE_FAILED,
    MSG_LOAD_FAILED,
    MSG_NOT_FOUND,
    MSG_UPDATE_FAILED,
    OpResult,
    TaskRepository,
)
from taskdeck.tasks.task_store import StoreError, TaskStore

from .fakes import InMemoryStore

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _task(title: str, *, minutes: int = 0, status: TaskStatus = TaskStatus.TODO) -> Task:
    return replace(create_task(title), created_at=T0 + timedelta(minutes=minutes), status=status)


async def _seeded(*tasks: Task) -> tuple[TaskRepository, InMemoryStore]:
    store = InMemoryStore(tasks)
    repo = TaskRepository(store)
    result = await repo.reload()
    assert result.ok
    return repo, store


@pytest.mark.asyncio
async def test_create_then_add_buy_milk(repo: TaskRepository) -> None:
    task = repo.create("Buy milk")
    result = await repo.add(task)

    assert result.ok
    listed = repo.list()
    assert len(listed) == 1
    assert listed[0].title == "Buy milk"
    assert listed[0].status is TaskStatus.TODO
    assert result.tasks == listed


@pytest.mark.asyncio
async def test_create_does_not_persist() -> None:
    repo, store = await _seeded()
    repo.create("draft")
    assert store.writes == 0
    assert repo.list() == []


@pytest.mark.asyncio
async def test_ids_unique_and_stable_across_reload(store: TaskStore) -> None:
    repo = TaskRepository(store)
    for i in range(5):
        assert (await repo.add(repo.create(f"task {i}"))).ok
    ids = [t.id for t in repo.list()]
    assert len(set(ids)) == 5

    fresh = TaskRepository(store)
    await fresh.reload()
    assert [t.id for t in fresh.list()] == ids


@pytest.mark.asyncio
async def test_update_replaces_exactly_one_record() -> None:
    a, b, c = _task("a"), _task("b", minutes=1), _task("c", minutes=2)
    repo, store = await _seeded(a, b, c)

    edited = replace(b, title="b2", location="office", status=TaskStatus.IN_PROGRESS)
    result = await repo.update(edited)

    assert result.ok
    assert store.tasks == [a, edited, c]
    assert repo.list() == [a, edited, c]


@pytest.mark.asyncio
async def test_update_of_missing_id_is_a_successful_no_op() -> None:
    a = _task("a")
    repo, store = await _seeded(a)

    result = await repo.update(_task("ghost"))

    assert result.ok
    assert store.tasks == [a]
    assert repo.error is None


@pytest.mark.asyncio
async def test_remove_present_and_absent() -> None:
    a, b = _task("a"), _task("b")
    repo, store = await _seeded(a, b)

    assert (await repo.remove(a.id)).ok
    assert store.tasks == [b]

    result = await repo.remove("does-not-exist")
    assert result.ok
    assert store.tasks == [b]
    assert repo.list() == [b]


@pytest.mark.asyncio
async def test_change_status_only_touches_status() -> None:
    a, b = _task("a"), _task("b")
    repo, store = await _seeded(a, b)

    result = await repo.change_status(a.id, TaskStatus.COMPLETED)

    assert result.ok
    assert store.tasks[0] == replace(a, status=TaskStatus.COMPLETED)
    assert store.tasks[1] == b


@pytest.mark.asyncio
async def test_change_status_can_leave_cancelled() -> None:
    a = _task("a", status=TaskStatus.CANCELLED)
    repo, _ = await _seeded(a)

    assert (await repo.change_status(a.id, TaskStatus.TODO)).ok
    assert repo.get(a.id).status is TaskStatus.TODO


@pytest.mark.asyncio
async def test_change_status_of_missing_id_fails_without_touching_storage() -> None:
    a = _task("a")
    repo, store = await _seeded(a)
    reads_before = store.reads

    result = await repo.change_status("missing", TaskStatus.COMPLETED)

    assert not result.ok
    assert result.error == MSG_NOT_FOUND
    assert store.reads == reads_before
    assert store.writes == 0
    assert store.tasks == [a]


@pytest.mark.asyncio
async def test_sort_by_date_newest_first() -> None:
    t1, t2 = _task("older", minutes=1), _task("newer", minutes=2)
    repo, _ = await _seeded(t1, t2)

    assert repo.sort(SortBy.DATE) == [t2, t1]


@pytest.mark.asyncio
async def test_sort_by_date_is_stable_on_ties() -> None:
    x, y, z = _task("x"), _task("y"), _task("z", minutes=5)
    repo, _ = await _seeded(x, y, z)

    assert repo.sort("date") == [z, x, y]


@pytest.mark.asyncio
async def test_sort_by_status_todo_before_cancelled() -> None:
    cancelled = _task("c", status=TaskStatus.CANCELLED)
    todo = _task("t", minutes=1)
    repo, _ = await _seeded(cancelled, todo)

    assert repo.sort(SortBy.STATUS) == [todo, cancelled]


@pytest.mark.asyncio
async def test_sort_by_status_priority_and_stability() -> None:
    done1 = _task("done1", status=TaskStatus.COMPLETED)
    todo1 = _task("todo1")
    ip = _task("ip", status=TaskStatus.IN_PROGRESS)
    todo2 = _task("todo2")
    cancel = _task("cancel", status=TaskStatus.CANCELLED)
    done2 = _task("done2", status=TaskStatus.COMPLETED)
    repo, _ = await _seeded(done1, todo1, ip, todo2, cancel, done2)

    assert repo.sort(SortBy.STATUS) == [ip, todo1, todo2, done1, done2, cancel]


@pytest.mark.asyncio
async def test_sort_is_view_only_and_reload_discards_it() -> None:
    t1, t2 = _task("t1", minutes=1), _task("t2", minutes=2)
    repo, store = await _seeded(t1, t2)

    repo.sort(SortBy.DATE)
    assert store.writes == 0
    assert store.tasks == [t1, t2]

    await repo.reload()
    assert repo.list() == [t1, t2]


def test_sort_rejects_unknown_criterion() -> None:
    repo = TaskRepository(InMemoryStore())
    with pytest.raises(ValueError):
        repo.sort("priority")


@pytest.mark.asyncio
async def test_list_is_a_cached_view_until_reload() -> None:
    a = _task("a")
    repo, store = await _seeded(a)

    b = _task("b")
    store.tasks.append(b)  # changed behind the repository's back

    assert repo.list() == [a]
    await repo.reload()
    assert repo.list() == [a, b]


@pytest.mark.asyncio
async def test_write_fault_during_add_leaves_list_untouched() -> None:
    a = _task("a")
    repo, store = await _seeded(a)
    store.fail_writes = True

    result = await repo.add(repo.create("phantom"))

    assert not result.ok
    assert result == OpResult.failure(MSG_ADD_FAILED)
    assert repo.error == MSG_ADD_FAILED
    assert repo.loading is False
    assert repo.list() == [a]
    assert store.tasks == [a]


@pytest.mark.asyncio
async def test_error_is_cleared_by_next_success() -> None:
    repo, store = await _seeded()
    store.fail_writes = True
    await repo.add(repo.create("x"))
    assert repo.error is not None

    store.fail_writes = False
    assert (await repo.add(repo.create("y"))).ok
    assert repo.error is None


@pytest.mark.asyncio
async def test_reload_fault_keeps_previous_view() -> None:
    a = _task("a")
    repo, store = await _seeded(a)
    store.fail_reads = True

    result = await repo.reload()

    assert not result.ok
    assert result.error == MSG_LOAD_FAILED
    assert repo.list() == [a]


@pytest.mark.asyncio
async def test_read_fault_during_update_is_reported_as_failure() -> None:
    a = _task("a")
    repo, store = await _seeded(a)
    store.fail_reads = True

    result = await repo.update(replace(a, title="changed"))

    assert not result.ok
    assert store.writes == 0
    assert repo.get(a.id) == a


@pytest.mark.asyncio
async def test_naive_scheduled_time_survives_reload(store: TaskStore) -> None:
    repo = TaskRepository(store)
    task = repo.create("Dentist", date_time=datetime(2030, 1, 1, 9, 0))
    assert (await repo.add(task)).ok

    fresh = TaskRepository(store)
    await fresh.reload()

    assert fresh.list() == [task]
    assert fresh.get(task.id).date_time == datetime(2030, 1, 1, 9, 0).astimezone()


@pytest.mark.asyncio
async def test_cached_tasks_cannot_be_changed_behind_the_repository(store: TaskStore) -> None:
    repo = TaskRepository(store)
    task = repo.create("Buy milk")
    await repo.add(task)

    with pytest.raises(FrozenInstanceError):
        repo.list()[0].title = "changed"  # type: ignore[misc]
    with pytest.raises(FrozenInstanceError):
        repo.get(task.id).id = "new-id"  # type: ignore[misc]

    assert repo.list() == [task]
    assert await store.read_all() == [task]


@pytest.mark.asyncio
async def test_write_fault_during_update_keeps_previous_record() -> None:
    a = _task("a")
    repo, store = await _seeded(a)
    store.fail_writes = True

    result = await repo.update(replace(a, title="changed"))

    assert result == OpResult.failure(MSG_UPDATE_FAILED)
    assert repo.error == MSG_UPDATE_FAILED
    assert repo.list() == [a]
    assert store.tasks == [a]


@pytest.mark.asyncio
async def test_write_fault_during_remove_keeps_record() -> None:
    a = _task("a")
    repo, store = await _seeded(a)
    store.fail_writes = True

    result = await repo.remove(a.id)

    assert result == OpResult.failure(MSG_DELETE_FAILED)
    assert repo.error == MSG_DELETE_FAILED
    assert repo.list() == [a]
    assert store.tasks == [a]


class _LoadingRecorderStore(InMemoryStore):
    """Records repo.loading as seen from inside store calls."""

    def __init__(self) -> None:
        super().__init__()
        self.repo: TaskRepository | None = None
        self.seen: list[bool] = []

    async def read_all(self) -> list[Task]:
        assert self.repo is not None
        self.seen.append(self.repo.loading)
        return await super().read_all()

    async def write_all(self, tasks) -> None:
        assert self.repo is not None
        self.seen.append(self.repo.loading)
        await super().write_all(tasks)


@pytest.mark.asyncio
async def test_loading_is_true_only_while_in_flight() -> None:
    store = _LoadingRecorderStore()
    repo = TaskRepository(store)
    store.repo = repo
    assert repo.loading is False

    await repo.reload()
    await repo.add(repo.create("x"))
    store.fail_writes = True
    await repo.add(repo.create("y"))

    assert store.seen and all(store.seen)
    assert repo.loading is False


@pytest.mark.asyncio
async def test_read_fault_during_remove_rewrites_empty_collection(store: TaskStore, monkeypatch) -> None:
    # A read fault looks like an empty store, so the mutation writes back
    # a collection that lost every other task.
    repo = TaskRepository(store)
    a, b = repo.create("a"), repo.create("b")
    await repo.add(a)
    await repo.add(b)

    def broken_load() -> list[Task]:
        raise StoreError("simulated read fault")

    monkeypatch.setattr(store, "load", broken_load)
    result = await repo.remove(a.id)
    monkeypatch.undo()

    assert result.ok
    assert result.tasks == []
    assert repo.list() == []
    assert store.load() == []
