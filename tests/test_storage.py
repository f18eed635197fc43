# tests/test_storage.py

from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from daily_planner.errors import StorageError
from daily_planner.schema import Task
from daily_planner.storage import JsonFileStorage, MemoryStorage


def _task(task_id: str, **overrides) -> Task:
    fields = {"id": task_id, "date": "2024-06-01", "startTime": "09:00", "description": "x"}
    fields.update(overrides)
    return Task(**fields)


@pytest.mark.asyncio
async def test_missing_file_loads_empty(tmp_path: Path) -> None:
    assert await JsonFileStorage(tmp_path / "nope.json").load() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "{broken", '{"id": "1"}'])
async def test_malformed_file_loads_empty(tmp_path: Path, content: str) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(content, encoding="utf-8")

    assert await JsonFileStorage(path).load() == []


@pytest.mark.asyncio
async def test_invalid_records_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    records = [
        _task("good").model_dump(),
        {"id": "no-start", "date": "2024-06-01", "description": "x"},
        "not an object",
        {**_task("nulls").model_dump(), "endTime": None, "category": None},
    ]
    path.write_text(json.dumps(records), encoding="utf-8")

    tasks = await JsonFileStorage(path).load()

    assert [t.id for t in tasks] == ["good", "nulls"]
    assert tasks[1].endTime == ""
    assert tasks[1].category == ""


@pytest.mark.asyncio
async def test_unknown_record_keys_survive_rewrite(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps([{**_task("a").model_dump(), "priority": "high"}]), encoding="utf-8")
    storage = JsonFileStorage(path)

    await storage.save(await storage.load())

    assert json.loads(path.read_text(encoding="utf-8"))[0]["priority"] == "high"


@pytest.mark.asyncio
async def test_new_store_respects_umask(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    umask = os.umask(0o022)
    try:
        await JsonFileStorage(path).save([_task("a")])
    finally:
        os.umask(umask)

    assert stat.S_IMODE(path.stat().st_mode) == 0o644


@pytest.mark.asyncio
async def test_rewrite_keeps_existing_mode(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("[]", encoding="utf-8")
    path.chmod(0o640)

    await JsonFileStorage(path).save([_task("a")])

    assert stat.S_IMODE(path.stat().st_mode) == 0o640


@pytest.mark.asyncio
async def test_save_creates_pretty_printed_array(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "tasks.json"
    storage = JsonFileStorage(path)
    tasks = [_task("a"), _task("b", completed=True, category="home")]

    await storage.save(tasks)

    raw = path.read_text(encoding="utf-8")
    assert raw.startswith("[\n  {")
    assert json.loads(raw)[1] == {
        "id": "b",
        "date": "2024-06-01",
        "startTime": "09:00",
        "endTime": "",
        "category": "home",
        "description": "x",
        "completed": True,
    }
    assert await storage.load() == tasks
    assert [p.name for p in path.parent.iterdir()] == ["tasks.json"]


@pytest.mark.asyncio
async def test_load_always_rereads_disk(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    storage = JsonFileStorage(path)
    await storage.save([_task("a")])

    path.write_text(json.dumps([_task("z").model_dump()]), encoding="utf-8")

    assert [t.id for t in await storage.load()] == ["z"]


@pytest.mark.asyncio
async def test_save_retries_once(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = JsonFileStorage(tmp_path / "tasks.json")
    real_write = storage._write_sync
    calls = []

    def flaky_write(payload: str) -> None:
        calls.append(payload)
        if len(calls) == 1:
            raise OSError("disk hiccup")
        real_write(payload)

    monkeypatch.setattr(storage, "_write_sync", flaky_write)

    await storage.save([_task("a")])

    assert len(calls) == 2
    assert [t.id for t in await storage.load()] == ["a"]


@pytest.mark.asyncio
async def test_failed_save_keeps_previous_content(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "tasks.json"
    storage = JsonFileStorage(path)
    await storage.save([_task("old")])
    before = path.read_text(encoding="utf-8")

    def refuse_replace(src, dst):
        raise OSError("read-only filesystem")

    monkeypatch.setattr("daily_planner.storage.os.replace", refuse_replace)

    with pytest.raises(StorageError):
        await storage.save([_task("new")])

    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["tasks.json"]


@pytest.mark.asyncio
async def test_memory_storage_isolates_copies() -> None:
    storage = MemoryStorage([_task("a")])

    loaded = await storage.load()
    loaded[0].description = "mutated"
    loaded.append(_task("b"))

    assert [(t.id, t.description) for t in await storage.load()] == [("a", "x")]
    assert storage.save_count == 0
