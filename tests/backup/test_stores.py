"""Tests for TempStore and BackupStore."""

import os
import pytest
from unittest.mock import patch

from statevault.backup.exceptions import NotFoundError, StorageIOError
from statevault.backup.stores import BackupStore, TempStore


def test_stores_create_directories(temp_root):
    TempStore(str(temp_root / "a" / "temp"))
    BackupStore(str(temp_root / "b" / "backups"))

    assert (temp_root / "a" / "temp").is_dir()
    assert (temp_root / "b" / "backups").is_dir()


@pytest.mark.asyncio
async def test_temp_store_put_get(temp_store):
    await temp_store.put("chunk_1_0", '{"a": ')

    assert await temp_store.get("chunk_1_0") == '{"a": '


@pytest.mark.asyncio
async def test_temp_store_put_overwrites(temp_store):
    await temp_store.put("chunk_1_0", "first")
    await temp_store.put("chunk_1_0", "second")

    assert await temp_store.get("chunk_1_0") == "second"


@pytest.mark.asyncio
async def test_temp_store_get_missing(temp_store):
    with pytest.raises(NotFoundError):
        await temp_store.get("chunk_missing_0")


@pytest.mark.asyncio
async def test_temp_store_delete_is_idempotent(temp_store):
    await temp_store.put("chunk_1_0", "data")

    await temp_store.delete("chunk_1_0")
    await temp_store.delete("chunk_1_0")

    with pytest.raises(NotFoundError):
        await temp_store.get("chunk_1_0")


@pytest.mark.asyncio
async def test_temp_store_list_all(temp_store):
    await temp_store.put("chunk_1_0", "a")
    await temp_store.put("chunk_1_1", "b")
    os.utime(temp_store.temp_dir / "chunk_1_0", (1000, 1000))

    entries = dict(await temp_store.list_all())

    assert set(entries) == {"chunk_1_0", "chunk_1_1"}
    assert entries["chunk_1_0"] == 1000


@pytest.mark.asyncio
@pytest.mark.parametrize("chunk_id", ["../escape", "a/b", "..", ".", ""])
async def test_temp_store_rejects_unsafe_ids(temp_store, chunk_id):
    with pytest.raises(NotFoundError):
        await temp_store.get(chunk_id)
    with pytest.raises(NotFoundError):
        await temp_store.put(chunk_id, "data")


@pytest.mark.asyncio
async def test_temp_store_write_failure(temp_store):
    with patch("builtins.open", side_effect=PermissionError("denied")):
        with pytest.raises(StorageIOError):
            await temp_store.put("chunk_1_0", "data")


@pytest.mark.asyncio
async def test_backup_store_save_and_read(backup_store):
    filename = await backup_store.save("backup_a.json", '{"x": 1}')

    assert filename == "backup_a.json"
    assert await backup_store.read(filename) == '{"x": 1}'
    assert await backup_store.list_all() == ["backup_a.json"]


@pytest.mark.asyncio
async def test_backup_store_never_overwrites(backup_store):
    first = await backup_store.save("backup_a.json", "1")
    second = await backup_store.save("backup_a.json", "2")
    third = await backup_store.save("backup_a.json", "3")

    assert first == "backup_a.json"
    assert second == "backup_a_001.json"
    assert third == "backup_a_002.json"
    assert await backup_store.read(first) == "1"
    assert await backup_store.read(second) == "2"
    assert await backup_store.latest() == third


@pytest.mark.asyncio
async def test_backup_store_latest(backup_store):
    assert await backup_store.latest() is None

    await backup_store.save("backup_2024-01-01T00-00-00-000Z.json", "{}")
    await backup_store.save("backup_2024-06-01T00-00-00-000Z.json", "{}")
    (backup_store.backup_dir / "notes.txt").write_text("ignored")

    assert await backup_store.latest() == "backup_2024-06-01T00-00-00-000Z.json"


@pytest.mark.asyncio
async def test_backup_store_latest_ignores_non_json(backup_store):
    (backup_store.backup_dir / "readme.txt").write_text("not a backup")

    assert await backup_store.latest() is None


@pytest.mark.asyncio
async def test_backup_store_read_missing(backup_store):
    with pytest.raises(NotFoundError):
        await backup_store.read("backup_missing.json")


@pytest.mark.asyncio
async def test_backup_store_failed_write_leaves_no_file(backup_store):
    previous = await backup_store.save("backup_2024-01-01T00-00-00-000Z.json", '{"good": 1}')

    with patch(
        "statevault.backup.stores.open",
        side_effect=OSError(28, "No space left on device"),
        create=True
    ):
        with pytest.raises(StorageIOError):
            await backup_store.save("backup_2024-06-01T00-00-00-000Z.json", '{"lost": 1}')

    assert sorted(os.listdir(backup_store.backup_dir)) == [previous]
    assert await backup_store.latest() == previous
    assert await backup_store.read(previous) == '{"good": 1}'


@pytest.mark.asyncio
async def test_backup_store_unencodable_text_leaves_no_file(backup_store):
    with pytest.raises(StorageIOError):
        await backup_store.save("backup_a.json", '"\ud800"')

    assert os.listdir(backup_store.backup_dir) == []


@pytest.mark.asyncio
async def test_temp_store_failed_write_keeps_previous_chunk(temp_store):
    await temp_store.put("chunk_1_0", "original")

    with patch(
        "statevault.backup.stores.open",
        side_effect=OSError(28, "No space left on device"),
        create=True
    ):
        with pytest.raises(StorageIOError):
            await temp_store.put("chunk_1_0", "replacement")

    assert await temp_store.get("chunk_1_0") == "original"
    assert os.listdir(temp_store.temp_dir) == ["chunk_1_0"]


@pytest.mark.asyncio
async def test_temp_store_keeps_split_surrogates(temp_store):
    await temp_store.put("chunk_1_0", '"\ud83d')

    assert await temp_store.get("chunk_1_0") == '"\ud83d'


@pytest.mark.asyncio
async def test_temp_store_undecodable_chunk(temp_store):
    (temp_store.temp_dir / "chunk_1_0").write_bytes(b"\xff\xfe{}")

    with pytest.raises(StorageIOError):
        await temp_store.get("chunk_1_0")


@pytest.mark.asyncio
async def test_staging_files_are_not_listed(temp_store, backup_store):
    (temp_store.temp_dir / ".abc123.tmp").write_text("partial")
    (backup_store.backup_dir / ".def456.tmp").write_text("partial")

    assert await temp_store.list_all() == []
    assert await backup_store.list_all() == []
