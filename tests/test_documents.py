"""Tests for SqlFileDocuments: document mapping over the files table."""

import pytest

from files_manager.files.documents import SqlFileDocuments


def _doc(**overrides):
    doc = {"userId": 1, "name": "a.txt", "type": "file", "isPublic": False, "parentId": 0, "localPath": "/blobs/x"}
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
async def test_insert_and_find_one(db_session) -> None:
    """Inserted document comes back with _id and the same keys."""
    docs = SqlFileDocuments(db_session)
    file_id = await docs.insert_one(_doc())
    assert file_id > 0
    found = await docs.find_one({"_id": file_id})
    assert found == {"_id": file_id, **_doc()}


@pytest.mark.asyncio
async def test_folder_has_no_local_path(db_session) -> None:
    """Documents without localPath do not grow one."""
    docs = SqlFileDocuments(db_session)
    folder = _doc(type="folder", name="dir")
    del folder["localPath"]
    file_id = await docs.insert_one(folder)
    assert "localPath" not in await docs.find_one({"_id": file_id})


@pytest.mark.asyncio
async def test_find_one_requires_all_keys(db_session) -> None:
    """Every key in the query must match."""
    docs = SqlFileDocuments(db_session)
    file_id = await docs.insert_one(_doc())
    assert await docs.find_one({"_id": file_id, "userId": 2}) is None


@pytest.mark.asyncio
async def test_unknown_field_rejected(db_session) -> None:
    """Query keys outside the document shape raise ValueError."""
    docs = SqlFileDocuments(db_session)
    with pytest.raises(ValueError, match="Unknown file field"):
        await docs.find_one({"owner": 1})


@pytest.mark.asyncio
async def test_find_skip_limit(db_session) -> None:
    """find yields matches in id order with skip/limit."""
    docs = SqlFileDocuments(db_session)
    for i in range(4):
        await docs.insert_one(_doc(name=f"f{i}", parentId=0))
    await docs.insert_one(_doc(name="elsewhere", parentId=99))
    names = [d["name"] async for d in docs.find({"parentId": 0}, skip=1, limit=2)]
    assert names == ["f1", "f2"]
    assert len([d async for d in docs.find({"parentId": 0})]) == 4


@pytest.mark.asyncio
async def test_find_one_and_update(db_session) -> None:
    """Update returns the changed document; no match returns None."""
    docs = SqlFileDocuments(db_session)
    file_id = await docs.insert_one(_doc())
    updated = await docs.find_one_and_update({"_id": file_id, "userId": 1}, {"isPublic": True})
    assert updated["isPublic"] is True
    assert (await docs.find_one({"_id": file_id}))["isPublic"] is True
    assert await docs.find_one_and_update({"_id": file_id + 1}, {"isPublic": True}) is None


@pytest.mark.asyncio
async def test_count(db_session) -> None:
    """count returns the number of entries."""
    docs = SqlFileDocuments(db_session)
    assert await docs.count() == 0
    await docs.insert_one(_doc())
    assert await docs.count() == 1
