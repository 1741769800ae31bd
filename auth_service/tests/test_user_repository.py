import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from auth_service.database.user_repository import MongoUserRepository
from auth_service.models.user import UserRecord


def _record(email="a@example.com", name="Al"):
    return UserRecord.create(email=email, password_hash="$2b$04$hash", name=name)


@pytest.mark.asyncio
async def test_in_memory_insert_and_lookups(user_repository):
    record = _record()
    assert await user_repository.insert(record) is True

    assert (await user_repository.find_by_email("A@Example.com")).user_id == record.user_id
    assert (await user_repository.find_by_id(record.user_id)).email == "a@example.com"
    assert await user_repository.find_by_email("missing@example.com") is None
    assert await user_repository.find_by_id("missing") is None


@pytest.mark.asyncio
async def test_in_memory_insert_conflicts_on_email(user_repository):
    assert await user_repository.insert(_record()) is True
    assert await user_repository.insert(_record(email="A@EXAMPLE.COM")) is False
    assert len(user_repository) == 1


@pytest.mark.asyncio
async def test_in_memory_concurrent_inserts(user_repository):
    results = await asyncio.gather(*(user_repository.insert(_record()) for _ in range(10)))
    assert results.count(True) == 1
    assert len(user_repository) == 1


def _mongo_repository(collection):
    return MongoUserRepository(SimpleNamespace(users=collection))


@pytest.mark.asyncio
async def test_mongo_insert_maps_duplicate_key_to_conflict():
    collection = MagicMock()
    collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))
    repo = _mongo_repository(collection)

    assert await repo.insert(_record()) is False


@pytest.mark.asyncio
async def test_mongo_insert_writes_document_keyed_by_id():
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    repo = _mongo_repository(collection)
    record = _record()

    assert await repo.insert(record) is True
    document = collection.insert_one.await_args.args[0]
    assert document["_id"] == record.user_id
    assert document["email"] == "a@example.com"
    assert document["password_hash"] == "$2b$04$hash"


@pytest.mark.asyncio
async def test_mongo_find_by_email_normalizes_and_parses():
    record = _record()
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=record.to_document())
    repo = _mongo_repository(collection)

    found = await repo.find_by_email(" A@example.com")
    collection.find_one.assert_awaited_once_with({"email": "a@example.com"})
    assert found.user_id == record.user_id


@pytest.mark.asyncio
async def test_mongo_errors_propagate():
    collection = MagicMock()
    collection.find_one = AsyncMock(side_effect=RuntimeError("server selection timeout"))
    repo = _mongo_repository(collection)

    with pytest.raises(RuntimeError):
        await repo.find_by_id("abc")
