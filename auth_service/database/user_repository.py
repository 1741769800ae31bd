"""User store implementations.

Both stores expose the same contract: point lookup by id, secondary
lookup by email, and an insert that fails atomically when the email is
already taken. Callers never check-then-insert.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from pymongo.errors import DuplicateKeyError

from auth_service.database.mongodb import MongodbClient
from auth_service.models.user import UserRecord, normalize_email

logger = logging.getLogger(__name__)


class UserRepository(ABC):
    """Contract the auth service needs from a user store."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def insert(self, user: UserRecord) -> bool:
        """Insert ``user`` unless its email exists.

        Returns:
            True if inserted, False on email conflict.
        """


class MongoUserRepository(UserRepository):
    """Repository class for user operations in MongoDB.

    Email uniqueness relies on the unique index created by
    ``MongodbClient.ensure_user_indexes()`` at startup. Driver errors other
    than duplicate keys propagate to the caller.
    """

    def __init__(self, mongodb_client: MongodbClient):
        self.mongodb_client = mongodb_client

    @property
    def collection(self):
        return self.mongodb_client.users

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        user_doc = await self.collection.find_one({"email": normalize_email(email)})
        return UserRecord(**user_doc) if user_doc else None

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        user_doc = await self.collection.find_one({"_id": user_id})
        return UserRecord(**user_doc) if user_doc else None

    async def insert(self, user: UserRecord) -> bool:
        try:
            await self.collection.insert_one(user.to_document())
        except DuplicateKeyError:
            logger.info("User creation rejected - email already registered")
            return False
        return True


class InMemoryUserRepository(UserRepository):
    """Process-local store for development and tests."""

    def __init__(self):
        self._by_id: Dict[str, UserRecord] = {}
        self._id_by_email: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        user_id = self._id_by_email.get(normalize_email(email))
        return self._by_id.get(user_id) if user_id else None

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._by_id.get(user_id)

    async def insert(self, user: UserRecord) -> bool:
        email = normalize_email(user.email)
        async with self._lock:
            if email in self._id_by_email or user.user_id in self._by_id:
                return False
            self._by_id[user.user_id] = user
            self._id_by_email[email] = user.user_id
        return True

    def __len__(self) -> int:
        return len(self._by_id)
