"""
In-memory repositories for development and tests.

Nothing here survives a restart. Each entity type has its own collection
with its own lock, so user traffic never waits on callback traffic.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Dict, Generic, Optional, TypeVar

from bson import ObjectId

from httpcallback.errors import DuplicateKeyError, InvalidIdError, NotFoundError
from httpcallback.models import AuthInfo, Callback, User

T = TypeVar("T")


@dataclass
class MemCollection(Generic[T]):
    """Records keyed by id, guarded by a per-collection lock."""

    records: Dict[str, T] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)


def _claim_id(collection: MemCollection, record_id: Optional[str]) -> str:
    """Return a new id, or validate a caller-set one. Caller holds the lock."""
    if record_id is None:
        return str(ObjectId())
    if not ObjectId.is_valid(record_id):
        raise InvalidIdError(f"{record_id!r} is not a valid object-id")
    if record_id in collection.records:
        raise DuplicateKeyError(f"id {record_id} already exists")
    return record_id


class MemUserRepository:
    def __init__(self, collection: MemCollection[User]):
        self._collection = collection

    def add(self, user: User) -> None:
        with self._collection.lock:
            for existing in self._collection.records.values():
                if existing.username == user.username:
                    raise DuplicateKeyError(
                        f"username {user.username!r} already exists"
                    )
            user.id = _claim_id(self._collection, user.id)
            self._collection.records[user.id] = copy.copy(user)

    def get(self, user_id: str) -> User:
        with self._collection.lock:
            user = self._collection.records.get(user_id)
        if user is None:
            raise NotFoundError(f"user {user_id} not found")
        return copy.copy(user)

    def list(self) -> list[User]:
        with self._collection.lock:
            return [copy.copy(user) for user in self._collection.records.values()]

    def get_by_auth(self, username: str, auth_token: str) -> AuthInfo:
        with self._collection.lock:
            for user in self._collection.records.values():
                if user.username == username and user.auth_token == auth_token:
                    return AuthInfo(user_id=user.id, username=user.username)
        raise NotFoundError(f"no user matches credentials for {username!r}")


class MemCallbackRepository:
    def __init__(self, collection: MemCollection[Callback]):
        self._collection = collection

    def add(self, callback: Callback) -> None:
        with self._collection.lock:
            callback.id = _claim_id(self._collection, callback.id)
            self._collection.records[callback.id] = copy.copy(callback)

    def get(self, callback_id: str) -> Callback:
        with self._collection.lock:
            callback = self._collection.records.get(callback_id)
        if callback is None:
            raise NotFoundError(f"callback {callback_id} not found")
        return copy.copy(callback)

    def list(self) -> list[Callback]:
        with self._collection.lock:
            return [copy.copy(cb) for cb in self._collection.records.values()]


class MemRepositoryFactory:
    """Repositories from one factory share the same collections."""

    def __init__(self):
        self.users: MemCollection[User] = MemCollection()
        self.callbacks: MemCollection[Callback] = MemCollection()

    def create_user_repository(self) -> MemUserRepository:
        return MemUserRepository(self.users)

    def create_callback_repository(self) -> MemCallbackRepository:
        return MemCallbackRepository(self.callbacks)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self.users.lock:
            self.users.records.clear()
        with self.callbacks.lock:
            self.callbacks.records.clear()

    def close(self) -> None:
        pass
