"""
MongoDB-backed repositories.

One MongoSession (a pooled, thread-safe pymongo client plus a database
handle) is opened at startup and shared by every repository the factory
hands out.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo import errors as mongo_errors
from pymongo.database import Database

from httpcallback.errors import (
    BackendConnectionError,
    BackendUnavailableError,
    DuplicateKeyError,
    InvalidIdError,
    NotFoundError,
)
from httpcallback.models import AuthInfo, Callback, User

logger = logging.getLogger(__name__)

USERS_COLLECTION = "Users"
CALLBACKS_COLLECTION = "Callbacks"


class MongoSession:
    def __init__(self, client: MongoClient, database_name: str):
        self.client = client
        self.database: Database = client[database_name]

    def close(self) -> None:
        self.client.close()


def open_session(
    server_url: str, database_name: str, *, timeout_ms: int = 5000
) -> MongoSession:
    """
    Connect to MongoDB and verify the server answers a ping.

    Raises BackendConnectionError when no server can be reached.
    """
    client = MongoClient(
        server_url,
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
        tz_aware=True,
    )
    try:
        client.admin.command("ping")
    except mongo_errors.PyMongoError as exc:
        client.close()
        raise BackendConnectionError(
            f"unable to connect to mongo at {server_url}: {exc}"
        ) from exc
    return MongoSession(client, database_name)


def _object_id(value: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def _new_object_id(value: Optional[str]) -> ObjectId:
    if value is None:
        return ObjectId()
    oid = _object_id(value)
    if oid is None:
        raise InvalidIdError(f"{value!r} is not a valid object-id")
    return oid


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """Mongo stores UTC; clients without tz_aware hand back naive values."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MongoUserRepository:
    def __init__(self, session: MongoSession):
        self.session = session
        self.collection = session.database[USERS_COLLECTION]

    def _to_user(self, doc: dict) -> User:
        return User(
            id=str(doc["_id"]),
            username=doc["username"],
            auth_token=doc["authToken"],
        )

    def add(self, user: User) -> None:
        oid = _new_object_id(user.id)
        try:
            self.collection.insert_one(
                {"_id": oid, "username": user.username, "authToken": user.auth_token}
            )
        except mongo_errors.DuplicateKeyError as exc:
            raise DuplicateKeyError(
                f"user {user.username!r} (id {oid}) already exists"
            ) from exc
        except mongo_errors.ConnectionFailure as exc:
            raise BackendUnavailableError(str(exc)) from exc
        user.id = str(oid)

    def get(self, user_id: str) -> User:
        oid = _object_id(user_id)
        if oid is None:
            raise NotFoundError(f"user {user_id} not found")
        try:
            doc = self.collection.find_one({"_id": oid})
        except mongo_errors.ConnectionFailure as exc:
            raise BackendUnavailableError(str(exc)) from exc
        if doc is None:
            raise NotFoundError(f"user {user_id} not found")
        return self._to_user(doc)

    def list(self) -> list[User]:
        try:
            return [self._to_user(doc) for doc in self.collection.find({})]
        except mongo_errors.ConnectionFailure as exc:
            raise BackendUnavailableError(str(exc)) from exc

    def get_by_auth(self, username: str, auth_token: str) -> AuthInfo:
        try:
            doc = self.collection.find_one(
                {"username": username, "authToken": auth_token},
                projection={"_id": 1, "username": 1},
            )
        except mongo_errors.ConnectionFailure as exc:
            raise BackendUnavailableError(str(exc)) from exc
        if doc is None:
            raise NotFoundError(f"no user matches credentials for {username!r}")
        return AuthInfo(user_id=str(doc["_id"]), username=doc["username"])


class MongoCallbackRepository:
    def __init__(self, session: MongoSession):
        self.session = session
        self.collection = session.database[CALLBACKS_COLLECTION]

    def _to_callback(self, doc: dict) -> Callback:
        return Callback(
            id=str(doc["_id"]),
            user_id=str(doc["userId"]),
            url=doc["url"],
            when=_utc(doc.get("when")),
            created_at=doc.get("createdAt") or time.time(),
        )

    def add(self, callback: Callback) -> None:
        oid = _new_object_id(callback.id)
        owner = _object_id(callback.user_id) or callback.user_id
        try:
            self.collection.insert_one(
                {
                    "_id": oid,
                    "userId": owner,
                    "url": callback.url,
                    "when": callback.when,
                    "createdAt": callback.created_at,
                }
            )
        except mongo_errors.DuplicateKeyError as exc:
            raise DuplicateKeyError(str(exc)) from exc
        except mongo_errors.ConnectionFailure as exc:
            raise BackendUnavailableError(str(exc)) from exc
        callback.id = str(oid)

    def get(self, callback_id: str) -> Callback:
        oid = _object_id(callback_id)
        if oid is None:
            raise NotFoundError(f"callback {callback_id} not found")
        try:
            doc = self.collection.find_one({"_id": oid})
        except mongo_errors.ConnectionFailure as exc:
            raise BackendUnavailableError(str(exc)) from exc
        if doc is None:
            raise NotFoundError(f"callback {callback_id} not found")
        return self._to_callback(doc)

    def list(self) -> list[Callback]:
        try:
            return [self._to_callback(doc) for doc in self.collection.find({})]
        except mongo_errors.ConnectionFailure as exc:
            raise BackendUnavailableError(str(exc)) from exc


class MongoRepositoryFactory:
    def __init__(self, session: MongoSession):
        self.session = session
        try:
            session.database[USERS_COLLECTION].create_index(
                [("username", ASCENDING)], unique=True
            )
        except mongo_errors.PyMongoError as exc:
            raise BackendConnectionError(
                f"unable to prepare {USERS_COLLECTION} collection: {exc}"
            ) from exc

    def create_user_repository(self) -> MongoUserRepository:
        return MongoUserRepository(self.session)

    def create_callback_repository(self) -> MongoCallbackRepository:
        return MongoCallbackRepository(self.session)

    def close(self) -> None:
        logger.debug("Closing mongo session")
        self.session.close()
