import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import mongomock
from pymongo import errors as mongo_errors

from httpcallback.errors import (
    BackendConnectionError,
    BackendUnavailableError,
    DuplicateKeyError,
    InvalidIdError,
    NotFoundError,
)
from httpcallback.models import AuthInfo, Callback, User
from httpcallback.mongo import MongoRepositoryFactory, MongoSession, open_session


class MongoRepositoryTests(unittest.TestCase):
    """
    Runs the mongo repositories against mongomock instead of a live server.
    """

    def setUp(self):
        self.session = MongoSession(mongomock.MongoClient(), "httpcallback_test")
        self.factory = MongoRepositoryFactory(self.session)
        self.users = self.factory.create_user_repository()
        self.callbacks = self.factory.create_callback_repository()

    def test_list_on_empty_database_is_empty_list(self):
        self.assertEqual(self.users.list(), [])
        self.assertEqual(self.callbacks.list(), [])

    def test_add_and_get_user(self):
        user = User(username="alice", auth_token="t0k3n")
        self.users.add(user)
        self.assertIsNotNone(user.id)
        self.assertEqual(self.users.get(user.id), user)

    def test_user_document_shape(self):
        user = User(username="alice", auth_token="t0k3n")
        self.users.add(user)
        doc = self.session.database["Users"].find_one({"username": "alice"})
        self.assertEqual(set(doc), {"_id", "username", "authToken"})
        self.assertEqual(str(doc["_id"]), user.id)

    def test_duplicate_username_rejected(self):
        self.users.add(User(username="alice", auth_token="a"))
        with self.assertRaises(DuplicateKeyError):
            self.users.add(User(username="alice", auth_token="b"))

    def test_get_malformed_or_unknown_id_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.users.get("not-an-object-id")
        with self.assertRaises(NotFoundError):
            self.users.get("5f0000000000000000000000")

    def test_get_by_auth(self):
        user = User(username="bob", auth_token="secret")
        self.users.add(user)
        self.assertEqual(
            self.users.get_by_auth("bob", "secret"),
            AuthInfo(user_id=user.id, username="bob"),
        )
        with self.assertRaises(NotFoundError):
            self.users.get_by_auth("bob", "nope")

    def test_callback_add_get_list(self):
        owner = User(username="carol", auth_token="x")
        self.users.add(owner)
        callback = Callback(user_id=owner.id, url="http://example.test/hook")
        self.callbacks.add(callback)

        fetched = self.callbacks.get(callback.id)
        self.assertEqual(fetched.user_id, owner.id)
        self.assertEqual(fetched.url, "http://example.test/hook")
        self.assertEqual([cb.id for cb in self.callbacks.list()], [callback.id])

    def test_connection_failure_maps_to_backend_unavailable(self):
        self.users.collection = MagicMock()
        self.users.collection.insert_one.side_effect = mongo_errors.AutoReconnect("down")
        self.users.collection.find_one.side_effect = (
            mongo_errors.ServerSelectionTimeoutError("down")
        )
        with self.assertRaises(BackendUnavailableError):
            self.users.add(User(username="x", auth_token="y"))
        with self.assertRaises(BackendUnavailableError):
            self.users.get("5f0000000000000000000000")
        with self.assertRaises(BackendUnavailableError):
            self.users.get_by_auth("x", "y")

    def test_caller_set_id_that_exists_is_rejected(self):
        alice = User(username="alice", auth_token="a")
        self.users.add(alice)
        with self.assertRaises(DuplicateKeyError):
            self.users.add(User(username="bob", auth_token="b", id=alice.id))
        self.assertEqual(self.users.get(alice.id).username, "alice")

    def test_caller_set_malformed_id_is_rejected(self):
        with self.assertRaises(InvalidIdError):
            self.users.add(User(username="alice", auth_token="a", id="not-hex"))
        with self.assertRaises(InvalidIdError):
            self.callbacks.add(Callback(user_id="owner", url="http://a.test", id="nope"))
        self.assertEqual(self.users.list(), [])

    def test_callback_when_is_returned_as_utc(self):
        when = datetime(2030, 1, 1, 12, 30, tzinfo=timezone.utc)
        callback = Callback(user_id="5f0000000000000000000000", url="http://a.test", when=when)
        self.callbacks.add(callback)

        fetched = self.callbacks.get(callback.id)
        self.assertEqual(fetched.when, when)
        self.assertEqual(fetched.as_dict()["when"], "2030-01-01T12:30:00+00:00")
        self.assertEqual(self.callbacks.list()[0].as_dict()["when"], "2030-01-01T12:30:00+00:00")

    def test_callback_connection_failure_maps_to_backend_unavailable(self):
        self.callbacks.collection = MagicMock()
        self.callbacks.collection.insert_one.side_effect = mongo_errors.AutoReconnect("down")
        self.callbacks.collection.find_one.side_effect = mongo_errors.AutoReconnect("down")
        self.callbacks.collection.find.side_effect = (
            mongo_errors.ServerSelectionTimeoutError("down")
        )
        with self.assertRaises(BackendUnavailableError):
            self.callbacks.add(Callback(user_id="owner", url="http://a.test"))
        with self.assertRaises(BackendUnavailableError):
            self.callbacks.get("5f0000000000000000000000")
        with self.assertRaises(BackendUnavailableError):
            self.callbacks.list()


class MongoRepositoryFactoryTests(unittest.TestCase):
    def test_index_failure_raises_connection_error(self):
        session = MagicMock()
        session.database.__getitem__.return_value.create_index.side_effect = (
            mongo_errors.OperationFailure("command createIndexes requires authentication")
        )
        with self.assertRaises(BackendConnectionError):
            MongoRepositoryFactory(session)

    def test_existing_duplicate_usernames_raise_connection_error(self):
        session = MagicMock()
        session.database.__getitem__.return_value.create_index.side_effect = (
            mongo_errors.DuplicateKeyError("E11000 duplicate key error index: username_1")
        )
        with self.assertRaises(BackendConnectionError):
            MongoRepositoryFactory(session)


class OpenSessionTests(unittest.TestCase):
    @patch("httpcallback.mongo.MongoClient")
    def test_unreachable_server_raises_connection_error(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.admin.command.side_effect = mongo_errors.ServerSelectionTimeoutError(
            "no servers"
        )
        with self.assertRaises(BackendConnectionError):
            open_session("mongodb://nowhere:27017", "db", timeout_ms=10)
        client.close.assert_called_once()

    @patch("httpcallback.mongo.MongoClient")
    def test_successful_ping_returns_session(self, mock_client_cls):
        client = mock_client_cls.return_value
        session = open_session("mongodb://localhost:27017", "httpcallback")
        client.admin.command.assert_called_once_with("ping")
        self.assertIs(session.client, client)
        client.__getitem__.assert_called_with("httpcallback")


if __name__ == "__main__":
    unittest.main()
