"""
Repository interfaces shared by the MongoDB and in-memory backends.

Controllers are written against these protocols only. Which backend sits
behind them is decided once, when the RepositoryFactory is built.
"""

from __future__ import annotations

from typing import Protocol

from httpcallback.models import AuthInfo, Callback, User


class UserRepository(Protocol):
    """Interface for user storage."""

    def add(self, user: User) -> None:
        ...

    def get(self, user_id: str) -> User:
        ...

    def list(self) -> list[User]:
        ...

    def get_by_auth(self, username: str, auth_token: str) -> AuthInfo:
        ...


class CallbackRepository(Protocol):
    """Interface for callback storage."""

    def add(self, callback: Callback) -> None:
        ...

    def get(self, callback_id: str) -> Callback:
        ...

    def list(self) -> list[Callback]:
        ...


class RepositoryFactory(Protocol):
    """Builds repositories bound to one backend."""

    def create_user_repository(self) -> UserRepository:
        ...

    def create_callback_repository(self) -> CallbackRepository:
        ...

    def close(self) -> None:
        ...
