"""
Controllers: business logic that returns action results.

Controllers never touch the response. Anything the client caused (unknown
id, taken username, bad credentials) comes back as a StatusResult; raised
exceptions are left for dispatch to turn into a 500.
"""

from __future__ import annotations

import logging
import secrets
import time
from datetime import timedelta
from typing import Optional

from fastapi.security import HTTPBasicCredentials

from httpcallback.db import CallbackRepository, UserRepository
from httpcallback.errors import DuplicateKeyError, NotFoundError
from httpcallback.models import AuthInfo, Callback, User
from httpcallback.results import ActionResult, JsonResult, StatusResult
from httpcallback.schemas import (
    AddUserRequest,
    AddUserResponse,
    CallbackRequest,
    PingResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)


class HomeController:
    def __init__(self):
        self.start_time = time.monotonic()

    def index(self) -> ActionResult:
        uptime = timedelta(seconds=int(time.monotonic() - self.start_time))
        return JsonResult({"message": "welcome!", "uptime": str(uptime)})

    def ping(self) -> ActionResult:
        return JsonResult(PingResponse(message="pong"))


class UserController:
    def __init__(self, users: UserRepository):
        self.users = users

    def add_user(self, args: AddUserRequest) -> ActionResult:
        user = User(username=args.username, auth_token=secrets.token_hex(16))
        try:
            self.users.add(user)
        except DuplicateKeyError:
            logger.info("Username %r already taken", args.username)
            return StatusResult(409)
        return JsonResult(
            AddUserResponse(id=user.id, username=user.username, auth_token=user.auth_token),
            status_code=201,
        )

    def get_user(self, user_id: str) -> ActionResult:
        try:
            user = self.users.get(user_id)
        except NotFoundError:
            return StatusResult(404)
        return JsonResult(UserResponse(id=user.id, username=user.username))


class CallbackController:
    """Callback endpoints authenticate with HTTP Basic username:authToken."""

    def __init__(self, users: UserRepository, callbacks: CallbackRepository):
        self.users = users
        self.callbacks = callbacks

    def _authenticate(
        self, credentials: Optional[HTTPBasicCredentials]
    ) -> Optional[AuthInfo]:
        if credentials is None:
            return None
        try:
            return self.users.get_by_auth(credentials.username, credentials.password)
        except NotFoundError:
            logger.info("Rejected credentials for %r", credentials.username)
            return None

    def list_callbacks(
        self, credentials: Optional[HTTPBasicCredentials]
    ) -> ActionResult:
        auth = self._authenticate(credentials)
        if auth is None:
            return StatusResult(401)
        owned = [cb.as_dict() for cb in self.callbacks.list() if cb.user_id == auth.user_id]
        return JsonResult(owned)

    def new_callback(
        self, credentials: Optional[HTTPBasicCredentials], args: CallbackRequest
    ) -> ActionResult:
        auth = self._authenticate(credentials)
        if auth is None:
            return StatusResult(401)
        callback = Callback(user_id=auth.user_id, url=args.url, when=args.when)
        self.callbacks.add(callback)
        logger.debug("User %s registered callback %s", auth.username, callback.id)
        return JsonResult(callback.as_dict(), status_code=201)
