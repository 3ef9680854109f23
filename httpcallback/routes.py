"""
HTTP routes for the httpcallback API.

Every route hands its controller call to dispatch(), which is the only place
a response gets written.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from httpcallback.controllers import CallbackController, HomeController, UserController
from httpcallback.dependencies import (
    get_callback_controller,
    get_home_controller,
    get_user_controller,
)
from httpcallback.dispatch import dispatch
from httpcallback.schemas import AddUserRequest, CallbackRequest

router = APIRouter()

basic_auth = HTTPBasic(auto_error=False)


@router.get("/")
def index(home: HomeController = Depends(get_home_controller)) -> Response:
    return dispatch(home.index)


@router.get("/ping")
def ping(home: HomeController = Depends(get_home_controller)) -> Response:
    return dispatch(home.ping)


@router.get("/user/{user_id}")
def get_user(
    user_id: str, users: UserController = Depends(get_user_controller)
) -> Response:
    return dispatch(users.get_user, user_id)


@router.post("/users")
def add_user(
    payload: AddUserRequest, users: UserController = Depends(get_user_controller)
) -> Response:
    return dispatch(users.add_user, payload)


@router.get("/callbacks")
def list_callbacks(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    callbacks: CallbackController = Depends(get_callback_controller),
) -> Response:
    return dispatch(callbacks.list_callbacks, credentials)


@router.post("/callbacks")
def new_callback(
    payload: CallbackRequest,
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    callbacks: CallbackController = Depends(get_callback_controller),
) -> Response:
    return dispatch(callbacks.new_callback, credentials, payload)
