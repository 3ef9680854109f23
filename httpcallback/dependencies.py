"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from httpcallback.config import Settings
from httpcallback.controllers import CallbackController, HomeController, UserController
from httpcallback.db import RepositoryFactory
from httpcallback.errors import BackendConnectionError
from httpcallback.memory import MemRepositoryFactory
from httpcallback.mongo import MongoRepositoryFactory, open_session

logger = logging.getLogger(__name__)


def create_repository_factory(settings: Settings) -> RepositoryFactory:
    """
    Pick the storage backend once, from settings.

    Raises BackendConnectionError when mongo is selected but unreachable.
    """
    mongo = settings.mongo
    if not mongo.use_mongo:
        logger.debug("Running with in-memory data store")
        return MemRepositoryFactory()

    logger.debug("Running with mongo data store")
    logger.debug("Connecting to mongo database %s", mongo.database_name)
    try:
        session = open_session(
            mongo.server_url, mongo.database_name, timeout_ms=mongo.connect_timeout_ms
        )
    except BackendConnectionError as exc:
        logger.error("Unable to connect to mongo: %s", exc)
        raise
    try:
        factory = MongoRepositoryFactory(session)
    except BackendConnectionError as exc:
        logger.error("Unable to prepare mongo database: %s", exc)
        session.close()
        raise
    logger.debug("Connected successfully")
    return factory


@dataclass
class Service:
    home: HomeController
    users: UserController
    callbacks: CallbackController


def create_service(factory: RepositoryFactory) -> Service:
    users = factory.create_user_repository()
    return Service(
        home=HomeController(),
        users=UserController(users),
        callbacks=CallbackController(users, factory.create_callback_repository()),
    )


def get_service(request: Request) -> Service:
    return request.app.state.service


def get_home_controller(request: Request) -> HomeController:
    return get_service(request).home


def get_user_controller(request: Request) -> UserController:
    return get_service(request).users


def get_callback_controller(request: Request) -> CallbackController:
    return get_service(request).callbacks
