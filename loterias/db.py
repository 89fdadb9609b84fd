"""Storage backends: SQLAlchemy engine or MongoDB client.

Reconciliation writes from worker threads, so the repository opens its own
session per call instead of using a per-request session.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from flask import Flask, current_app
from pymongo import MongoClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from loterias.models.base import Base
from loterias.repositories.resultado_repository import (
    MongoResultRepository,
    ResultRepository,
    SqlResultRepository,
)

logger = logging.getLogger(__name__)

MONGO_COLLECTION = "resultados"


def create_app_engine(database_url: str) -> Engine:
    url = make_url(database_url)

    # In-memory SQLite must share one connection across threads.
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

    return create_engine(database_url, pool_pre_ping=True, future=True)


def get_db_backend(config: Mapping[str, Any]) -> str:
    backend = str(config.get("DB_BACKEND") or "sql").lower().strip()
    if backend not in {"sql", "mongo"}:
        raise RuntimeError(f"Unsupported DB_BACKEND: {backend!r}")
    return backend


def build_repository(config: Mapping[str, Any]) -> tuple[ResultRepository, Any]:
    """Create the configured repository and the handle that owns its connections."""

    if get_db_backend(config) == "mongo":
        client: MongoClient = MongoClient(str(config["MONGODB_URI"]))
        collection = client[str(config["MONGODB_DB"])][MONGO_COLLECTION]
        logger.info("Using MongoDB backend (db=%s)", config["MONGODB_DB"])
        return MongoResultRepository(collection), client

    engine = create_app_engine(str(config["DATABASE_URL"]))
    # Create tables on startup (production would use migrations).
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    logger.info("Using SQL backend (%s)", engine.url.render_as_string(hide_password=True))
    return SqlResultRepository(session_factory), engine


def init_db(app: Flask) -> None:
    """Initialize the result repository for the app."""

    repository, handle = build_repository(app.config)
    app.extensions["result_repository"] = repository
    app.extensions["db_handle"] = handle


def get_repository() -> ResultRepository:
    repository: ResultRepository | None = current_app.extensions.get("result_repository")
    if repository is None:
        raise RuntimeError("Result repository not initialized")
    return repository
