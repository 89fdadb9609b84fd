"""Centralized error handlers."""

from __future__ import annotations

import logging

from flask import Flask, request
from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from loterias.errors import AppError, StorageUnavailableError
from loterias.utils.responses import fail

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        return fail(exc.code, exc.message, exc.status_code, exc.details)

    @app.errorhandler(SQLAlchemyError)
    def _handle_sql_error(exc: SQLAlchemyError):
        logger.error("SQL store error on %s: %s", request.path, exc)
        wrapped = StorageUnavailableError("SQL")
        return fail(wrapped.code, wrapped.message, wrapped.status_code)

    @app.errorhandler(PyMongoError)
    def _handle_mongo_error(exc: PyMongoError):
        logger.error("Mongo store error on %s: %s", request.path, exc)
        wrapped = StorageUnavailableError("MongoDB")
        return fail(wrapped.code, wrapped.message, wrapped.status_code)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        status = int(exc.code or 500)
        if status == 404:
            return fail("not_found", f"No route for {request.path}", 404)

        return fail(
            "http_error",
            exc.description or "HTTP error",
            status,
            details={"name": exc.name},
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.exception("Unhandled exception on %s", request.path)
        return fail("internal_error", "Internal server error", 500)
