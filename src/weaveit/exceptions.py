"""Domain level exceptions and helpers for repository layers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, TypeVar

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "RepositoryError",
    "NotFoundError",
    "IntegrityConstraintViolation",
    "DatabaseOperationError",
    "ensure_found",
    "handle_sqlalchemy_errors",
]

T = TypeVar("T")

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for application specific errors."""


class RepositoryError(AppError):
    """Base class for persistence layer failures."""


class NotFoundError(RepositoryError):
    """Raised when a record could not be located."""


class IntegrityConstraintViolation(RepositoryError):
    """Raised when a database constraint is violated."""


class DatabaseOperationError(RepositoryError):
    """Raised for unexpected database errors."""


def ensure_found(record: T | None, *, entity: str, identifier: str) -> T:
    """Return ``record`` or raise :class:`NotFoundError` naming the entity."""
    if record is None:
        raise NotFoundError(f"{entity} '{identifier}' not found")
    return record


def _label(entity: str | None, message: str) -> str:
    return f"{entity}: {message}" if entity else message


def _translate_sqlalchemy_error(exc: sa_exc.SQLAlchemyError, *, entity: str | None) -> RepositoryError:
    if isinstance(exc, sa_exc.IntegrityError):
        return IntegrityConstraintViolation(_label(entity, "integrity constraint violated"))
    if isinstance(exc, sa_exc.DBAPIError):
        driver_error = type(exc.orig).__name__ if exc.orig is not None else "unknown"
        return DatabaseOperationError(
            _label(entity, f"database operation failed ({driver_error})")
        )
    return RepositoryError(_label(entity, str(exc)))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as :class:`RepositoryError` subclasses."""
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        logger.warning(
            "repository.sqlalchemy_error",
            extra={"entity": entity, "error_type": type(exc).__name__},
        )
        raise _translate_sqlalchemy_error(exc, entity=entity) from exc
