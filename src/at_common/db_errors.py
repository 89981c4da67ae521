"""Translate storage exceptions into the caller-facing PersistenceError."""

from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from src.at_common.errors import PersistenceError


def to_persistence_error(exc: SQLAlchemyError) -> PersistenceError:
    """Pass the driver's message through (constraint name, check failure, ...)."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return PersistenceError(str(exc.orig))
    return PersistenceError(str(exc) or exc.__class__.__name__)
