"""Connection scopes used by the catalogue and ordering components.

``transaction`` is the unit of work for writes: every statement issued on the
yielded connection commits together or not at all. Storage faults are
translated into the shared error taxonomy here, so components only ever see
``StorageUnavailable`` or ``InternalFailure``.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from shared.errors import InternalFailure, StorageUnavailable, StoreError, summarize

logger = structlog.get_logger(__name__)

_UNREACHABLE = (OperationalError, DisconnectionError, PoolTimeoutError)


def _checkout(engine: Engine | None) -> Connection:
    if engine is None:
        raise StorageUnavailable("Storage is not connected")
    try:
        return engine.connect()
    except SQLAlchemyError as exc:
        logger.error("Could not obtain a storage connection", error=summarize(exc))
        raise StorageUnavailable("Storage is unreachable") from exc


@contextmanager
def transaction(engine: Engine | None) -> Iterator[Connection]:
    """All-or-nothing write scope.

    Any exception rolls back every statement issued inside the block. Storage
    errors surface as ``InternalFailure``; taxonomy errors pass through.
    """
    connection = _checkout(engine)
    try:
        with connection.begin():
            yield connection
    except StoreError:
        raise
    except SQLAlchemyError as exc:
        logger.error("Storage write failed, transaction rolled back", error=summarize(exc))
        raise InternalFailure("The write could not be completed") from exc
    finally:
        connection.close()


@contextmanager
def reading(engine: Engine | None) -> Iterator[Connection]:
    """Read-only scope; nothing issued here is committed."""
    connection = _checkout(engine)
    try:
        yield connection
    except StoreError:
        raise
    except _UNREACHABLE as exc:
        logger.error("Storage read failed", error=summarize(exc))
        raise StorageUnavailable("Storage is unreachable") from exc
    except SQLAlchemyError as exc:
        logger.error("Storage read failed", error=summarize(exc))
        raise InternalFailure("The read could not be completed") from exc
    finally:
        connection.close()
