"""Resilient storage bootstrap.

``connect`` opens the process-wide connection pool (a SQLAlchemy ``Engine``)
and makes sure every relation exists before anything else runs. The store may
come up after the application does, so connecting is retried under an
explicit ``RetryPolicy`` instead of failing on the first refusal.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from shared.config import Settings
from shared.errors import StorageUnavailable, summarize
from storage.schema import LATER_COLUMNS, metadata

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try connecting, and how long to wait in between.

    The wait before retry ``n`` is ``interval * backoff ** (n - 1)``; the
    default backoff of 1.0 keeps the interval fixed.
    """

    max_attempts: int = 10
    interval: float = 5.0
    backoff: float = 1.0
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.connect_attempts,
            interval=settings.connect_interval,
            backoff=settings.connect_backoff,
        )

    def delay_for(self, attempt: int) -> float:
        return self.interval * self.backoff ** (attempt - 1)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(settings: Settings) -> Engine:
    """Build the pooled engine described by ``settings``. Does not connect."""
    url = make_url(settings.database_url)
    options = {"pool_pre_ping": True}
    if url.get_backend_name() != "sqlite":
        options.update(pool_size=settings.pool_size, pool_timeout=settings.pool_timeout)

    engine = create_engine(url, **options)
    if engine.dialect.name == "sqlite":
        # Cascading deletes of order items rely on FK enforcement.
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def ensure_schema(engine: Engine) -> None:
    """Create missing tables, then add columns introduced by later revisions.

    Safe to run on every start.
    """
    metadata.create_all(engine, checkfirst=True)

    inspector = inspect(engine)
    for table_name, column_names in LATER_COLUMNS.items():
        existing = {column["name"] for column in inspector.get_columns(table_name)}
        table = metadata.tables[table_name]
        for name in column_names:
            if name in existing:
                continue
            column_type = table.c[name].type.compile(dialect=engine.dialect)
            with engine.begin() as conn:
                conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {name} {column_type}"))
            logger.info("Added missing column", table=table_name, column=name)

    logger.debug("Schema verified", tables=sorted(metadata.tables))


def connect(
    settings: Settings,
    policy: RetryPolicy | None = None,
    engine_factory: Callable[[Settings], Engine] = create_store_engine,
) -> Engine:
    """Open the connection pool and ensure the schema, retrying on failure.

    Raises ``StorageUnavailable`` once every attempt has failed. The caller
    decides whether to run degraded or abort.
    """
    policy = policy or RetryPolicy.from_settings(settings)
    last_error = None

    for attempt in range(1, policy.max_attempts + 1):
        engine = None
        logger.info("Connecting to storage", attempt=attempt, max_attempts=policy.max_attempts)
        try:
            engine = engine_factory(settings)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            ensure_schema(engine)
        except SQLAlchemyError as exc:
            last_error = exc
            logger.warning(
                "Storage connection attempt failed",
                attempt=attempt,
                remaining=policy.max_attempts - attempt,
                error=summarize(exc),
            )
            if engine is not None:
                engine.dispose()
            if attempt < policy.max_attempts:
                delay = policy.delay_for(attempt)
                logger.info("Retrying storage connection", delay_seconds=delay)
                policy.sleep(delay)
            continue

        logger.info("Storage connected", attempt=attempt, dialect=engine.dialect.name)
        return engine

    logger.error("Storage unavailable after all attempts", attempts=policy.max_attempts)
    raise StorageUnavailable(f"Storage unreachable after {policy.max_attempts} attempts") from last_error


def ping(engine: Engine | None) -> bool:
    """Round-trip to the store. Never raises."""
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Storage ping failed", error=summarize(exc))
        return False
    return True


class SchemaGate:
    """Ensures the schema once, on first use after the store becomes reachable.

    ``connect`` gives up after its last attempt, but the engine it would have
    used still connects lazily. The gate lets a degraded process recover
    without a restart.
    """

    def __init__(self, engine: Engine | None, ready: bool = False):
        self.engine = engine
        self.ready = ready
        self._lock = threading.Lock()

    def ensure(self) -> bool:
        """True once the schema is known to exist. Never raises."""
        if self.ready:
            return True
        if self.engine is None:
            return False
        with self._lock:
            if self.ready:
                return True
            try:
                ensure_schema(self.engine)
            except SQLAlchemyError as exc:
                logger.warning("Storage still unavailable", error=summarize(exc))
                return False
            self.ready = True
        logger.info("Storage recovered, schema ensured", dialect=self.engine.dialect.name)
        return True


def open_store(
    settings: Settings,
    policy: RetryPolicy | None = None,
    engine_factory: Callable[[Settings], Engine] = create_store_engine,
) -> SchemaGate:
    """Connect with retries; on failure fall back to a lazily connecting engine.

    The returned gate is ready when ``connect`` succeeded. Otherwise its engine
    is unverified (or ``None`` if one cannot even be built) and the schema is
    ensured on first use.
    """
    try:
        return SchemaGate(connect(settings, policy, engine_factory), ready=True)
    except StorageUnavailable:
        pass
    try:
        engine = engine_factory(settings)
    except SQLAlchemyError as exc:
        logger.error("Storage engine could not be built", error=summarize(exc))
        engine = None
    logger.error("Starting without storage; it will be used once it answers")
    return SchemaGate(engine)
