from sqlalchemy.engine import Engine

from storage.bootstrap import ensure_schema
from storage.schema import metadata


def setup_db(engine: Engine):
    """Setup database schema"""
    ensure_schema(engine)


def drop_db(engine: Engine):
    """Drop database schema"""
    metadata.drop_all(engine, checkfirst=True)
