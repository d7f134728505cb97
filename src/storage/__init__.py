"""Relational storage: schema, resilient bootstrap and transaction scopes."""

from storage.bootstrap import RetryPolicy, SchemaGate, connect, ensure_schema, open_store, ping
from storage.transaction import reading, transaction

__all__ = ["RetryPolicy", "SchemaGate", "connect", "ensure_schema", "open_store", "ping", "reading", "transaction"]
