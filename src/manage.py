"""Storefront database management CLI.

Provides commands to create and drop the storage schema and to load the demo
catalogue. Connection settings come from the usual ``STOREFRONT_*`` variables.

Usage:
    python src/manage.py setup-db   # Create all tables (and add missing columns)
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed       # Load the demo catalogue into an empty store
"""

import argparse
import sys

from shared.config import get_settings
from shared.errors import StorageUnavailable


def _connect(settings):
    from storage import RetryPolicy, connect

    return connect(settings, RetryPolicy(max_attempts=1, interval=0))


def setup_database():
    """Create the schema, adding any columns introduced by later revisions."""
    from storage.db import setup_db

    settings = get_settings()
    engine = _connect(settings)
    print(f"Creating schema on {engine.url.render_as_string(hide_password=True)}...")
    setup_db(engine)
    engine.dispose()
    print("Done.")


def drop_database():
    """Drop every table owned by the store."""
    from storage.db import drop_db

    settings = get_settings()
    engine = _connect(settings)
    print(f"Dropping schema on {engine.url.render_as_string(hide_password=True)}...")
    drop_db(engine)
    engine.dispose()
    print("Done.")


def seed_database():
    """Insert the demo products if the catalogue is empty."""
    from catalogue.product.catalog import ProductCatalog
    from catalogue.product.images import ImageStore
    from catalogue.product.seed import seed_catalogue

    settings = get_settings()
    engine = _connect(settings)
    created = seed_catalogue(ProductCatalog(engine, ImageStore.from_settings(settings)))
    engine.dispose()
    if created:
        print(f"Seeded {len(created)} products.")
    else:
        print("Catalogue already has products, nothing to do.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Load the demo catalogue")

    args = parser.parse_args(argv)

    commands = {
        "setup-db": setup_database,
        "drop-db": drop_database,
        "seed": seed_database,
    }

    try:
        commands[args.command]()
    except StorageUnavailable as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
