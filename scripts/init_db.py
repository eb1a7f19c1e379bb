#!/usr/bin/env python3
"""
Initialize the finance tracker database.

Usage:
    python scripts/init_db.py [DB_PATH]

Without DB_PATH the database_path from settings.json is used.
"""
import sys

from finance_tracker.config.settings import ConfigLoader
from finance_tracker.database.connection import SCHEMA_PATH, DatabaseConfig, DatabaseManager


def main():
    """Create the schema in a new database, or report the version of an existing one."""
    if len(sys.argv) > 1:
        config = DatabaseConfig(sys.argv[1])
    else:
        config = DatabaseConfig.from_settings(ConfigLoader.load_settings())

    print(f"Initializing database at: {config.db_path}")
    print(f"Schema: {SCHEMA_PATH}")

    with DatabaseManager(config) as db:
        version = db.initialize()

    print(f"✓ Database ready (schema version {version})")


if __name__ == "__main__":
    main()
