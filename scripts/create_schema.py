#!/usr/bin/env python3
"""Ensure the result store schema exists and echo the DDL for reference."""

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from matchplay import db, local_store
from matchplay.db import open_store
from matchplay.settings import load_settings


def main() -> None:
    settings = load_settings()
    open_store(settings.database_url).ensure_schema()
    db_path = local_store.sqlite_path(settings.database_url)
    print("Schema ensured.")
    if db_path:
        print(f"Database file: {db_path}")
        statements = local_store.SCHEMA_STATEMENTS
    else:
        print(f"Database url: {settings.database_url}")
        statements = db.SCHEMA_STATEMENTS

    print("\nSchema DDL dump:")
    for statement in statements:
        print(statement.strip())


if __name__ == "__main__":
    main()
