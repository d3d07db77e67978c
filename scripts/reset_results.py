#!/usr/bin/env python3
"""Utility to clear recorded match results for a tournament year."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from matchplay.db import open_store
from matchplay.matchups import load_schedule
from matchplay.settings import load_settings


def main() -> None:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        description="Delete stored match results for a tournament year so standings start over."
    )
    parser.add_argument("--year", type=int, help="Tournament year (defaults to the configured year).")
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Required, this command deletes match history.",
    )
    args = parser.parse_args()

    if not args.confirm:
        parser.error("This command deletes match history. Re-run with --confirm to proceed.")

    year = args.year or load_schedule(settings.tournament_config).year
    store = open_store(settings.database_url)
    store.ensure_schema()
    deleted = store.delete_match_results(year)
    print(f"Cleared {deleted} result{'s' if deleted != 1 else ''} for {year}.")


if __name__ == "__main__":
    main()
