#!/usr/bin/env python3
"""Import stroke indexes for the tournament course from the Golf Course API."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from matchplay.course_sync import import_course_holes
from matchplay.db import open_store
from matchplay.golf_api import GolfApiError
from matchplay.matchups import load_schedule
from matchplay.settings import load_settings


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("course_id", type=int, help="Golf Course API course id.")
    args = parser.parse_args()

    settings = load_settings()
    schedule = load_schedule(settings.tournament_config)
    store = open_store(settings.database_url)
    store.ensure_schema()
    try:
        summary = import_course_holes(store, args.course_id, settings.golf_api_key, schedule.course)
    except GolfApiError as exc:
        raise SystemExit(f"Import failed: {exc}")
    print(f"Imported {len(summary['holes'])} holes for {summary['course_name']} ({summary['tee_name']} tees).")


if __name__ == "__main__":
    main()
