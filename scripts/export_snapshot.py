#!/usr/bin/env python3
"""Dump the matchup table, recorded results and standings as JSON."""

import argparse
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from matchplay.leaderboard import build_standings
from matchplay.main import build_services
from matchplay.settings import load_settings


def export_snapshot() -> dict:
    services = build_services(load_settings())
    schedule = services.schedule
    results = services.store.fetch_match_results(schedule.year)
    players = schedule.players
    return {
        "tournament": {
            "year": schedule.year,
            "name": schedule.name,
            "course": schedule.course,
            "point_scale": services.scale.label,
        },
        "players": [
            {"id": p.player_id, "name": p.name, "handicap": p.handicap}
            for p in players.values()
        ],
        "matchups": [
            {
                "foursome_id": m.foursome_id,
                "player1": m.player1_id,
                "player2": m.player2_id,
                "hole_segment": m.hole_segment,
                "strokes": m.stroke_description,
            }
            for m in schedule.matchups
        ],
        "match_results": [result.as_dict() for result in results],
        "standings": [
            standing.as_dict()
            for standing in build_standings(results, schedule.matchups, players)
        ],
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Dump current match play state.")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Path to write the JSON export (defaults to stdout).",
    )
    args = parser.parse_args()

    payload = json.dumps(export_snapshot(), default=str, indent=2)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        print(f"Snapshot saved to {args.output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
