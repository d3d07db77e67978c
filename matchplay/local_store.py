"""SQLite result store so the service can run without Postgres (local kiosk, tests)."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from matchplay.course import CourseHole, course_holes_from_rows
from matchplay.scoring import MatchResult

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS match_results (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        tournament_year INTEGER NOT NULL,
        foursome_id INTEGER NOT NULL,
        player1_id INTEGER NOT NULL,
        player2_id INTEGER NOT NULL,
        player1_handicap INTEGER NOT NULL,
        player2_handicap INTEGER NOT NULL,
        hole_segment TEXT NOT NULL,
        strokes_given INTEGER NOT NULL DEFAULT 0,
        stroke_recipient_id INTEGER,
        stroke_holes TEXT NOT NULL DEFAULT '[]',
        player1_gross_score INTEGER NOT NULL,
        player2_gross_score INTEGER NOT NULL,
        player1_net_score INTEGER NOT NULL,
        player2_net_score INTEGER NOT NULL,
        winner_id INTEGER,
        player1_points REAL NOT NULL,
        player2_points REAL NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS match_results_matchup_key
    ON match_results (tournament_year, foursome_id, player1_id, player2_id, hole_segment);
    """,
    """
    CREATE TABLE IF NOT EXISTS course_holes (
        course_name TEXT NOT NULL,
        hole_number INTEGER NOT NULL,
        par INTEGER NOT NULL,
        handicap INTEGER NOT NULL,
        PRIMARY KEY (course_name, hole_number)
    );
    """,
]


def sqlite_path(database_url: str) -> Path | None:
    """Return the file path behind a sqlite URL, or None for any other scheme."""
    for prefix in ("sqlite:///", "sqlite://", "sqlite:"):
        if database_url.startswith(prefix):
            return Path(database_url[len(prefix):]).resolve()
    return None


def _row_to_result(row: sqlite3.Row) -> MatchResult:
    return MatchResult(
        id=row["id"],
        tournament_year=row["tournament_year"],
        foursome_id=row["foursome_id"],
        player1_id=row["player1_id"],
        player2_id=row["player2_id"],
        player1_handicap=row["player1_handicap"],
        player2_handicap=row["player2_handicap"],
        hole_segment=row["hole_segment"],
        strokes_given=row["strokes_given"],
        stroke_recipient_id=row["stroke_recipient_id"],
        stroke_holes=json.loads(row["stroke_holes"] or "[]"),
        player1_gross_score=row["player1_gross_score"],
        player2_gross_score=row["player2_gross_score"],
        player1_net_score=row["player1_net_score"],
        player2_net_score=row["player2_net_score"],
        winner_id=row["winner_id"],
        points_awarded={"player1": row["player1_points"], "player2": row["player2_points"]},
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class SqliteResultStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and is always closed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        with self._connect() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(statement)

    def insert_match_result(self, result: MatchResult) -> int | None:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO match_results (
                    tournament_year, foursome_id, player1_id, player2_id,
                    player1_handicap, player2_handicap, hole_segment,
                    strokes_given, stroke_recipient_id, stroke_holes,
                    player1_gross_score, player2_gross_score,
                    player1_net_score, player2_net_score, winner_id,
                    player1_points, player2_points, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    result.tournament_year,
                    result.foursome_id,
                    result.player1_id,
                    result.player2_id,
                    result.player1_handicap,
                    result.player2_handicap,
                    result.hole_segment,
                    result.strokes_given,
                    result.stroke_recipient_id,
                    json.dumps(list(result.stroke_holes)),
                    result.player1_gross_score,
                    result.player2_gross_score,
                    result.player1_net_score,
                    result.player2_net_score,
                    result.winner_id,
                    result.points_awarded["player1"],
                    result.points_awarded["player2"],
                    result.created_at.isoformat(),
                ),
            )
            if cursor.rowcount == 0:
                return None
            return cursor.lastrowid

    def update_match_result(self, result: MatchResult) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE match_results SET
                    strokes_given = ?,
                    stroke_recipient_id = ?,
                    stroke_holes = ?,
                    player1_gross_score = ?,
                    player2_gross_score = ?,
                    player1_net_score = ?,
                    player2_net_score = ?,
                    winner_id = ?,
                    player1_points = ?,
                    player2_points = ?
                WHERE id = ?;
                """,
                (
                    result.strokes_given,
                    result.stroke_recipient_id,
                    json.dumps(list(result.stroke_holes)),
                    result.player1_gross_score,
                    result.player2_gross_score,
                    result.player1_net_score,
                    result.player2_net_score,
                    result.winner_id,
                    result.points_awarded["player1"],
                    result.points_awarded["player2"],
                    result.id,
                ),
            )
            return cursor.rowcount == 1

    def fetch_match_results(
        self, tournament_year: int, foursome_id: int | None = None
    ) -> list[MatchResult]:
        query = "SELECT * FROM match_results WHERE tournament_year = ?"
        params: tuple = (tournament_year,)
        if foursome_id is not None:
            query += " AND foursome_id = ?"
            params += (foursome_id,)
        query += " ORDER BY created_at, id;"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_result(row) for row in rows]

    def fetch_match_result(self, result_id: int) -> MatchResult | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM match_results WHERE id = ?;", (result_id,)
            ).fetchone()
        return _row_to_result(row) if row else None

    def delete_match_results(self, tournament_year: int) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM match_results WHERE tournament_year = ?;", (tournament_year,)
            )
            return cursor.rowcount

    def replace_course_holes(self, course_name: str, holes: list[CourseHole]) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM course_holes WHERE course_name = ?;", (course_name,))
            conn.executemany(
                """
                INSERT INTO course_holes (course_name, hole_number, par, handicap)
                VALUES (?, ?, ?, ?);
                """,
                [(course_name, h.hole_number, h.par, h.handicap) for h in holes],
            )

    def fetch_course_holes(self, course_name: str) -> list[CourseHole]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT hole_number, par, handicap
                FROM course_holes
                WHERE course_name = ?
                ORDER BY hole_number;
                """,
                (course_name,),
            ).fetchall()
        return course_holes_from_rows([dict(row) for row in rows])
