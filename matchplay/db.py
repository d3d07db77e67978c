import logging
from typing import Optional

import psycopg

from matchplay.course import CourseHole
from matchplay.local_store import SqliteResultStore, sqlite_path
from matchplay.migrations import apply_migrations
from matchplay.scoring import MatchResult

logger = logging.getLogger(__name__)

RESULT_COLUMNS = """
    id,
    tournament_year,
    foursome_id,
    player1_id,
    player2_id,
    player1_handicap,
    player2_handicap,
    hole_segment,
    strokes_given,
    stroke_recipient_id,
    stroke_holes,
    player1_gross_score,
    player2_gross_score,
    player1_net_score,
    player2_net_score,
    winner_id,
    player1_points,
    player2_points,
    created_at
"""

SCHEMA_STATEMENTS = [
    """
    create table if not exists match_results (
        id serial primary key,
        tournament_year integer not null,
        foursome_id integer not null,
        player1_id integer not null,
        player2_id integer not null,
        player1_handicap integer not null,
        player2_handicap integer not null,
        hole_segment text not null,
        strokes_given integer not null default 0,
        stroke_recipient_id integer,
        stroke_holes integer[] not null default '{}',
        player1_gross_score integer not null,
        player2_gross_score integer not null,
        player1_net_score integer not null,
        player2_net_score integer not null,
        winner_id integer,
        player1_points double precision not null,
        player2_points double precision not null,
        created_at timestamptz not null default now()
    );
    """,
    """
    create table if not exists course_holes (
        course_name text not null,
        hole_number integer not null,
        par integer not null,
        handicap integer not null,
        primary key (course_name, hole_number)
    );
    """,
]


def _row_to_result(row: tuple) -> MatchResult:
    return MatchResult(
        id=row[0],
        tournament_year=row[1],
        foursome_id=row[2],
        player1_id=row[3],
        player2_id=row[4],
        player1_handicap=row[5],
        player2_handicap=row[6],
        hole_segment=row[7],
        strokes_given=row[8],
        stroke_recipient_id=row[9],
        stroke_holes=list(row[10] or []),
        player1_gross_score=row[11],
        player2_gross_score=row[12],
        player1_net_score=row[13],
        player2_net_score=row[14],
        winner_id=row[15],
        points_awarded={"player1": row[16], "player2": row[17]},
        created_at=row[18],
    )


class PostgresResultStore:
    def __init__(self, database_url: str) -> None:
        self.database_url = database_url

    def ensure_schema(self) -> None:
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                for statement in SCHEMA_STATEMENTS:
                    cur.execute(statement)
        apply_migrations(self.database_url)

    def insert_match_result(self, result: MatchResult) -> Optional[int]:
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    insert into match_results (
                        tournament_year,
                        foursome_id,
                        player1_id,
                        player2_id,
                        player1_handicap,
                        player2_handicap,
                        hole_segment,
                        strokes_given,
                        stroke_recipient_id,
                        stroke_holes,
                        player1_gross_score,
                        player2_gross_score,
                        player1_net_score,
                        player2_net_score,
                        winner_id,
                        player1_points,
                        player2_points,
                        created_at
                    )
                    values (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    on conflict (tournament_year, foursome_id, player1_id, player2_id, hole_segment)
                    do nothing
                    returning id;
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
                        list(result.stroke_holes),
                        result.player1_gross_score,
                        result.player2_gross_score,
                        result.player1_net_score,
                        result.player2_net_score,
                        result.winner_id,
                        result.points_awarded["player1"],
                        result.points_awarded["player2"],
                        result.created_at,
                    ),
                )
                row = cur.fetchone()
                return row[0] if row else None

    def update_match_result(self, result: MatchResult) -> bool:
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    update match_results set
                        strokes_given = %s,
                        stroke_recipient_id = %s,
                        stroke_holes = %s,
                        player1_gross_score = %s,
                        player2_gross_score = %s,
                        player1_net_score = %s,
                        player2_net_score = %s,
                        winner_id = %s,
                        player1_points = %s,
                        player2_points = %s
                    where id = %s;
                    """,
                    (
                        result.strokes_given,
                        result.stroke_recipient_id,
                        list(result.stroke_holes),
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
                return cur.rowcount == 1

    def fetch_match_results(
        self, tournament_year: int, foursome_id: int | None = None
    ) -> list[MatchResult]:
        query = f"select {RESULT_COLUMNS} from match_results where tournament_year = %s"
        params: tuple = (tournament_year,)
        if foursome_id is not None:
            query += " and foursome_id = %s"
            params += (foursome_id,)
        query += " order by created_at, id;"
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                return [_row_to_result(row) for row in cur.fetchall()]

    def fetch_match_result(self, result_id: int) -> MatchResult | None:
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"select {RESULT_COLUMNS} from match_results where id = %s;",
                    (result_id,),
                )
                row = cur.fetchone()
                return _row_to_result(row) if row else None

    def delete_match_results(self, tournament_year: int) -> int:
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "delete from match_results where tournament_year = %s;",
                    (tournament_year,),
                )
                return cur.rowcount

    def replace_course_holes(self, course_name: str, holes: list[CourseHole]) -> None:
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute("delete from course_holes where course_name = %s;", (course_name,))
                cur.executemany(
                    """
                    insert into course_holes (course_name, hole_number, par, handicap)
                    values (%s, %s, %s, %s);
                    """,
                    [(course_name, h.hole_number, h.par, h.handicap) for h in holes],
                )

    def fetch_course_holes(self, course_name: str) -> list[CourseHole]:
        with psycopg.connect(self.database_url) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    select hole_number, par, handicap
                    from course_holes
                    where course_name = %s
                    order by hole_number;
                    """,
                    (course_name,),
                )
                return [CourseHole(row[0], row[1], row[2]) for row in cur.fetchall()]


def open_store(database_url: str):
    """Pick the SQLite store for sqlite:// URLs and Postgres for everything else."""
    path = sqlite_path(database_url)
    if path is not None:
        logger.info("Using SQLite result store at %s", path)
        return SqliteResultStore(path)
    logger.info("Using Postgres result store")
    return PostgresResultStore(database_url)
