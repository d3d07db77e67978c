import logging
from typing import Callable, Tuple

import psycopg

logger = logging.getLogger(__name__)

MigrationTask = Tuple[str, str, Callable[[psycopg.Cursor], None]]


def _drop_duplicate_results(cursor: psycopg.Cursor) -> None:
    cursor.execute(
        """
        delete from match_results
        where id in (
            select id
            from (
                select
                    id,
                    row_number() over (
                        partition by tournament_year, foursome_id, player1_id, player2_id, hole_segment
                        order by created_at, id
                    ) as position
                from match_results
            ) ranked
            where ranked.position > 1
        );
        """
    )
    if cursor.rowcount:
        logger.warning("Removed %d duplicate match results", cursor.rowcount)


def _add_matchup_unique_index(cursor: psycopg.Cursor) -> None:
    cursor.execute(
        """
        create unique index if not exists match_results_matchup_key
        on match_results (tournament_year, foursome_id, player1_id, player2_id, hole_segment);
        """
    )


def _ensure_migrations_table(cursor: psycopg.Cursor) -> None:
    cursor.execute(
        """
        create table if not exists schema_migrations (
            id text primary key,
            description text not null,
            applied_at timestamptz not null default now()
        );
        """
    )


MIGRATIONS: list[MigrationTask] = [
    (
        "20260601_dedupe_match_results",
        "Keep the earliest result per matchup before enforcing uniqueness",
        _drop_duplicate_results,
    ),
    (
        "20260601_match_results_unique_key",
        "One result per tournament year, foursome, pairing and hole segment",
        _add_matchup_unique_index,
    ),
]


def apply_migrations(database_url: str) -> None:
    with psycopg.connect(database_url) as connection:
        with connection.cursor() as cursor:
            _ensure_migrations_table(cursor)
        connection.commit()
        for migration_id, description, task in MIGRATIONS:
            with connection.cursor() as cursor:
                cursor.execute(
                    "select 1 from schema_migrations where id = %s;",
                    (migration_id,),
                )
                if cursor.fetchone():
                    continue
                task(cursor)
                cursor.execute(
                    """
                    insert into schema_migrations (id, description)
                    values (%s, %s);
                    """,
                    (migration_id, description),
                )
            connection.commit()
            logger.info("Applied migration %s", migration_id)


if __name__ == "__main__":
    from matchplay.settings import load_settings

    apply_migrations(load_settings().database_url)
