"""
Bootstrap script for the Basic SQL Demo.

Creates the demo table from `db/init.sql` and optionally seeds it with
deterministic sample rows through the data-access service.
"""

from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import List

import psycopg
import typer

from sqldemo.domain.models import Record
from sqldemo.infrastructure.db_factory import build_dsn
from sqldemo.services.sql_service import SQLDatabaseService

app = typer.Typer(help="Create the demo table and optionally seed sample rows.")

INIT_SQL_PATH = Path(__file__).resolve().parent.parent / "db" / "init.sql"

_TOPICS = ["python", "postgres", "testing", "typing", "packaging", "logging"]
_HOSTS = ["docs.python.org", "www.postgresql.org", "pypi.org", "example.com"]


def _build_dsn(dsn_override: str | None) -> str:
    if dsn_override:
        return dsn_override
    return build_dsn()


def _sample_records(rows: int, seed: int) -> List[Record]:
    rng = random.Random(seed)
    records: List[Record] = []
    for i in range(1, rows + 1):
        topic = rng.choice(_TOPICS)
        host = rng.choice(_HOSTS)
        records.append(
            Record(
                {
                    "title": f"{topic.title()} note {i}",
                    "description": f"Sample row {i} about {topic}.",
                    "url": f"https://{host}/{topic}/{i}",
                }
            )
        )
    return records


def _apply_init_sql(dsn: str, sql_path: Path = INIT_SQL_PATH) -> None:
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            cur.execute(sql_path.read_text(encoding="utf-8"))


@app.command()
def main(
    seed_rows: int = typer.Option(
        0,
        "--seed-rows",
        "-r",
        min=0,
        help="Number of sample rows to insert after creating the table.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
) -> None:
    """
    Create the demo table and optionally insert sample rows.
    """
    conn_dsn = _build_dsn(dsn)
    typer.echo(f"Applying {INIT_SQL_PATH.name}...")
    _apply_init_sql(conn_dsn)

    if not seed_rows:
        return

    service = SQLDatabaseService.from_store(
        table="database_example", identity_column="id", namespace="public", dsn_override=conn_dsn
    )
    for record in _sample_records(seed_rows, seed):
        service.insert(record)
    typer.echo(f"Inserted {seed_rows:,} sample rows into {service.schema.qualified_name}.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
