from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from sqldemo.domain.models import Record


def _cell(value: Any) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    return str(value)


def record_to_dict(record: Record, identity_column: str = "id") -> Dict[str, Any]:
    """Flatten a record into a plain dict with the identity first."""
    payload: Dict[str, Any] = {identity_column: record.identity}
    payload.update(record.values())
    return payload


def build_table(
    columns: Sequence[str],
    records: Sequence[Record],
    title: Optional[str] = None,
    identity_column: str = "id",
) -> Table:
    """
    Build a rich table with one row per record.

    Columns follow `columns`; values a record lacks render as empty cells.
    """
    table = Table(
        title=title,
        box=box.ROUNDED,
        caption=f"{len(records):,} row(s)",
    )
    table.add_column(identity_column, justify="right", style="cyan", no_wrap=True)
    for name in columns:
        table.add_column(name, overflow="fold")

    for record in records:
        table.add_row(
            str(record.identity),
            *(_cell(record.get(name)) if name in record else "" for name in columns),
        )
    return table


def print_records(
    columns: Sequence[str],
    records: Sequence[Record],
    title: Optional[str] = None,
    identity_column: str = "id",
    console: Optional[Console] = None,
) -> None:
    """Render records as a rich table."""
    console = console or Console()
    if not records:
        console.print("[yellow]No rows to display.[/yellow]")
        return
    console.print(build_table(columns, records, title=title, identity_column=identity_column))


def records_to_json(records: Sequence[Record], identity_column: str = "id") -> str:
    """Serialize records as a JSON array; non-JSON scalars (dates, decimals) become strings."""
    rows: List[Dict[str, Any]] = [record_to_dict(r, identity_column) for r in records]
    return json.dumps(rows, indent=2, default=str)


__all__ = ["build_table", "print_records", "record_to_dict", "records_to_json"]
