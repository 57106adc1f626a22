from __future__ import annotations

import sys
from typing import List, Optional

import typer

from sqldemo.config import get_settings
from sqldemo.controllers import (
    DeleteController,
    DisplayController,
    InsertController,
    ModifyController,
    Notice,
    NoticeLevel,
)
from sqldemo.domain.errors import StoreError
from sqldemo.reporter import print_records, records_to_json
from sqldemo.services.abstract import DatabaseService
from sqldemo.services.sql_service import SQLDatabaseService
from sqldemo.utils.logging import configure_logging
from sqldemo.utils.parsing import parse_assignments

app = typer.Typer(help="Basic SQL Demo: CRUD over a single table.")

_EXIT_CODES = {
    NoticeLevel.INFORMATION: 0,
    NoticeLevel.ERROR: 1,
    NoticeLevel.WARNING: 2,
}

SET_OPTION_HELP = "Column value as column=value; repeat for each column."


def _build_service() -> DatabaseService:
    return SQLDatabaseService.from_store()


def _service() -> DatabaseService:
    try:
        return _build_service()
    except StoreError as exc:
        typer.echo(Notice.from_store_error(exc).message, err=True)
        raise typer.Exit(code=_EXIT_CODES[NoticeLevel.ERROR]) from exc


def _emit(notice: Notice) -> None:
    """Print a notice and exit with a code matching its level."""
    is_problem = notice.level is not NoticeLevel.INFORMATION
    typer.echo(notice.message, err=is_problem)
    code = _EXIT_CODES[notice.level]
    if code:
        raise typer.Exit(code=code)


def _fields(assignments: Optional[List[str]]) -> dict:
    try:
        return parse_assignments(assignments or [])
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--set") from exc


@app.callback()
def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}:***@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"table={settings.db_schema}.{settings.db_table} "
        f"identity={settings.db_identity_column} env={settings.app_env}"
    )


@app.command()
def columns() -> None:
    """
    List the target table's column names (identity excluded).
    """
    service = _service()
    try:
        names = service.list_column_names()
    except StoreError as exc:
        _emit(Notice.from_store_error(exc))
        return
    typer.echo("\n".join(names))


@app.command("list")
def list_rows(
    json_output: bool = typer.Option(False, "--json", help="Print rows as JSON instead of a table."),
) -> None:
    """
    Display every row of the table.
    """
    service = _service()
    view = DisplayController(service).refresh()
    if view.notice is not None:
        _emit(view.notice)
    identity_column = service.schema.identity_column
    if json_output:
        typer.echo(records_to_json(view.records, identity_column))
    else:
        print_records(
            view.columns,
            view.records,
            title=service.schema.qualified_name,
            identity_column=identity_column,
        )


@app.command()
def show(identity: str = typer.Argument(..., help="Identity of the row to show.")) -> None:
    """
    Show a single row.
    """
    service = _service()
    lookup = ModifyController(service).search(identity)
    if lookup.notice is not None:
        _emit(lookup.notice)
    typer.echo(records_to_json([lookup.record], service.schema.identity_column))


@app.command()
def insert(
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help=SET_OPTION_HELP),
) -> None:
    """
    Insert a row; every column must be given a non-blank value.
    """
    fields = _fields(assignments)
    _emit(InsertController(_service()).submit(fields))


@app.command()
def modify(
    identity: str = typer.Argument(..., help="Identity of the row to modify."),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help=SET_OPTION_HELP),
) -> None:
    """
    Modify a row. Columns not given keep their current values.
    """
    fields = _fields(assignments)
    controller = ModifyController(_service())
    lookup = controller.search(identity)
    if lookup.notice is not None:
        _emit(lookup.notice)
    current = {
        name: "" if value is None else str(value)
        for name, value in lookup.record.values().items()
    }
    current.update(fields)
    _emit(controller.submit(identity, current))


@app.command()
def delete(identity: str = typer.Argument(..., help="Identity of the row to delete.")) -> None:
    """
    Delete a row.
    """
    _emit(DeleteController(_service()).submit(identity))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
