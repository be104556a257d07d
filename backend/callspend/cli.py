from pathlib import Path
from typing import Optional, Union

import typer
from sqlalchemy.exc import SQLAlchemyError

from callspend.config import configure_logging, settings
from callspend.database import get_session_factory, init_db, session_scope, transaction
from callspend.errors import CallSpendError
from callspend.migrations import run_migrations
from callspend.services.ingestion import ingest
from callspend.services.records import clear_all
from callspend.services.spending import aggregate_all, aggregate_by_upload
from callspend.services.uploads import delete_upload, list_uploads, record_counts

app = typer.Typer(help="Load call detail spreadsheets and report budget overreach.")

FAILURES = (CallSpendError, SQLAlchemyError)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    configure_logging("DEBUG" if verbose else None)


def fail(exc: Union[CallSpendError, SQLAlchemyError]) -> None:
    name = type(exc).__name__ if isinstance(exc, CallSpendError) else "StorageError"
    typer.echo(f"{name}: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command("init-db")
def init_database() -> None:
    init_db()
    typer.echo("Tables created")


@app.command()
def migrate(revision: str = "head") -> None:
    run_migrations(settings.database_url, revision)
    typer.echo(f"Database at {revision}")


@app.command("ingest")
def ingest_file(path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True)) -> None:
    try:
        result = ingest(path.read_bytes(), path.name, session_factory=get_session_factory())
    except FAILURES as exc:
        fail(exc)
    typer.echo(f"Upload {result.upload_id}: {result.records_persisted} records from {result.file_name}")


@app.command()
def uploads() -> None:
    try:
        with session_scope(get_session_factory()) as db:
            counts = record_counts(db)
            listing = list_uploads(db)
            lines = [
                f"{upload.id}\t{upload.upload_date.isoformat()}\t"
                f"{counts.get(upload.id, 0)}\t{upload.file_name}"
                for upload in listing
            ]
    except FAILURES as exc:
        fail(exc)
    for line in lines:
        typer.echo(line)


@app.command("delete-upload")
def delete_upload_command(upload_id: int) -> None:
    try:
        with session_scope(get_session_factory()) as db, transaction(db):
            deleted = delete_upload(db, upload_id)
    except FAILURES as exc:
        fail(exc)
    typer.echo("Upload deleted" if deleted else "Upload not found, nothing deleted")


@app.command()
def clear(yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt.")) -> None:
    if not yes:
        typer.confirm("Delete every call record?", abort=True)
    try:
        with session_scope(get_session_factory()) as db, transaction(db):
            deleted = clear_all(db)
    except FAILURES as exc:
        fail(exc)
    typer.echo(f"{deleted} call records deleted")


@app.command()
def spending(
    upload_id: Optional[int] = typer.Option(None, "--upload-id"),
    by_service: bool = typer.Option(False, "--by-service"),
) -> None:
    try:
        with session_scope(get_session_factory()) as db:
            if upload_id is None:
                summaries = aggregate_all(db)
            else:
                summaries = aggregate_by_upload(db, upload_id, by_service=by_service)
    except FAILURES as exc:
        fail(exc)
    for summary in summaries:
        columns = [summary.caller]
        if summary.service is not None:
            columns.append(summary.service)
        columns.extend(
            [
                str(summary.overreach_cost),
                str(summary.budget_covered_calls),
                str(summary.total_calls),
            ]
        )
        if summary.budget_minutes is not None:
            columns.append(str(summary.budget_minutes))
        typer.echo("\t".join(columns))


if __name__ == "__main__":
    app()
