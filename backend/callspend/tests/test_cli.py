import pytest
from sqlalchemy import text
from typer.testing import CliRunner

from callspend import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_sessions(monkeypatch, session_factory):
    monkeypatch.setattr(cli, "get_session_factory", lambda: session_factory)


def test_ingest_and_report(tmp_path, make_workbook, sample_rows):
    path = tmp_path / "january.xlsx"
    path.write_bytes(make_workbook(sample_rows))

    result = runner.invoke(cli.app, ["ingest", str(path)])
    assert result.exit_code == 0
    assert "2 records from january.xlsx" in result.output

    listing = runner.invoke(cli.app, ["uploads"])
    assert "january.xlsx" in listing.output

    report = runner.invoke(cli.app, ["spending", "--upload-id", "1"])
    assert report.output.strip() == "111\t2.50\t1\t2\t10"


def test_ingest_invalid_file_exits_with_error(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a workbook")
    result = runner.invoke(cli.app, ["ingest", str(path)])
    assert result.exit_code == 1
    assert "MalformedInputError" in result.output


def test_delete_and_clear(tmp_path, make_workbook, sample_rows):
    path = tmp_path / "calls.xlsx"
    path.write_bytes(make_workbook(sample_rows))
    runner.invoke(cli.app, ["ingest", str(path)])
    runner.invoke(cli.app, ["ingest", str(path)])

    assert "nothing deleted" in runner.invoke(cli.app, ["delete-upload", "42"]).output
    assert "Upload deleted" in runner.invoke(cli.app, ["delete-upload", "1"]).output
    assert "2 call records deleted" in runner.invoke(cli.app, ["clear", "--yes"]).output
    assert "111" not in runner.invoke(cli.app, ["spending"]).output


def test_storage_failure_exits_with_error(engine):
    with engine.begin() as connection:
        connection.execute(text("DROP TABLE call_records"))
    result = runner.invoke(cli.app, ["uploads"])
    assert result.exit_code == 1
    assert "StorageError" in result.output
