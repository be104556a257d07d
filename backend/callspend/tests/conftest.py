import os
import tempfile

# The app-level engine is built at import time; point it at a throwaway file.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(tempfile.mkdtemp(prefix='callspend-tests-'), 'app.db')}",
)

from datetime import datetime
from decimal import Decimal
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from callspend.database import (
    create_db_engine,
    create_session_factory,
    get_db,
    get_session_factory,
    init_db,
)
from callspend.main import app
from callspend.models import CallRecord


@pytest.fixture()
def engine(tmp_path):
    test_engine = create_db_engine(f"sqlite:///{tmp_path / 'callspend.db'}")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_workbook():
    def build(rows, header_rows=7, sheet_title="CDR"):
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = sheet_title
        for index in range(header_rows):
            sheet.append([f"Report header {index + 1}"])
        for row in rows:
            sheet.append(list(row))
        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return build


@pytest.fixture()
def make_record():
    def build(caller, cost, duration=1, service="voice", receiver="999"):
        return CallRecord(
            call_date=datetime(2024, 1, 1, 9, 30),
            caller=caller,
            receiver=receiver,
            duration=duration,
            result="OK",
            cost=Decimal(str(cost)),
            service=service,
        )

    return build


@pytest.fixture()
def sample_rows():
    return [
        ("2024-01-01", "111", "222", 10, "OK", 0, "voice"),
        ("2024-01-01", "111", "333", 5, "OK", 2.50, "voice"),
    ]
