"""Atomic parse-and-persist of one uploaded call detail spreadsheet.

Parsing and row mapping finish before a database session is acquired, so a
bad file never holds a pooled connection. Persisting runs in one transaction:
either the upload and all of its records become visible, or nothing does.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from callspend.database import SessionFactory, session_scope, transaction
from callspend.errors import NoFileProvidedError
from callspend.services.extractor import extract_rows
from callspend.services.mapper import map_rows
from callspend.services.records import insert_batch
from callspend.services.uploads import create_upload, validate_file_name

logger = logging.getLogger(__name__)


class IngestionState(enum.Enum):
    RECEIVED = "RECEIVED"
    PARSED = "PARSED"
    PERSISTING = "PERSISTING"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"
    FAILED = "FAILED"


@dataclass(frozen=True)
class IngestionResult:
    upload_id: int
    file_name: str
    records_persisted: int


def _transition(file_name: str, state: IngestionState) -> IngestionState:
    logger.debug("Ingestion of %r -> %s", file_name, state.value)
    return state


def ingest(
    file_bytes: Optional[bytes],
    file_name: Optional[str],
    session_factory: Optional[SessionFactory] = None,
    header_rows: Optional[int] = None,
) -> IngestionResult:
    if not file_bytes:
        raise NoFileProvidedError()
    name = (file_name or "").strip()
    if not name:
        raise NoFileProvidedError("Uploaded file has no name")
    name = validate_file_name(name)
    state = _transition(name, IngestionState.RECEIVED)

    rows = extract_rows(file_bytes, header_rows=header_rows)
    records = map_rows(rows)
    state = _transition(name, IngestionState.PARSED)

    try:
        with session_scope(session_factory) as db:
            state = _transition(name, IngestionState.PERSISTING)
            with transaction(db):
                upload = create_upload(db, name)
                persisted = insert_batch(db, upload.id, records)
                upload_id = upload.id
            state = _transition(name, IngestionState.COMMITTED)
    except BaseException:
        if state is IngestionState.PERSISTING:
            _transition(name, IngestionState.ROLLED_BACK)
            logger.warning("Ingestion of %r rolled back.", name, exc_info=True)
        _transition(name, IngestionState.FAILED)
        raise

    logger.info("Ingested %s call records from %r as upload %s.", persisted, name, upload_id)
    return IngestionResult(upload_id=upload_id, file_name=name, records_persisted=persisted)
