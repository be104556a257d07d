import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from callspend.errors import InvalidFileNameError, NotFoundError
from callspend.models import FILE_NAME_MAX_LENGTH, CallRecord, Upload

logger = logging.getLogger(__name__)


def validate_file_name(file_name: Optional[str]) -> str:
    name = (file_name or "").strip()
    if not name:
        raise InvalidFileNameError(file_name, "file name is required")
    if len(name) > FILE_NAME_MAX_LENGTH:
        raise InvalidFileNameError(file_name, f"longer than {FILE_NAME_MAX_LENGTH} characters")
    return name


def create_upload(db: Session, file_name: str) -> Upload:
    """Insert an upload row inside the caller's transaction and return it.

    The row is flushed so its generated id is available, but nothing is
    committed here.
    """
    upload = Upload(file_name=validate_file_name(file_name), upload_date=datetime.utcnow())
    db.add(upload)
    db.flush()
    return upload


def list_uploads(db: Session) -> List[Upload]:
    return db.query(Upload).order_by(Upload.upload_date.desc(), Upload.id.desc()).all()


def get_upload(db: Session, upload_id: int) -> Upload:
    upload = db.query(Upload).filter(Upload.id == upload_id).first()
    if not upload:
        raise NotFoundError("Upload", upload_id)
    return upload


def count_records(db: Session, upload_id: int) -> int:
    return (
        db.query(func.count(CallRecord.id)).filter(CallRecord.upload_id == upload_id).scalar()
        or 0
    )


def record_counts(db: Session) -> Dict[int, int]:
    rows = (
        db.query(CallRecord.upload_id, func.count(CallRecord.id))
        .filter(CallRecord.upload_id.isnot(None))
        .group_by(CallRecord.upload_id)
        .all()
    )
    return {upload_id: total for upload_id, total in rows}


def delete_upload(db: Session, upload_id: int) -> int:
    # Records go with the upload through the ON DELETE CASCADE foreign key.
    deleted = (
        db.query(Upload).filter(Upload.id == upload_id).delete(synchronize_session=False)
    )
    if not deleted:
        logger.info("Upload %s does not exist; nothing to delete.", upload_id)
    return deleted
