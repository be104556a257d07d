from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from callspend.config import settings
from callspend.models import CallRecord

DEFAULT_PAGE = 1


def insert_batch(db: Session, upload_id: Optional[int], records: Iterable[CallRecord]) -> int:
    """Tag ``records`` with ``upload_id`` and flush them in the current transaction."""
    count = 0
    for record in records:
        record.upload_id = upload_id
        db.add(record)
        count += 1
    db.flush()
    return count


def normalize_paging(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    if not page or page < 1:
        page = DEFAULT_PAGE
    if not page_size or page_size < 1:
        page_size = settings.default_page_size
    return page, page_size


def page_records(db: Session, page: Optional[int] = None, page_size: Optional[int] = None) -> List[CallRecord]:
    page, page_size = normalize_paging(page, page_size)
    return (
        db.query(CallRecord)
        .order_by(CallRecord.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )


def count_all(db: Session) -> int:
    return db.query(func.count(CallRecord.id)).scalar() or 0


def clear_all(db: Session) -> int:
    return db.query(CallRecord).delete(synchronize_session=False)
