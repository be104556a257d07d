from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from callspend.database import get_db, transaction
from callspend.schemas import CallRecordOut, DeleteResponse, RecordPage
from callspend.services.records import clear_all, count_all, normalize_paging, page_records

router = APIRouter(prefix="/data", tags=["records"])


@router.get("", response_model=RecordPage)
def list_records(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
) -> RecordPage:
    page, page_size = normalize_paging(page, limit)
    items = page_records(db, page, page_size)
    return RecordPage(
        items=[CallRecordOut.model_validate(item) for item in items],
        page=page,
        page_size=page_size,
        total=count_all(db),
    )


@router.delete("", response_model=DeleteResponse)
def clear_records(db: Session = Depends(get_db)) -> DeleteResponse:
    with transaction(db):
        deleted = clear_all(db)
    return DeleteResponse(deleted=deleted)
