from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from callspend.database import get_db
from callspend.schemas import SpendingSummary
from callspend.services.spending import aggregate_all, aggregate_by_upload

router = APIRouter(prefix="/analyze/spending", tags=["spending"])


@router.get("", response_model=List[SpendingSummary], response_model_exclude_none=True)
def spending_summary(db: Session = Depends(get_db)) -> List[SpendingSummary]:
    return aggregate_all(db)


@router.get("/{upload_id}", response_model=List[SpendingSummary], response_model_exclude_none=True)
def spending_summary_for_upload(
    upload_id: int, by_service: bool = False, db: Session = Depends(get_db)
) -> List[SpendingSummary]:
    return aggregate_by_upload(db, upload_id, by_service=by_service)
