from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class UploadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str
    upload_date: datetime
    record_count: Optional[int] = None


class CallRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    upload_id: Optional[int]
    call_date: datetime
    caller: str
    receiver: str
    duration: int
    result: str
    cost: Decimal
    service: str


class RecordPage(BaseModel):
    items: List[CallRecordOut]
    page: int
    page_size: int
    total: int


class SpendingSummary(BaseModel):
    caller: str
    service: Optional[str] = None
    overreach_cost: Decimal
    budget_covered_calls: int
    total_calls: int
    budget_minutes: Optional[int] = None


class IngestionResponse(BaseModel):
    upload_id: int
    file_name: str
    records_persisted: int


class DeleteResponse(BaseModel):
    status: str = "deleted"
    deleted: int
