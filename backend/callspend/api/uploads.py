from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from callspend.database import SessionFactory, get_db, get_session_factory, transaction
from callspend.errors import NoFileProvidedError
from callspend.schemas import DeleteResponse, IngestionResponse, UploadOut
from callspend.services.ingestion import ingest
from callspend.services.uploads import (
    count_records,
    delete_upload,
    get_upload,
    list_uploads,
    record_counts,
)

router = APIRouter(tags=["uploads"])


@router.post("/upload", response_model=IngestionResponse)
def upload_file(
    file: Optional[UploadFile] = File(default=None),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> IngestionResponse:
    if file is None:
        raise NoFileProvidedError()
    result = ingest(file.file.read(), file.filename, session_factory=session_factory)
    return IngestionResponse(
        upload_id=result.upload_id,
        file_name=result.file_name,
        records_persisted=result.records_persisted,
    )


@router.get("/uploads", response_model=List[UploadOut])
def get_uploads(db: Session = Depends(get_db)) -> List[UploadOut]:
    counts = record_counts(db)
    items = []
    for upload in list_uploads(db):
        payload = UploadOut.model_validate(upload)
        payload.record_count = counts.get(upload.id, 0)
        items.append(payload)
    return items


@router.get("/uploads/{upload_id}", response_model=UploadOut)
def get_single_upload(upload_id: int, db: Session = Depends(get_db)) -> UploadOut:
    payload = UploadOut.model_validate(get_upload(db, upload_id))
    payload.record_count = count_records(db, upload_id)
    return payload


@router.delete("/uploads/{upload_id}", response_model=DeleteResponse)
def remove_upload(upload_id: int, db: Session = Depends(get_db)) -> DeleteResponse:
    with transaction(db):
        deleted = delete_upload(db, upload_id)
    return DeleteResponse(deleted=deleted)
