from fastapi import APIRouter, Depends
from sqlalchemy import text

from callspend.database import SessionFactory, get_session_factory, session_scope

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ready")
def ready(session_factory: SessionFactory = Depends(get_session_factory)):
    with session_scope(session_factory) as db:
        db.execute(text("SELECT 1"))
    return {"status": "ready"}
