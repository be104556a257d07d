import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from callspend.api import health, records, spending, uploads
from callspend.config import settings
from callspend.database import dispose_engine, wait_for_database
from callspend.errors import (
    CallSpendError,
    InvalidFileNameError,
    MalformedInputError,
    NoFileProvidedError,
    NotFoundError,
    RowError,
    StorageError,
)
from callspend.migrations import run_migrations

app = FastAPI(title=settings.app_name)

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (NoFileProvidedError, 400),
    (MalformedInputError, 400),
    (InvalidFileNameError, 400),
    (RowError, 422),
    (NotFoundError, 404),
    (StorageError, 503),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup() -> None:
    await wait_for_database()
    run_migrations()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    dispose_engine()


def status_for(exc: CallSpendError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(CallSpendError)
async def handle_call_spend_error(request: Request, exc: CallSpendError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    content = {"error": type(exc).__name__, "detail": str(exc)}
    content.update(exc.context())
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Read paths run outside ``transaction`` and surface raw driver errors.
    storage_error = StorageError(f"{type(exc).__name__}: {exc}")
    return await handle_call_spend_error(request, storage_error)


app.include_router(health.router)
app.include_router(uploads.router)
app.include_router(records.router)
app.include_router(spending.router)
