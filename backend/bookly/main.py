import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .config import get_settings
from .database import init_db
from .errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    ValidationError,
)
from .redis_client import redis_client
from .routers import bookings, data, rooms, slots
from .routers import config as config_routes
from .schemas.bookings import SuggestionsRead

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Bookly API", lifespan=lifespan)

app.include_router(rooms.router)
app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(config_routes.router)
app.include_router(data.router)


# ===== Error mapping =====

@app.exception_handler(ValidationError)
async def validation_error_handler(_request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "field_errors": exc.field_errors},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(_request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(_request: Request, exc: ConflictError):
    content = {"detail": exc.message}
    if exc.suggestions is not None:
        content["suggestions"] = SuggestionsRead.model_validate(exc.suggestions).model_dump()
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=content)


@app.exception_handler(PermissionDeniedError)
async def permission_handler(_request: Request, exc: PermissionDeniedError):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": exc.message})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.exception(
        f"Storage failure on {request.method} {request.url.path}: {exc.message}", exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable. Please try again later."},
    )


@app.get("/health")
def health():
    return {"redis": redis_client.ping() if redis_client is not None else None}
