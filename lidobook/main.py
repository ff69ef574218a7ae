# lidobook/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import time

from lidobook.core.config import settings
from lidobook.core.logging import logger
from lidobook.core import exceptions as errors
from lidobook.db.database import init_db, close_db
from lidobook.api.v1.router import api_router


# Most specific class wins; anything unlisted is a 400
ERROR_STATUS_CODES = (
    (errors.NotFound, 404),
    (errors.CapacityExceeded, 403),
    (errors.AmountMismatch, 422),
    (errors.WrongMethod, 422),
    (errors.InvalidDateRange, 422),
    (errors.ResourceUnavailable, 422),
    (errors.DuplicateNumber, 409),
    (errors.DuplicatePayment, 409),
    (errors.DateRangeConflict, 409),
    (errors.HasActiveBookings, 409),
    (errors.InvalidTransition, 409),
    (errors.AlreadyConfirmed, 409),
    (errors.AlreadyPaid, 409),
    (errors.NotPaid, 409),
    (errors.StorageError, 503),
)


def status_code_for(exc: errors.BookingError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting LidoBook API")
    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down LidoBook API")
    await close_db()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=("/api/docs" if settings.ENVIRONMENT == "development" else None),
    redoc_url=("/api/redoc" if settings.ENVIRONMENT == "development" else None),
    lifespan=lifespan
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# Include routers
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.exception_handler(errors.BookingError)
async def booking_exception_handler(request: Request, exc: errors.BookingError):
    """Core errors reach the client verbatim: code plus detail"""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.exception("Unhandled exception while handling request", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
