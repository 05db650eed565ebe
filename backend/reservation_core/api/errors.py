"""
Exception handlers translating domain errors into HTTP responses.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError

from reservation_core.core.errors import ReservationError
from reservation_core.core.logging import get_logger

logger = get_logger(__name__)


async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("reservation_error", error=exc.message, status_code=exc.status_code)
    else:
        logger.info("reservation_rejected", error=exc.message, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def ledger_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    # Never let a ledger outage look like an answer about seat availability
    logger.error("ledger_unavailable", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Seat ledger unavailable, retry later"},
    )


EXCEPTION_HANDLERS = {
    ReservationError: reservation_error_handler,
    ValueError: value_error_handler,
    DBAPIError: ledger_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
