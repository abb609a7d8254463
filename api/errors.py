"""Maps domain exceptions to `{"error": message}` JSON responses"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from core.exceptions import (
    ConfigurationError,
    ConnectivityError,
    ImapAuthenticationError,
    PersistenceError,
    RadarException,
    SeedNotFoundError,
)
from core.logging import get_logger

logger = get_logger(__name__)

# Checked in order; first isinstance match wins
EXCEPTION_STATUS_CODES: list[tuple[type[RadarException], int]] = [
    (SeedNotFoundError, status.HTTP_404_NOT_FOUND),
    (ConfigurationError, status.HTTP_400_BAD_REQUEST),
    (ImapAuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (ConnectivityError, status.HTTP_502_BAD_GATEWAY),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(exc: RadarException) -> int:
    for exc_type, status_code in EXCEPTION_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def radar_exception_handler(request: Request, exc: RadarException) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.warning(f"{request.method} {request.url.path} failed ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RadarException, radar_exception_handler)
