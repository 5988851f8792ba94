"""Maps domain errors to the `{error, details}` HTTP envelope."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from lead_funnel.domain.errors import (
    ConfigurationError,
    ConflictRace,
    LeadFunnelError,
    NotFoundError,
    TransportFailure,
    UpstreamFailure,
    ValidationError,
)
from lead_funnel.infrastructure.logging.logger import logger

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    UpstreamFailure: status.HTTP_502_BAD_GATEWAY,
    TransportFailure: status.HTTP_502_BAD_GATEWAY,
    ConflictRace: status.HTTP_409_CONFLICT,
}


def _status_for(exc: LeadFunnelError) -> int:
    for error_type, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def lead_funnel_error_handler(request: Request, exc: LeadFunnelError) -> JSONResponse:
    """Render a domain error."""
    code = _status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error}: {exc.details}")
    return JSONResponse(status_code=code, content={"error": exc.error, "details": exc.details})


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render a malformed request body or query as 400."""
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error handlers on an application."""
    app.add_exception_handler(LeadFunnelError, lead_funnel_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
