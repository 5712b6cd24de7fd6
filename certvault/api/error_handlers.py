"""Error Handlers — map vault errors onto HTTP responses.

Invariants:
    - Every VaultError becomes its own to_response() envelope and http_status
    - A malformed request (bad query/form type) is reported as a
      FieldValidationError, so clients see one VALIDATION_ERROR shape
    - Info/warning severities log at WARNING; error/critical at ERROR
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from certvault.core.errors import ErrorSeverity, FieldValidationError, VaultError

logger = logging.getLogger(__name__)

_QUIET = (ErrorSeverity.INFO, ErrorSeverity.WARNING)


def _vault_error_response(request: Request, exc: VaultError) -> JSONResponse:
    logger.log(
        logging.WARNING if exc.severity in _QUIET else logging.ERROR,
        f"{exc.code}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def register_error_handlers(app: FastAPI) -> None:
    """Install the vault handlers on the FastAPI app."""

    @app.exception_handler(VaultError)
    async def vault_error_handler(request: Request, exc: VaultError):
        return _vault_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError,
    ):
        first = exc.errors()[0] if exc.errors() else {"loc": (), "msg": "Invalid request"}
        field = str(first["loc"][-1]) if first["loc"] else "request"
        return _vault_error_response(
            request, FieldValidationError(first["msg"], field),
        )
