"""Error taxonomy shared by every module and the handlers that render it.

Services raise these exceptions; the handlers registered by
``register_exception_handlers`` turn them into JSON bodies of the form
``{"detail": <message>, "code": <code>}`` with the matching status code.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class QaOpsError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(QaOpsError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(QaOpsError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class InvalidOperationError(QaOpsError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_operation"


class ConfigurationError(QaOpsError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "not_configured"


class UpstreamError(QaOpsError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_error"


class JenkinsError(UpstreamError):
    pass


class GitHostError(UpstreamError):
    pass


async def _handle_qa_ops_error(request: Request, exc: QaOpsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QaOpsError, _handle_qa_ops_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected)
