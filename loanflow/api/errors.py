import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from loanflow.services.errors import (
    InvalidTransition,
    NotFound,
    PersistenceError,
    UnauthorizedStage,
    WorkflowError,
)

logger = logging.getLogger("loanflow.api")

WORKFLOW_ERROR_STATUS: dict[type[WorkflowError], int] = {
    NotFound: 404,
    UnauthorizedStage: 403,
    InvalidTransition: 409,
    PersistenceError: 503,
}


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _envelope(request: Request, *, status_code: int, payload: dict) -> JSONResponse:
    request_id = _get_request_id(request)
    payload["request_id"] = request_id

    response = JSONResponse(status_code=status_code, content=payload)
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WorkflowError)
    async def workflow_exception_handler(request: Request, exc: WorkflowError):
        status_code = WORKFLOW_ERROR_STATUS.get(type(exc), 400)
        if isinstance(exc, PersistenceError):
            logger.warning(
                "workflow_persistence_error request_id=%s detail=%s",
                _get_request_id(request),
                exc.message,
            )
        return _envelope(
            request,
            status_code=status_code,
            payload={"kind": exc.kind, "detail": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _envelope(request, status_code=exc.status_code, payload={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _envelope(request, status_code=422, payload={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error request_id=%s", _get_request_id(request), exc_info=exc)
        return _envelope(request, status_code=500, payload={"detail": "Internal Server Error"})
