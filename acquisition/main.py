import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from acquisition.api.v1.router import router as v1_router
from acquisition.core.errors import DomainError, StorageError
from acquisition.core.telemetry import setup_logging, setup_telemetry
from acquisition.schemas.common import ErrorResponse

log = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str, details: list[dict] | None = None) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, details=details or [])
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, StorageError):
        log.error("storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return _error_response(400, "validation_error", "Invalid request", details)


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error("unhandled storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(StorageError.status_code, StorageError.code, "Storage operation failed")


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title="Acquisition API", version="0.1.0")
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    setup_telemetry(app)
    app.include_router(v1_router)
    return app


app = create_app()
