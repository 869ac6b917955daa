"""Error taxonomy for the API and the handlers that render it."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

logger = logging.getLogger(__name__)

NO_AUTORIZADO = "No autorizado"
TOKEN_INVALIDO = "Token inválido"
DIAGNOSTICO_NO_ENCONTRADO = "Diagnóstico no encontrado"
ERROR_GENERICO = "Error al procesar la solicitud"


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(ApiError):
    """Missing, malformed or rejected bearer token."""

    status_code = 401


class NotFound(ApiError):
    """A write that targets a key matching no row."""

    status_code = 404


class BackendFailure(ApiError):
    """Any database error. The cause is logged, never returned to the client."""

    status_code = 500


async def _unauthorized_handler(request: Request, exc: Unauthorized) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


async def _backend_failure_handler(request: Request, exc: BackendFailure) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _validation_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    # Imported here: auth depends on this module
    from fisio_api.auth import lacks_credentials

    # The body is parsed before check_auth runs; an anonymous caller still gets 401
    if lacks_credentials(request):
        return PlainTextResponse(NO_AUTORIZADO, status_code=401)

    # Unparseable input is reported like any other backend failure; only
    # locations and messages are logged, never the submitted values
    problems = [(err["loc"], err["msg"]) for err in exc.errors()]
    logger.error("Invalid input for %s %s: %s", request.method, request.url.path, problems)
    return PlainTextResponse(ERROR_GENERICO, status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Unauthorized, _unauthorized_handler)
    app.add_exception_handler(NotFound, _not_found_handler)
    app.add_exception_handler(BackendFailure, _backend_failure_handler)
    app.add_exception_handler(RequestValidationError, _validation_handler)
