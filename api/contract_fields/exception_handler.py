import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import (
    ContractNotEditable,
    FieldPlacementError,
    InvalidGeometry,
    InvalidPageSpec,
    SessionBusy,
    UnknownDocument,
    UnknownField,
    UnknownSigner,
)

logger = logging.getLogger(__name__)

STATUS_CODES = (
    ((UnknownDocument, UnknownField, UnknownSigner), 404),
    ((InvalidGeometry, InvalidPageSpec), 422),
    ((ContractNotEditable,), 400),
    ((SessionBusy,), 409),
)


def status_for(exc: FieldPlacementError) -> int:
    for types, code in STATUS_CODES:
        if isinstance(exc, types):
            return code
    return 400


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(FieldPlacementError)
    async def field_placement_exception_handler(request: Request, exc: FieldPlacementError):
        code = status_for(exc)
        logger.info("%s %s refused (%s): %s", request.method, request.url.path, code, exc)
        return JSONResponse(content={"error": str(exc)}, status_code=code)
