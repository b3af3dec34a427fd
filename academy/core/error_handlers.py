import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Short human message for the first validation error, e.g. "Invalid batch ID"."""
    if not errors:
        return "Invalid request"
    loc = [str(part) for part in errors[0].get("loc", ())]
    if loc and loc[0] == "path":
        name = loc[-1]
        if name.endswith("_id"):
            name = name[: -len("_id")] + " ID"
        return f"Invalid {name.replace('_', ' ')}"
    if loc[-1:] == ["attendance"]:
        return "Attendance payload required"
    return errors[0].get("msg", "Invalid request payload")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": describe_validation_errors(exc.errors()),
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
