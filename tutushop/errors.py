# tutushop/errors.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class StoreError(Exception):
    """Base error; carries the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StoreError):
    status_code = 404


class BadRequest(StoreError):
    status_code = 400


class UnsupportedMediaType(StoreError):
    # the upload endpoints answer wrong types with 400, same as a missing file
    status_code = 400


class PayloadTooLarge(StoreError):
    status_code = 413


class InternalError(StoreError):
    status_code = 500


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
