from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from app.routes.functions import router as functions_router
from app.services.errors import (
    ActivationTimeoutError,
    ConflictError,
    FunctionServiceError,
    InvalidInputError,
    NotFoundError,
)


LOG_FORMAT = "%(levelname)s: %(message)s"


def _configure_logging(level: int = logging.INFO) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        root.addHandler(handler)
    for handler in root.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    yield


app = FastAPI(lifespan=lifespan)

app.include_router(functions_router)


def _status_for(exc: FunctionServiceError) -> int:
    if isinstance(exc, InvalidInputError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ActivationTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY


@app.exception_handler(FunctionServiceError)
async def function_service_error_handler(request: Request, exc: FunctionServiceError) -> JSONResponse:
    """Map deployment-service failures to a consistent HTTP response.

    Returns:
        A status derived from the error kind with a JSON body: {"detail": "..."}
    """
    return JSONResponse(
        status_code=_status_for(exc),
        content={"detail": str(exc)},
    )


@app.get("/")
async def root():
    return {"message": "Hello World! Lambda deployer is running."}
