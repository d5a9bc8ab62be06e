from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from medfinder.config import Settings
from medfinder.controllers import live, v1
from medfinder.db import init_db
from medfinder.dependencies import ErrorResponse, close_redis
from medfinder.exceptions import MedFinderError, StoreError
from medfinder.logger import setup_logging
from medfinder.models import ErrorCode

settings = Settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await asyncio.to_thread(init_db, settings)
    yield
    await close_redis()


app = FastAPI(
    title="MedFinder API",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(MedFinderError)
async def medfinder_error_handler(request: Request, exc: MedFinderError):
    if isinstance(exc, StoreError):
        logger.error("Store failure on %s: %s", request.url.path, exc.message)
        body = ErrorResponse(code=ErrorCode.STORE_ERROR, message="Internal storage error")
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s", request.url.path, exc_info=exc)
    body = ErrorResponse(code=ErrorCode.STORE_ERROR, message="Internal storage error")
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Dependencies raise HTTPException with an ErrorResponse dict as detail.
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(code=f"HTTP_{exc.status_code}", message=str(exc.detail)).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    body = ErrorResponse(code=ErrorCode.BAD_REQUEST, message="Invalid request")
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


app.include_router(v1.router)
app.include_router(live.router)

Instrumentator().instrument(app).expose(app)
