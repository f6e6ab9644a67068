import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import settings
from app.core.exceptions import CineMatchError, InvalidInputError, InternalError
from app.core.logging import setup_logging
from app.config.constants import INTERNAL_ERROR_MESSAGE
from app.api.sessions import router as sessions_router
from app.api.votes import router as votes_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up FastAPI...")
    yield
    logger.info("Shutting down FastAPI...")


app = FastAPI(
    title="CineMatch API",
    docs_url="/docs" if not settings.APP_DOMAIN else None,
    redoc_url=None,
    lifespan=lifespan,
)

# Include routers
app.include_router(sessions_router)
app.include_router(votes_router)


def _error_response(error: CineMatchError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": error.kind, "message": error.message},
    )


@app.exception_handler(CineMatchError)
async def cinematch_error_handler(request: Request, exc: CineMatchError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _error_response(InvalidInputError(message))


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    # Storage detail stays in the log
    logger.exception(f"Storage error on {request.method} {request.url.path}")
    return _error_response(InternalError(INTERNAL_ERROR_MESSAGE))


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"message": "CineMatch API", "version": "1.0"}
