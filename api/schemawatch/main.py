import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schemawatch.config import settings
from schemawatch.errors import (
    ConfigError,
    GitHubAPIError,
    SchemaBuildError,
    SchemaNotFoundError,
    SchemaWatchError,
)
from schemawatch.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from schemawatch.response import error_response
from schemawatch.routers import github

API_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if not settings.github_webhook_secret:
        logger.warning("GITHUB_WEBHOOK_SECRET is not set; webhook signatures will not be checked")
    yield


app = FastAPI(
    title="SchemaWatch",
    description="Notify chat channels and webhooks about GraphQL schema changes pushed to GitHub.",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


# --- Exception Handlers ---


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_response(exc.status_code, exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        clean = {k: v for k, v in err.items() if k != "ctx"}
        if "msg" in clean:
            clean["msg"] = str(clean["msg"])
        errors.append(clean)
    content = error_response(422, "Validation error")
    content["error"]["details"] = errors
    return JSONResponse(status_code=422, content=content)


@app.exception_handler(SchemaWatchError)
async def pipeline_exception_handler(request: Request, exc: SchemaWatchError):
    # Fatal to the invocation: record it and tell GitHub the delivery failed
    logger.error("Schema change notification failed: %s", exc, exc_info=exc)
    if isinstance(exc, GitHubAPIError):
        status = 502
    elif isinstance(exc, (ConfigError, SchemaBuildError, SchemaNotFoundError)):
        status = 422
    else:
        status = 500
    return JSONResponse(status_code=status, content=error_response(status, str(exc)))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_response(500, "Internal server error"))


# --- Routes ---

app.include_router(github.router)


@app.get("/", summary="API root")
async def root():
    return {"name": settings.app_name, "status": "ok", "version": API_VERSION}


@app.get("/health", summary="Health check")
async def health_ping():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
        "release": settings.release,
    }
