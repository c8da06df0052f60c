import logging
import re
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request, BackgroundTasks
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from .database import get_db, init_models, engine
from .api import urls, auth
from .errors import ShortenerError
from .pages import error_page
from .redis import redis_client
from .services.clicks import record_click
from .services.resolver import resolve, Outcome
from .observability import (
    PrometheusMiddleware,
    metrics_endpoint,
    REDIRECT_TOTAL,
    REDIRECT_404_TOTAL,
    REDIRECT_410_TOTAL,
)
from .logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

SHORT_CODE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    await init_models()
    await redis_client.connect()
    yield
    # Shutdown logic
    await redis_client.close()
    await engine.dispose()

app = FastAPI(
    title="URL Shortener",
    description="Short links with redirects, click counts and owner accounts",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)

app.add_route("/metrics", metrics_endpoint)

app.include_router(urls.router, prefix="/api/urls", tags=["urls"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])


def envelope_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(ShortenerError)
async def shortener_error_handler(request: Request, exc: ShortenerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return envelope_error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return envelope_error(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if request.url.path.startswith("/api/"):
        return envelope_error(exc.status_code, str(exc.detail))
    return error_page(exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Storage error on {request.method} {request.url.path}", exc_info=exc)
    return envelope_error(500, "Internal server error")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    if request.url.path.startswith("/api/"):
        return envelope_error(500, "Internal server error")
    return error_page(500)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(
    short_code: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db)
):
    if not SHORT_CODE_PATTERN.fullmatch(short_code):
        REDIRECT_404_TOTAL.inc()
        return error_page(404)

    try:
        resolution = await resolve(db, short_code)
    except (SQLAlchemyError, OSError):
        logger.exception(f"Lookup failed for short code {short_code}")
        return error_page(500)

    if resolution.outcome is Outcome.NOT_FOUND:
        REDIRECT_404_TOTAL.inc()
        return error_page(404)
    if resolution.outcome is Outcome.EXPIRED:
        REDIRECT_410_TOTAL.inc()
        return error_page(410)

    # Counted after the response goes out; a failure there never reaches the visitor.
    # 302 rather than 301 so browsers keep coming back and every visit is counted.
    background_tasks.add_task(record_click, resolution.link_id)
    REDIRECT_TOTAL.inc()
    return RedirectResponse(url=resolution.target_url, status_code=302)
