import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend import config
from backend.errors import AppError
from backend.routers import auth, core, settings, visits
from database.db import Database

logger = logging.getLogger(__name__)


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    missing = [
        str(err["loc"][-1])
        for err in exc.errors()
        if err.get("type") == "missing" and err.get("loc")
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    first = exc.errors()[0] if exc.errors() else None
    if not first:
        return "Invalid request."
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}" if field else "Invalid request body."


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_request: Request, exc: AppError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(_request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed."
        return _error(exc.status_code, message)

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(
    db_path: str | Path | None = None,
    *,
    flush_delay: float | None = None,
    db: Database | None = None,
) -> FastAPI:
    """
    Builds the API around its own ``Database``. The store is opened when the
    app starts and flushed/closed when it shuts down.
    """
    if db is None:
        db = Database(
            db_path or config.DB_PATH,
            flush_delay=config.FLUSH_DEBOUNCE_SECONDS if flush_delay is None else flush_delay,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db.init()
        logger.info("Visit store ready (%s, %s)", db.path, config.ENVIRONMENT)
        try:
            yield
        finally:
            db.close()

    app = FastAPI(title="Perpus Visits API", version=config.APP_VERSION, lifespan=lifespan)
    app.state.db = db

    # -----------------------------
    # CORS (dashboard + kiosk)
    # -----------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=config.CORS_ALLOW_METHODS,
        allow_headers=config.CORS_ALLOW_HEADERS,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    _register_error_handlers(app)

    app.include_router(core.router)
    if config.ENABLE_DEBUG_ENDPOINTS:
        app.include_router(core.debug_router)
    app.include_router(visits.router)
    app.include_router(auth.router)
    app.include_router(settings.router)
    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
