"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from files_manager.auth.dependencies import get_user_directory
from files_manager.config import get_settings
from files_manager.db.session import dispose_db, get_session, init_db
from files_manager.files.dependencies import get_file_documents
from files_manager.files.documents import SqlFileDocuments
from files_manager.files.routes import router as files_router
from files_manager.limiter import limiter
from files_manager.sessions.store import SqlSessionStore
from files_manager.users.directory import UserDirectory
from files_manager.users.routes import router as users_router

log = logging.getLogger(__name__)


def _setup_logging() -> None:
    """Configure logging from settings (stderr always; optional file)."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root = logging.getLogger("files_manager")
    root.setLevel(level)
    root.handlers.clear()
    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root.addHandler(sh)
    if settings.log_file and str(settings.log_file).strip():
        try:
            fh = logging.FileHandler(settings.log_file, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(fmt)
            root.addHandler(fh)
            root.info("Logging to file %s", settings.log_file)
        except OSError as e:
            root.warning("Could not open log file %s: %s", settings.log_file, e)
    else:
        root.debug("Logging to stderr only (no log_file set)")


_setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, drop expired sessions and bootstrap the first user on startup."""
    log.info("Startup: initializing database")
    await init_db()
    async with get_session() as session:
        sessions = SqlSessionStore(session)
        purged = await sessions.purge_expired()
        if purged:
            log.info("Removed %d expired sessions", purged)
        await UserDirectory(session, sessions).ensure_admin_exists()
    log.info("Startup complete")
    yield
    await dispose_db()
    log.info("Shutdown")


app = FastAPI(title="Files Manager API", version="0.1.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"error": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON or wrongly typed fields."""
    log.warning(
        "Invalid request body on %s: %s", request.url.path, [e.get("loc") for e in exc.errors()]
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Return generic 500 without leaking stack trace or internals (includes database failures)."""
    log.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(users_router)
app.include_router(files_router)


@app.get("/health")
@limiter.exempt
def health() -> JSONResponse:
    """Health check. Exempt from rate limiting."""
    return JSONResponse(content={"status": "ok"})


@app.get("/stats")
async def stats(
    users: Annotated[UserDirectory, Depends(get_user_directory)],
    files: Annotated[SqlFileDocuments, Depends(get_file_documents)],
) -> dict:
    """Number of users and file entries."""
    return {"users": await users.count(), "files": await files.count()}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(app, host=settings.host, port=settings.port)
