"""PPR Blog - demo blogging API with cookie sessions and tagged read caching."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pprblog.api import analytics, auth, posts, users
from pprblog.cache import TaggedCache
from pprblog.config import Settings, get_settings
from pprblog.errors import BlogError
from pprblog.seed import seed_demo_data
from pprblog.services.accounts import AccountService
from pprblog.services.queries import BlogQueries
from pprblog.services.sessions import SessionManager
from pprblog.storage import Storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    storage: Storage = app.state.storage

    # Startup: create tables, drop stale sessions, optionally seed
    storage.create_tables()

    if settings.sweep_expired_sessions_on_startup:
        app.state.sessions.purge_expired()

    if settings.seed_demo_data:
        seed_demo_data(storage, settings.seed_file, rounds=settings.bcrypt_rounds)

    yield
    # Shutdown
    storage.dispose()


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are a 400, not FastAPI's default 422."""
    logger.info(f"Rejected invalid input on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid input data", "detail": jsonable_encoder(exc.errors())},
    )


async def blog_error_handler(request: Request, exc: BlogError):
    """Domain errors that no route translated itself."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """Build the application and wire its collaborators onto ``app.state``."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    storage = storage or Storage.from_url(settings.database_url, echo=settings.debug)
    cache = TaggedCache()

    app = FastAPI(
        title=settings.app_name,
        description="Blog posts, comments and cookie sessions with tagged read caching",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.cache = cache
    app.state.sessions = SessionManager(storage, settings)
    app.state.accounts = AccountService(storage, cache, settings)
    app.state.queries = BlogQueries(storage, cache)

    # CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BlogError, blog_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    app.include_router(auth.router, prefix="/api")
    app.include_router(posts.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(analytics.router, prefix="/api")

    return app


app = create_app()
