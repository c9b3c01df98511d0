from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging

from .config import Settings, settings as default_settings
from .db import init_db, make_engine, make_session_factory
from .directory import RestUserDirectory, SqlUserDirectory, UserDirectory
from .errors import register_error_handlers
from .routes import auth, health


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# Configure logging
configure_logging(default_settings)

logger = logging.getLogger(__name__)


def build_directory(settings: Settings) -> UserDirectory:
    """Construct the user directory client selected by ``DIRECTORY_BACKEND``."""
    if settings.DIRECTORY_BACKEND == "sql":
        engine = make_engine(settings.DATABASE_URL)
        init_db(engine)
        logger.info("Using SQL user directory")
        return SqlUserDirectory(make_session_factory(engine))

    logger.info("Using REST user directory at %s", settings.SUPABASE_URL)
    return RestUserDirectory(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        table=settings.USERS_TABLE,
        timeout=settings.DIRECTORY_TIMEOUT_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the directory client on startup unless one was injected, close it on shutdown"""
    owns_directory = app.state.directory is None
    if owns_directory:
        app.state.directory = build_directory(app.state.settings)
    if app.state.settings.uses_default_jwt_secret:
        logger.warning("JWT_SECRET is not set; tokens are signed with the insecure default secret")
    try:
        yield
    finally:
        if owns_directory:
            app.state.directory.close()
            app.state.directory = None


def create_app(settings: Optional[Settings] = None, directory: Optional[UserDirectory] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Directory Auth",
        description="Registration and login backed by an external user directory",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.directory = directory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )
    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(health.router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
