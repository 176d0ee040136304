import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vibe_magazine import __version__
from vibe_magazine.adapters.sqlite.migrator import SQLiteMigrator
from vibe_magazine.api.deps import get_rules, get_settings
from vibe_magazine.api.errors import install_error_handlers
from vibe_magazine.api.routes import analytics, auth, functions, submissions, users

logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and prepare the database on startup (fail-fast)
    try:
        rules = get_rules()
        logger.info("Rules loaded from %s (%s)", settings.rules_path, rules.project.slug)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        applied = SQLiteMigrator(settings.db_path).run_migrations()
        if applied:
            logger.info("Applied migrations: %s", ", ".join(applied))
    except (FileNotFoundError, ValueError, RuntimeError, OSError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Vibe Magazine Admin API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(analytics.router, prefix="/api", tags=["Analytics"])
    app.include_router(users.router, prefix="/api/admin/users", tags=["Users"])
    app.include_router(submissions.router, prefix="/api", tags=["Submissions"])
    app.include_router(functions.router, prefix="/functions/v1", tags=["Functions"])

    # Browser clients call the function endpoints directly
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "GET", "DELETE", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
    )
    install_error_handlers(app)

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "vibe-magazine-admin"}

    return app


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
