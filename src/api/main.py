import asyncio
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.fs.session_store import FileSessionStore
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import Settings, get_settings
from src.app_shell.config import validate_ops_rules
from src.rules.loader import load_rules
from src.shell.http.health import (
    DatabaseCheck,
    HealthCheckRegistry,
    StartupCheck,
    StartupTracker,
    create_health_router,
)

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


async def _cleanup_sessions_periodically(settings: Settings) -> None:
    """Delete expired upload sessions every ``session_cleanup_interval_hours``."""
    store = FileSessionStore(str(settings.sessions_dir), settings.session_timeout_hours)
    interval = max(settings.session_cleanup_interval_hours, 0.01) * 3600
    while True:
        result = await asyncio.to_thread(store.cleanup_expired_sessions)
        if result["removed"] or result["errors"]:
            logger.info(
                "Session cleanup: %d removed, %d errors", result["removed"], result["errors"]
            )
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Fail fast on bad rules or config, migrate, then start session cleanup."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    settings = get_settings()

    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        logger.info("Rules loaded from %s", settings.rules_path)
        SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    except (OSError, ValueError, RuntimeError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    StartupTracker.mark_started()
    cleanup_task = asyncio.create_task(_cleanup_sessions_periodically(settings))
    yield

    cleanup_task.cancel()
    with suppress(asyncio.CancelledError):
        await cleanup_task
    StartupTracker.reset()


app = FastAPI(
    title="Media Governance API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import (  # noqa: E402
    admin_game_plans,
    admin_geography,
    admin_taxonomy,
    auth,
    change_requests,
    compliance_rules,
    dashboard,
    five_stars,
    media_sufficiency,
    reach_planning,
    scores,
    share_of_voice,
    users,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/admin/users", tags=["Admin Users"])
app.include_router(admin_geography.router, prefix="/api/admin", tags=["Admin Geography"])
app.include_router(admin_taxonomy.router, prefix="/api/admin", tags=["Admin Taxonomy"])
app.include_router(
    admin_game_plans.router, prefix="/api/admin/game-plans", tags=["Admin Game Plans"]
)
app.include_router(
    media_sufficiency.router,
    prefix="/api/admin/media-sufficiency",
    tags=["Media Sufficiency"],
)
app.include_router(
    reach_planning.router, prefix="/api/admin/reach-planning", tags=["Reach Planning"]
)
app.include_router(
    share_of_voice.router, prefix="/api/admin/share-of-voice", tags=["Share of Voice"]
)
app.include_router(dashboard.admin_router, prefix="/api/admin", tags=["Admin Dashboard"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(scores.router, prefix="/api/scores", tags=["Governance"])
app.include_router(compliance_rules.router, prefix="/api/rules", tags=["Governance"])
app.include_router(change_requests.router, prefix="/api/change-requests", tags=["Governance"])
app.include_router(five_stars.router, prefix="/api/five-stars", tags=["Governance"])

health_registry = HealthCheckRegistry()
health_registry.register(StartupCheck())
health_registry.register(DatabaseCheck(lambda: get_settings().db_path))
app.include_router(create_health_router(health_registry, __version__))


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
