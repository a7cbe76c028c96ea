import logging

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402
from typing import Optional  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from proofmaster.api.base import api_router  # noqa: E402
from proofmaster.config import Settings, get_settings  # noqa: E402
from proofmaster.infra.supabase.client import get_supabase_client  # noqa: E402
from proofmaster.infra.supabase.repositories.production_runs import ProductionRunRepository  # noqa: E402
from proofmaster.services.clock import Clock, SystemClock  # noqa: E402
from proofmaster.services.notification_service import NotificationService  # noqa: E402
from proofmaster.services.production.production_service import ProductionService  # noqa: E402
from proofmaster.services.timer.broadcaster import TimerBoardBroadcaster  # noqa: E402
from proofmaster.services.timer.scheduler import AsyncioScheduler, Scheduler  # noqa: E402
from proofmaster.services.timer.timer_registry import TimerRegistry  # noqa: E402

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    scheduler: Optional[Scheduler] = None,
    run_repository: Optional[ProductionRunRepository] = None,
) -> FastAPI:
    """
    Build the application and the services it owns.

    The timer registry lives as long as the app and is handed to routes
    through dependencies in proofmaster.api.deps.
    """
    settings = settings or get_settings()
    clock = clock or SystemClock()
    scheduler = scheduler or AsyncioScheduler()

    notification_service = NotificationService(settings.notification_history_size, clock=clock)
    registry = TimerRegistry(clock, scheduler, notification_service, settings.timers)
    broadcaster = TimerBoardBroadcaster()
    registry.subscribe(broadcaster)

    if run_repository is None and settings.supabase_configured:
        run_repository = ProductionRunRepository(get_supabase_client())
    if run_repository is None:
        logger.warning("Supabase is not configured; production runs will not be saved")

    production_service = ProductionService(
        registry,
        notification_service,
        settings.production,
        run_repository=run_repository,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.app_name} {settings.version} started")
        yield
        registry.shutdown()

    app = FastAPI(
        title="BreadHub ProofMaster API",
        description="Backend API for BreadHub ProofMaster - proofing and baking timers for bakery production",
        version=settings.version,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Specify your frontend URL in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.notification_service = notification_service
    app.state.timer_registry = registry
    app.state.board_broadcaster = broadcaster
    app.state.production_service = production_service

    # Include all API routes
    app.include_router(api_router)

    @app.get("/")
    def read_root():
        return {
            "message": "BreadHub ProofMaster API",
            "docs": "/docs",
            "version": settings.version
        }

    return app


app = create_app()
