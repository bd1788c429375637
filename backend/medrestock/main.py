"""
Medication restocking service for the provider app.

ARCHITECTURE:
- Inventory service (remote): source of truth for medications and restock orders
- RestockWorkflow: reconciles low-stock medications against restock orders,
  drives the Pending -> Completed order lifecycle, polls for fresh data
- This FastAPI app: the surface the mobile UI calls; it renders whatever
  messages the workflow hands back

The polling loop lives exactly as long as the app: started in the lifespan
startup, cancelled on shutdown.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medrestock import __version__
from medrestock.agent.restock_workflow import RestockWorkflow
from medrestock.api.routes import alerts, restocks
from medrestock.core.config import settings
from medrestock.services.inventory_client import get_inventory_client

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(client=None, interval_seconds: Optional[float] = None) -> FastAPI:
    """Build the app. Tests pass a fake inventory client and a long interval."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: build the workflow, refresh once, start polling.
        Shutdown: stop polling so no refresh fires after teardown.
        """
        workflow = RestockWorkflow(client or get_inventory_client(), interval_seconds=interval_seconds)
        app.state.workflow = workflow
        workflow.activate()
        logger.info(f"[*] Restock workflow active against {settings.INVENTORY_API_BASE_URL}")

        yield

        await workflow.deactivate()
        app.state.workflow = None
        logger.info("[*] Restock workflow stopped")

    app = FastAPI(
        title="MedRestock API",
        description="Medication restocking: low stock -> restock order -> delivered.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
        max_age=600,
    )

    app.include_router(restocks.router, prefix="/restocks", tags=["restocks"])
    app.include_router(alerts.router, prefix="/alerts", tags=["alerts"])

    @app.get("/health")
    def health():
        workflow = getattr(app.state, "workflow", None)
        return {"status": "ok", "polling": bool(workflow and workflow.scheduler.is_active)}

    return app


app = create_app()
