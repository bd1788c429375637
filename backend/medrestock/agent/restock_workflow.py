"""
Restocking workflow: the component boundary the UI talks to.

Exposes:
- three read-only, category-filtered, keyed display sets
  (needs_restock / processing / completed)
- actions: refresh, set_category_filter, open_restock_form,
  submit_restock, confirm_delivery

Every action returns an ActionResult (success + human-readable text) that
the message display shows verbatim. No exception from the inventory
service escapes this class.

Ownership:
- display sets are replaced only by a successful refresh cycle
  (stale-but-consistent on failure, never a partial merge)
- form state belongs to the form flow; it is cleared only after a
  successful submit so a failed one can be retried as-is

The inventory client is blocking; its calls run in the default executor
so the event loop is only suspended while waiting on the network.
"""
import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from medrestock.agent.refresh_scheduler import RefreshScheduler
from medrestock.core.audit import AuditLog
from medrestock.core.config import settings
from medrestock.core.exceptions import RemoteRejection, RestockError, TransportError, ValidationError
from medrestock.schemas.inventory import (
    ALL_CATEGORIES,
    ActionResult,
    Category,
    DisplayItem,
    InventoryAlert,
    InventorySummary,
    RestockForm,
    RestockView,
)
from medrestock.services.alert_service import build_inventory_alerts, merge_medications
from medrestock.services.reconciler import (
    ReconciledInventory,
    assign_display_keys,
    build_view,
    filter_by_category,
    reconcile,
)
from medrestock.services.restock_service import (
    DeliveryOutcome,
    RestockService,
    default_expected_delivery_date,
)

logger = logging.getLogger(__name__)

REFRESH_FAILED = "Failed to fetch data. Please try again later."
SUBMIT_OK = "Restock order submitted successfully!"
SUBMIT_FAILED = "Failed to submit restock order. Please try again later."
DELIVERY_OK = "Order marked as delivered successfully!"
DELIVERY_FAILED = "Failed to mark order as delivered. Please try again."


def _error_kind(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return "validation"
    if isinstance(error, RemoteRejection):
        return "remote"
    return "transport"


class RestockWorkflow:
    def __init__(
        self,
        client,
        interval_seconds: Optional[float] = None,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self.service = RestockService(client)
        self.scheduler = RefreshScheduler(
            self._refresh_cycle,
            settings.RESTOCK_POLL_INTERVAL_SECONDS if interval_seconds is None else interval_seconds,
        )
        self._today = today

        self._inventory = ReconciledInventory()
        self.category_filter: str = ALL_CATEGORIES
        self.active_view: RestockView = RestockView.MAIN
        self.form: Optional[RestockForm] = None
        self.last_refreshed_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

        self.alerts: List[InventoryAlert] = []
        self.summary = InventorySummary()

    # ------------------------------------------------------------------
    # Activation scope
    # ------------------------------------------------------------------

    def activate(self):
        """Screen became active: refresh now and start polling."""
        self.scheduler.start()

    async def deactivate(self):
        """Screen torn down: stop polling. Nothing fires after this returns."""
        await self.scheduler.stop()

    async def on_focus(self) -> ActionResult:
        return await self.refresh("focus")

    # ------------------------------------------------------------------
    # Display sets
    # ------------------------------------------------------------------

    @property
    def inventory(self) -> ReconciledInventory:
        return self._inventory

    @property
    def needs_restock(self) -> List[DisplayItem]:
        return self.view(RestockView.MAIN)

    @property
    def processing(self) -> List[DisplayItem]:
        return self.view(RestockView.PROCESSING)

    @property
    def completed(self) -> List[DisplayItem]:
        return self.view(RestockView.COMPLETED)

    def view(self, view=None) -> List[DisplayItem]:
        return build_view(self._inventory, view or self.active_view, self.category_filter, self._today())

    def set_category_filter(self, category: str) -> ActionResult:
        if category != ALL_CATEGORIES:
            try:
                category = Category(category).value
            except ValueError:
                return ActionResult.failure(f"Unknown category: {category}", "validation")
        self.category_filter = category
        return ActionResult.ok()

    def set_active_view(self, view) -> ActionResult:
        try:
            self.active_view = RestockView(view)
        except ValueError:
            return ActionResult.failure(f"Unknown view: {view}", "validation")
        return ActionResult.ok()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def refresh(self, reason: str = "manual") -> ActionResult:
        result = await self.scheduler.refresh_now(reason)
        if result is None:
            return ActionResult.failure(REFRESH_FAILED, "transport")
        return result

    def open_restock_form(self, medication_key: str) -> Optional[RestockForm]:
        """Pre-fill a restock form for a row of the needs-restock set."""
        for key, entry in self._keyed_needs_restock():
            if key == medication_key:
                self.form = RestockForm(
                    medication=entry.medication,
                    expected_delivery_date=default_expected_delivery_date(self._today()),
                    category=entry.medication.category,
                )
                return self.form
        logger.debug(f"[RestockWorkflow] No needs-restock row with key {medication_key}")
        return None

    async def submit_restock(self, form: Optional[RestockForm] = None) -> ActionResult:
        if form is None:
            form = self.form
        if form is None:
            return ActionResult.failure("Please select a medication to restock.", "validation")
        self.form = form

        try:
            await self._run_blocking(self.service.submit_restock, form, self._today())
        except ValidationError as e:
            return ActionResult.failure(e.message, "validation")
        except RemoteRejection as e:
            logger.warning(f"[RestockWorkflow] Restock rejected: {e}")
            return ActionResult.failure(e.remote_message or SUBMIT_FAILED, "remote")
        except TransportError as e:
            logger.error(f"[RestockWorkflow] Restock submit failed: {e}")
            return ActionResult.failure(SUBMIT_FAILED, "transport")

        self.form = None
        self.active_view = RestockView.PROCESSING
        await self.refresh("restock_submitted")
        return ActionResult.ok(SUBMIT_OK)

    async def confirm_delivery(self, order_id) -> ActionResult:
        try:
            outcome = await self._run_blocking(self.service.confirm_delivery, order_id)
        except RemoteRejection as e:
            logger.warning(f"[RestockWorkflow] Delivery of {order_id} rejected: {e}")
            return ActionResult.failure(e.remote_message or DELIVERY_FAILED, "remote")
        except TransportError as e:
            logger.error(f"[RestockWorkflow] Delivery of {order_id} failed: {e}")
            return ActionResult.failure(DELIVERY_FAILED, "transport")

        if outcome == DeliveryOutcome.ALREADY_COMPLETED:
            logger.info(f"[RestockWorkflow] Order {order_id} was already delivered")
        await self.refresh("delivery_confirmed")
        return ActionResult.ok(DELIVERY_OK)

    async def refresh_alerts(self) -> ActionResult:
        """Front page alerts from fresh low-stock and expiring medication lists."""
        try:
            low_stock, expiring = await asyncio.gather(
                self._run_blocking(self.client.list_low_stock),
                self._run_blocking(self.client.list_expiring),
            )
        except RestockError as e:
            logger.error(f"[RestockWorkflow] Alert refresh failed: {e}")
            return ActionResult.failure(REFRESH_FAILED, _error_kind(e))

        self.alerts, self.summary = build_inventory_alerts(
            merge_medications(low_stock, expiring), today=self._today()
        )
        return ActionResult.ok()

    def state(self) -> dict:
        return {
            "active_view": self.active_view.value,
            "category_filter": self.category_filter,
            "polling": self.scheduler.is_active,
            "refreshing": self.scheduler.is_refreshing,
            "last_refreshed_at": self.last_refreshed_at.isoformat() if self.last_refreshed_at else None,
            "last_error": self.last_error,
            "counts": self._inventory.counts,
            "form_open": self.form is not None,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _keyed_needs_restock(self):
        return assign_display_keys(filter_by_category(self._inventory.needs_restock, self.category_filter))

    async def _run_blocking(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def _refresh_cycle(self, reason: str) -> ActionResult:
        """Fetch both sources concurrently; replace the display sets only if both succeed."""
        try:
            low_stock, orders = await asyncio.gather(
                self._run_blocking(self.client.list_low_stock),
                self._run_blocking(self.client.list_restock_orders),
            )
        except RestockError as e:
            self.last_error = e.message
            logger.error(f"[RestockWorkflow] Refresh failed ({reason}): {e}")
            AuditLog.log_refresh(False, reason=reason)
            return ActionResult.failure(REFRESH_FAILED, _error_kind(e))
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"[RestockWorkflow] Unexpected refresh error ({reason}): {e}", exc_info=True)
            AuditLog.log_refresh(False, reason=reason)
            return ActionResult.failure(REFRESH_FAILED, "transport")

        inventory = reconcile(low_stock, orders)
        self._inventory = inventory
        self.last_refreshed_at = datetime.now(timezone.utc)
        self.last_error = None

        logger.info(f"[RestockWorkflow] Refreshed ({reason}): {inventory.counts}")
        AuditLog.log_refresh(True, reason=reason, **inventory.counts)
        return ActionResult.ok()
