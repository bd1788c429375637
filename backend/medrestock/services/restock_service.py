"""
Restock order lifecycle.

    Pending --(delivery confirmed)--> Completed

An order is created Pending and completed exactly once. There is no
reopening and no cancellation. `status` and `isDelivered` always travel in
the same request so no caller can observe one without the other.

Delivery confirmation is idempotent: confirming an order that the service
already reports as Completed is a success, and nothing is re-sent. This
matters because the service adds the ordered quantity to stock on every
delivered PATCH.
"""
import logging
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Tuple

from medrestock.core.audit import AuditLog
from medrestock.core.config import settings
from medrestock.core.exceptions import NotFoundError, TransportError, ValidationError
from medrestock.schemas.inventory import OrderStatus, RestockForm, RestockOrder

logger = logging.getLogger(__name__)

DELIVERED_PATCH = {"isDelivered": True, "status": OrderStatus.COMPLETED.value}


class DeliveryOutcome(str, Enum):
    DELIVERED = "delivered"
    ALREADY_COMPLETED = "already_completed"


def default_expected_delivery_date(today: Optional[date] = None) -> date:
    today = today or date.today()
    return today + timedelta(days=settings.DEFAULT_DELIVERY_LEAD_DAYS)


def is_overdue(order: RestockOrder, today: Optional[date] = None) -> bool:
    """Pending and past its expected delivery date. Informational only."""
    if order.status != OrderStatus.PENDING or order.expected_delivery_date is None:
        return False
    today = today or date.today()
    return order.expected_delivery_date < today


def parse_quantity(raw) -> int:
    if isinstance(raw, bool):
        raise ValidationError("Please enter a valid positive quantity.", code="invalid_quantity")
    if isinstance(raw, int):
        quantity = raw
    else:
        try:
            quantity = int(str(raw).strip())
        except ValueError:
            raise ValidationError("Please enter a valid positive quantity.", code="invalid_quantity")
    if quantity <= 0:
        raise ValidationError("Please enter a valid positive quantity.", code="invalid_quantity")
    return quantity


def parse_delivery_date(raw, today: Optional[date] = None) -> date:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default_expected_delivery_date(today)
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        raise ValidationError(
            "Please enter a valid expected delivery date (YYYY-MM-DD).",
            code="invalid_delivery_date",
        )


def validate_restock_form(form: RestockForm, today: Optional[date] = None) -> Tuple[int, str, date]:
    """
    Check a restock form before anything is sent.

    Returns (quantity, next_batch, expected_delivery_date) or raises
    ValidationError. No network call is made either way.
    """
    raw_quantity = form.quantity
    if raw_quantity is None or (isinstance(raw_quantity, str) and raw_quantity == "") or not form.next_batch:
        raise ValidationError("Please provide both quantity and next batch number.", code="missing_fields")

    quantity = parse_quantity(raw_quantity)

    next_batch = form.next_batch.strip()
    if not next_batch:
        raise ValidationError("Next batch number cannot be empty.", code="empty_batch")

    if form.medication.id is None or str(form.medication.id).strip() == "":
        raise ValidationError("This medication has no identifier and cannot be restocked.", code="missing_id")

    if (form.category or form.medication.category) is None:
        raise ValidationError("Medication category is required.", code="missing_category")

    expected = parse_delivery_date(form.expected_delivery_date, today)
    return quantity, next_batch, expected


def build_restock_order(form: RestockForm, today: Optional[date] = None) -> RestockOrder:
    """New Pending order for the form's medication. Category is copied, not joined."""
    today = today or date.today()
    quantity, next_batch, expected = validate_restock_form(form, today)
    medication = form.medication
    return RestockOrder(
        id=medication.id,
        name=medication.name,
        quantity=quantity,
        status=OrderStatus.PENDING,
        order_date=today,
        expected_delivery_date=expected,
        category=form.category or medication.category,
        next_batch=next_batch,
        is_delivered=False,
    )


def restock_payload(order: RestockOrder) -> dict:
    """Wire format for POST /api/restocks."""
    return {
        "id": order.id,
        "name": order.name,
        "quantity": order.quantity,
        "status": order.status.value,
        "order_date": order.order_date.isoformat(),
        "expected_delivery_date": order.expected_delivery_date.isoformat(),
        "category": order.category.value,
        "next_batch": order.next_batch,
        "isDelivered": order.is_delivered,
    }


class RestockService:
    """Creates restock orders and confirms their delivery against the inventory service."""

    def __init__(self, client):
        self.client = client

    def submit_restock(self, form: RestockForm, today: Optional[date] = None) -> Tuple[RestockOrder, dict]:
        """
        Validate the form and create a Pending order remotely.

        Raises ValidationError before any call, or TransportError /
        RemoteRejection from the service. Returns the order and the
        service's response body.
        """
        order = build_restock_order(form, today)
        logger.info(
            f"[RestockService] Submitting restock for medication {order.medication_id}: "
            f"qty={order.quantity}, batch={order.next_batch}, due={order.expected_delivery_date}"
        )
        try:
            response = self.client.create_restock_order(restock_payload(order))
        except Exception as e:
            AuditLog.log_restock_event(
                "submit_failed",
                order.medication_id,
                category=order.category.value,
                quantity=order.quantity,
                details={"error": e.__class__.__name__, "message": str(e)},
            )
            raise

        AuditLog.log_restock_event(
            "submitted",
            order.medication_id,
            category=order.category.value,
            quantity=order.quantity,
            details={"restock_id": response.get("restock_id")} if response.get("restock_id") else None,
        )
        return order, response

    def confirm_delivery(self, order_id) -> DeliveryOutcome:
        """
        Move the Pending order for `order_id` to Completed.

        Orders share their id with the medication, so one id can have older
        Completed rows next to the open one. The decision is made on the
        Pending rows only: if none is left (for instance a previous attempt
        succeeded but its response was lost) this returns ALREADY_COMPLETED
        without sending the transition again.
        """
        rows = self._orders_with_id(order_id)
        if not rows:
            raise NotFoundError("Restock order not found", status_code=404)

        pending = [o for o in rows if o.status == OrderStatus.PENDING]
        if not pending:
            logger.info(f"[RestockService] Order {order_id} already completed; nothing to send")
            AuditLog.log_restock_event("already_completed", order_id)
            return DeliveryOutcome.ALREADY_COMPLETED
        current = pending[-1]

        try:
            self.client.update_restock_order(order_id, dict(DELIVERED_PATCH))
        except TransportError as e:
            # The PATCH may have landed even though the response did not
            if self._completed_remotely(order_id):
                logger.warning(f"[RestockService] Order {order_id} completed despite transport error: {e}")
                AuditLog.log_restock_event("delivered", order_id, details={"recovered": True})
                return DeliveryOutcome.DELIVERED
            AuditLog.log_restock_event("delivery_failed", order_id, details={"message": str(e)})
            raise
        except Exception as e:
            AuditLog.log_restock_event("delivery_failed", order_id, details={"message": str(e)})
            raise

        AuditLog.log_restock_event(
            "delivered",
            order_id,
            category=current.category.value if current.category else None,
            quantity=current.quantity,
        )
        return DeliveryOutcome.DELIVERED

    def _orders_with_id(self, order_id) -> List[RestockOrder]:
        return [o for o in self.client.list_restock_orders() if str(o.id) == str(order_id)]

    def _completed_remotely(self, order_id) -> bool:
        """True once no Pending row is left for this id."""
        try:
            rows = self._orders_with_id(order_id)
        except Exception as e:
            logger.warning(f"[RestockService] Could not re-check order {order_id}: {e}")
            return False
        return bool(rows) and all(o.status != OrderStatus.PENDING for o in rows)
