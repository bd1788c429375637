"""
Audit logging for restock order lifecycle events.

One JSON object per event on the "audit" logger so it can be shipped to
centralized logging. Only real identifiers are logged, never the
presentation keys synthesized for list rendering.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Separate logger for audit events
audit_logger = logging.getLogger("audit")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for restock orders."""

    @staticmethod
    def log_restock_event(
        action: str,  # "submitted", "submit_failed", "delivered", "delivery_failed", "already_completed"
        order_id: Any,
        category: Optional[str] = None,
        quantity: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a restock order lifecycle event.

        Usage:
            AuditLog.log_restock_event("submitted", 42, category="diabetes", quantity=50)
            AuditLog.log_restock_event("delivery_failed", 42, details={"reason": "timeout"})
        """
        log_entry = {
            "timestamp": _utc_now(),
            "event_type": f"restock.{action}",
            "order_id": order_id,
        }

        if category:
            log_entry["category"] = category
        if quantity is not None:
            log_entry["quantity"] = quantity
        if details:
            log_entry["details"] = details

        if action.endswith("_failed"):
            audit_logger.warning(json.dumps(log_entry, default=str))
        else:
            audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_refresh(
        success: bool,
        needs_restock: int = 0,
        processing: int = 0,
        completed: int = 0,
        reason: str = "",
    ):
        """
        Log the outcome of a reconciliation cycle.

        Usage:
            AuditLog.log_refresh(True, needs_restock=4, processing=2, completed=9, reason="interval")
        """
        log_entry = {
            "timestamp": _utc_now(),
            "event_type": "restock.refresh",
            "success": success,
            "reason": reason,
        }

        if success:
            log_entry["counts"] = {
                "needs_restock": needs_restock,
                "processing": processing,
                "completed": completed,
            }
            audit_logger.info(json.dumps(log_entry))
        else:
            audit_logger.warning(json.dumps(log_entry))
