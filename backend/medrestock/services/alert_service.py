"""Front page inventory alerts and summary counts."""
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from medrestock.core.config import settings
from medrestock.schemas.inventory import InventoryAlert, InventorySummary, Medication

logger = logging.getLogger(__name__)


def _category_tag(med: Medication) -> str:
    return med.category.value if med.category else "uncategorized"


def _category_title(med: Medication) -> str:
    return med.category.label if med.category else "Uncategorized"


def build_inventory_alerts(
    medications: Iterable[Medication],
    today: Optional[date] = None,
    warning_days: Optional[int] = None,
) -> Tuple[List[InventoryAlert], InventorySummary]:
    """
    Low-stock and expiry alerts for a medication list, high priority first.

    Low-stock alerts are clickable (they lead to the restocking flow);
    expiry alerts are informational.
    """
    today = today or date.today()
    if warning_days is None:
        warning_days = settings.EXPIRY_WARNING_DAYS
    horizon = today + timedelta(days=warning_days)

    medications = list(medications)
    alerts: List[InventoryAlert] = []
    summary = InventorySummary(total_medications=len(medications))

    for med in medications:
        if med.quantity <= med.reorder_point:
            summary.low_stock += 1
            alerts.append(InventoryAlert(
                id=f"lowstock-{_category_tag(med)}-{med.id}",
                type="lowStock",
                title=f"Low Stock Warning - {_category_title(med)}",
                message=f"{med.name} is running low ({med.quantity} units remaining)",
                priority="high" if med.quantity == 0 else "medium",
                category=med.category,
                medication_id=med.id,
                clickable=True,
            ))

        if med.expiration_date is not None and med.expiration_date <= horizon:
            summary.expiring_soon += 1
            alerts.append(InventoryAlert(
                id=f"expiring-{_category_tag(med)}-{med.id}",
                type="expiring",
                title=f"Expiration Warning - {_category_title(med)}",
                message=f"{med.name} expires on {med.expiration_date.isoformat()}",
                priority="high" if med.expiration_date <= today else "medium",
                category=med.category,
                medication_id=med.id,
                clickable=False,
            ))

        summary.total_inventory += med.quantity

    # Stable sort keeps insertion order within a priority
    alerts.sort(key=lambda a: 0 if a.priority == "high" else 1)

    logger.debug(
        f"[Alerts] {summary.low_stock} low stock, {summary.expiring_soon} expiring "
        f"across {summary.total_medications} medications"
    )
    return alerts, summary


def merge_medications(*lists: Iterable[Medication]) -> List[Medication]:
    """Union of medication lists, first occurrence wins for a given (category, id)."""
    seen = set()
    merged = []
    for meds in lists:
        for med in meds:
            identity = (_category_tag(med), med.id if med.id is not None else med.name)
            if identity in seen:
                continue
            seen.add(identity)
            merged.append(med)
    return merged
