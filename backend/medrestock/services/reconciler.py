"""
Inventory reconciliation.

Merges the low-stock medication list and the restock order list into three
display sets:
- needs_restock: low-stock medications with no open (Pending) order
- processing:    Pending orders
- completed:     Completed orders

Everything here is pure. Source records are never mutated; presentation
keys live only on the DisplayItem copies built for rendering.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel

from medrestock.schemas.inventory import (
    ALL_CATEGORIES,
    Category,
    DisplayItem,
    Medication,
    OrderStatus,
    RestockOrder,
    RestockView,
    StockStatus,
)
from medrestock.services.stock_status import (
    COMPLETED_LABEL,
    OVERDUE_LABEL,
    PROCESSING_LABEL,
    classify_stock_status,
    get_status_info,
)
from medrestock.services.restock_service import is_overdue

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LowStockEntry(BaseModel):
    medication: Medication
    status: StockStatus

    @property
    def id(self):
        return self.medication.id

    @property
    def category(self) -> Optional[Category]:
        return self.medication.category


class ReconciledInventory(BaseModel):
    """Result of one reconciliation cycle. Replaced wholesale, never patched."""

    needs_restock: List[LowStockEntry] = []
    processing: List[RestockOrder] = []
    completed: List[RestockOrder] = []

    @property
    def counts(self) -> dict:
        return {
            "needs_restock": len(self.needs_restock),
            "processing": len(self.processing),
            "completed": len(self.completed),
        }


def _id_key(record_id) -> Optional[str]:
    # The service mixes numeric and string ids between endpoints
    if record_id is None or record_id == "":
        return None
    return str(record_id)


def reconcile(low_stock_meds: Sequence[Medication], orders: Sequence[RestockOrder]) -> ReconciledInventory:
    """Partition orders by status and drop medications that already have an open order."""
    processing = [o for o in orders if o.status == OrderStatus.PENDING]
    completed = [o for o in orders if o.status == OrderStatus.COMPLETED]

    processing_ids = {_id_key(o.medication_id) for o in processing}
    processing_ids.discard(None)

    needs_restock = [
        LowStockEntry(medication=m, status=classify_stock_status(m.quantity, m.reorder_point))
        for m in low_stock_meds
        if _id_key(m.id) not in processing_ids
    ]

    skipped = len(low_stock_meds) - len(needs_restock)
    if skipped:
        logger.debug(f"[Reconciler] {skipped} low-stock medication(s) already have an open order")

    return ReconciledInventory(
        needs_restock=needs_restock,
        processing=processing,
        completed=completed,
    )


def filter_by_category(records: Iterable[T], category: Union[str, Category, None]) -> List[T]:
    """Exact category match, or everything when the filter is "all". Order is preserved."""
    if category is None or category == ALL_CATEGORIES:
        return list(records)
    wanted = Category(category)
    return [r for r in records if r.category == wanted]


def assign_display_keys(records: Sequence[T]) -> List[Tuple[str, T]]:
    """
    Give every record a unique presentation key.

    - real id, first occurrence -> the id itself
    - missing id                -> "generated-<index>"
    - duplicate id              -> "<id>-<index>"

    These keys are for rendering only and must never be sent back to the
    inventory service as identifiers.
    """
    seen = set()
    keyed = []
    for index, record in enumerate(records):
        record_id = _id_key(record.id)
        if record_id is None:
            key = f"generated-{index}"
        elif record_id in seen:
            key = f"{record_id}-{index}"
        else:
            seen.add(record_id)
            key = record_id
        keyed.append((key, record))
    return keyed


def _display_low_stock(key: str, entry: LowStockEntry) -> DisplayItem:
    med = entry.medication
    info = get_status_info(entry.status)
    return DisplayItem(
        key=key,
        id=med.id,
        name=med.name,
        category=med.category,
        category_label=med.category.label if med.category else None,
        quantity=med.quantity,
        status=info["text"],
        status_color=info["color"],
        reorder_point=med.reorder_point,
        batch=med.batch,
    )


def _display_order(key: str, order: RestockOrder, today: date) -> DisplayItem:
    overdue = is_overdue(order, today)
    if order.status == OrderStatus.COMPLETED:
        label = COMPLETED_LABEL
    else:
        label = PROCESSING_LABEL
    # Overdue only changes the badge colour; the order stays Pending
    color = get_status_info(OVERDUE_LABEL if overdue else label)["color"]
    return DisplayItem(
        key=key,
        id=order.id,
        name=order.name,
        category=order.category,
        category_label=order.category.label if order.category else None,
        quantity=order.quantity,
        status=label,
        status_color=color,
        batch=order.next_batch,
        expected_delivery_date=order.expected_delivery_date,
        overdue=overdue,
    )


def build_view(
    inventory: ReconciledInventory,
    view: Union[str, RestockView],
    category: Union[str, Category, None] = ALL_CATEGORIES,
    today: Optional[date] = None,
) -> List[DisplayItem]:
    """Filter one display set by category, key it, and shape it for rendering."""
    view = RestockView(view)
    today = today or date.today()

    if view == RestockView.PROCESSING:
        records = filter_by_category(inventory.processing, category)
        return [_display_order(k, o, today) for k, o in assign_display_keys(records)]
    if view == RestockView.COMPLETED:
        records = filter_by_category(inventory.completed, category)
        return [_display_order(k, o, today) for k, o in assign_display_keys(records)]

    records = filter_by_category(inventory.needs_restock, category)
    return [_display_low_stock(k, e) for k, e in assign_display_keys(records)]
