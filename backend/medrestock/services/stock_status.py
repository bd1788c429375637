"""
Stock status policies.

Two policies coexist and are NOT interchangeable:
- classify_stock_status: restocking screen, quantity vs reorder point,
  zero stock is the most urgent tier.
- classify_reorder_level: medication add/edit forms, reorder point plus a
  low-stock margin.
Callers depend on their own thresholds, so keep them separate.
"""
from typing import Optional

from medrestock.core.config import settings
from medrestock.schemas.inventory import ReorderLevel, StockStatus

PROCESSING_LABEL = "Processing"
COMPLETED_LABEL = "Completed"
OVERDUE_LABEL = "Overdue"

# Badge colours for each display status
STATUS_COLORS = {
    StockStatus.LOW_STOCK.value: "#FFB946",
    StockStatus.NEAR_RESTOCK.value: "#FFD700",
    StockStatus.IN_STOCK.value: "#2ECC71",
    PROCESSING_LABEL: "#4A90E2",
    COMPLETED_LABEL: "#2ECC71",
    OVERDUE_LABEL: "#E74C3C",
}
UNKNOWN_STATUS = {"color": "#4A90E2", "text": "Unknown"}


def classify_stock_status(quantity: int, reorder_point: int) -> StockStatus:
    """
    Restocking screen policy. First match wins:
    - quantity == 0            -> Near Restock
    - quantity <= reorder point -> Low Stock
    - otherwise                -> In Stock

    Inputs must be non-negative; the inventory service guarantees that.
    """
    if quantity == 0:
        return StockStatus.NEAR_RESTOCK
    if quantity <= reorder_point:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def classify_reorder_level(current, reorder, margin: Optional[int] = None) -> ReorderLevel:
    """
    Medication form policy. Accepts the raw form values (strings or ints).

    - current <= reorder          -> Reorder Required
    - current <= reorder + margin -> Low Stock
    - otherwise                   -> Sufficient Stock
    """
    if margin is None:
        margin = settings.LOW_STOCK_MARGIN
    current_num = int(str(current).strip())
    reorder_num = int(str(reorder).strip())

    if current_num <= reorder_num:
        return ReorderLevel.REORDER_REQUIRED
    if current_num <= reorder_num + margin:
        return ReorderLevel.LOW_STOCK
    return ReorderLevel.SUFFICIENT_STOCK


def get_status_info(status: Optional[str]) -> dict:
    """Badge colour and text for a display status."""
    if isinstance(status, StockStatus):
        status = status.value
    color = STATUS_COLORS.get(status)
    if color is None:
        return dict(UNKNOWN_STATUS)
    return {"color": color, "text": status}
