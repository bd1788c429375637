from medrestock.schemas.inventory import (
    ActionResult,
    Category,
    DisplayItem,
    InventoryAlert,
    InventorySummary,
    Medication,
    OrderStatus,
    ReorderLevel,
    RestockForm,
    RestockOrder,
    RestockView,
    StockStatus,
)

__all__ = [
    "ActionResult",
    "Category",
    "DisplayItem",
    "InventoryAlert",
    "InventorySummary",
    "Medication",
    "OrderStatus",
    "ReorderLevel",
    "RestockForm",
    "RestockOrder",
    "RestockView",
    "StockStatus",
]
