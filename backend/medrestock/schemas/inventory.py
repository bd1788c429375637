from pydantic import BaseModel, Field, field_validator
from typing import Optional, Union
from datetime import date, datetime
from enum import Enum


class Category(str, Enum):
    DIABETES = "diabetes"
    CARDIOVASCULAR = "cardiovascular"
    CANCER = "cancer"
    KIDNEY = "kidney"
    STROKE = "stroke"
    ARTHRITIS = "arthritis"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def _missing_(cls, value):
        # The inventory service and the front page use display labels
        # ("Kidney Disease") as well as values ("kidney").
        if isinstance(value, str):
            needle = value.strip().lower()
            for member in cls:
                if needle in (member.value, CATEGORY_LABELS[member].lower()):
                    return member
        return None


CATEGORY_LABELS = {
    Category.DIABETES: "Diabetes",
    Category.CARDIOVASCULAR: "Cardiovascular",
    Category.CANCER: "Cancer",
    Category.KIDNEY: "Kidney Disease",
    Category.STROKE: "Stroke",
    Category.ARTHRITIS: "Arthritis",
}

ALL_CATEGORIES = "all"

CATEGORY_OPTIONS = [{"value": ALL_CATEGORIES, "label": "All Categories"}] + [
    {"value": c.value, "label": CATEGORY_LABELS[c]} for c in Category
]


class StockStatus(str, Enum):
    """Restocking screen policy: quantity vs reorder point."""

    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    NEAR_RESTOCK = "Near Restock"


class ReorderLevel(str, Enum):
    """Medication form policy: reorder point plus a low-stock margin."""

    REORDER_REQUIRED = "Reorder Required"
    LOW_STOCK = "Low Stock"
    SUFFICIENT_STOCK = "Sufficient Stock"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class RestockView(str, Enum):
    MAIN = "main"
    PROCESSING = "processing"
    COMPLETED = "completed"


RecordId = Union[int, str]


def _to_category(v):
    if isinstance(v, str):
        if not v.strip():
            return None
        return Category(v)
    return v


def _date_only(v):
    # MySQL DATE columns come back serialized as full ISO timestamps
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and len(v) > 10 and v[4:5] == "-" and v[10:11] in ("T", " "):
        return v[:10]
    return v


class Medication(BaseModel):
    """Inventory record as returned by the inventory service."""

    id: Optional[RecordId] = None
    name: str
    quantity: int = Field(ge=0)
    reorder_point: int = Field(default=0, ge=0, alias="reorderPoint")
    category: Optional[Category] = None
    batch: Optional[str] = None
    next_batch: Optional[str] = None
    expiration_date: Optional[date] = Field(default=None, alias="expirationDate")

    class Config:
        populate_by_name = True

    @field_validator("expiration_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _date_only(v)

    @field_validator("category", mode="before")
    @classmethod
    def blank_category(cls, v):
        return _to_category(v)


class RestockOrder(BaseModel):
    """
    Restock order as returned by the inventory service.

    The order shares its id with the medication it replenishes, and
    `category` is the medication's category at the time the order was
    placed, not a live join.
    """

    id: Optional[RecordId] = None
    name: Optional[str] = None
    quantity: int = Field(ge=0)
    status: OrderStatus
    order_date: Optional[date] = None
    expected_delivery_date: Optional[date] = None
    category: Optional[Category] = None
    next_batch: Optional[str] = None
    is_delivered: bool = Field(default=False, alias="isDelivered")

    class Config:
        populate_by_name = True

    @field_validator("order_date", "expected_delivery_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _date_only(v)

    @field_validator("category", mode="before")
    @classmethod
    def blank_category(cls, v):
        return _to_category(v)

    @field_validator("is_delivered", mode="before")
    @classmethod
    def null_is_undelivered(cls, v):
        return False if v is None else v

    @property
    def medication_id(self) -> Optional[RecordId]:
        return self.id

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.COMPLETED and self.is_delivered


class RestockForm(BaseModel):
    """
    Restock form state. Owned by the form flow, handed over on submit.

    Raw text inputs are kept as typed so a failed submit can be retried
    with exactly the same values.
    """

    medication: Medication
    quantity: Union[str, int] = ""
    next_batch: str = ""
    expected_delivery_date: Optional[Union[date, str]] = None
    category: Optional[Category] = None


class DisplayItem(BaseModel):
    """One keyed row of a restocking display set."""

    key: str
    id: Optional[RecordId] = None
    name: Optional[str] = None
    category: Optional[Category] = None
    category_label: Optional[str] = None
    quantity: int
    status: str
    status_color: str
    reorder_point: Optional[int] = None
    batch: Optional[str] = None
    expected_delivery_date: Optional[date] = None
    overdue: bool = False


class ActionResult(BaseModel):
    """Two-outcome result handed verbatim to the message display."""

    success: bool
    message: Optional[str] = None
    error_kind: Optional[str] = None  # "validation" | "transport" | "remote"

    @classmethod
    def ok(cls, message: Optional[str] = None) -> "ActionResult":
        return cls(success=True, message=message)

    @classmethod
    def failure(cls, message: str, error_kind: str) -> "ActionResult":
        return cls(success=False, message=message, error_kind=error_kind)


class InventoryAlert(BaseModel):
    id: str
    type: str  # "lowStock" | "expiring"
    title: str
    message: str
    priority: str  # "high" | "medium"
    category: Optional[Category] = None
    medication_id: Optional[RecordId] = None
    clickable: bool = False


class InventorySummary(BaseModel):
    total_medications: int = 0
    low_stock: int = 0
    expiring_soon: int = 0
    total_inventory: int = 0
