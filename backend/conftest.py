from datetime import date

import pytest

from medrestock.core.exceptions import NotFoundError
from medrestock.schemas.inventory import Medication, RestockOrder

TODAY = date(2026, 10, 19)


class FakeInventoryClient:
    """In-memory stand-in for the inventory service. Records every call."""

    def __init__(self, low_stock=None, orders=None, expiring=None):
        self.low_stock = list(low_stock or [])
        self.orders = list(orders or [])
        self.expiring = list(expiring or [])
        self.calls = []
        self.read_error = None
        self.create_error = None
        self.patch_error = None
        self.patch_applies_before_error = False
        self._next_restock_id = 100

    # reads
    def list_low_stock(self):
        self.calls.append(("GET", "/api/low-stock"))
        if self.read_error:
            raise self.read_error
        return [Medication.model_validate(m) for m in self.low_stock]

    def list_restock_orders(self):
        self.calls.append(("GET", "/api/restocks"))
        if self.read_error:
            raise self.read_error
        return [RestockOrder.model_validate(o) for o in self.orders]

    def list_expiring(self):
        self.calls.append(("GET", "/api/expiring"))
        if self.read_error:
            raise self.read_error
        return [Medication.model_validate(m) for m in self.expiring]

    # writes
    def create_restock_order(self, payload):
        self.calls.append(("POST", "/api/restocks", payload))
        if self.create_error:
            raise self.create_error
        self.orders.append(dict(payload))
        self._next_restock_id += 1
        return {"success": True, "message": "Restocking request created successfully", "restock_id": self._next_restock_id}

    def update_restock_order(self, order_id, payload):
        self.calls.append(("PATCH", f"/api/restocks/{order_id}", payload))
        if self.patch_error and not self.patch_applies_before_error:
            raise self.patch_error
        # The service updates every row that shares the id
        for order in self._rows(order_id):
            order.update(payload)
        if self.patch_error:
            raise self.patch_error
        return {"success": True, "message": "Restock order updated successfully"}

    def _rows(self, order_id):
        rows = [o for o in self.orders if str(o.get("id")) == str(order_id)]
        if not rows:
            raise NotFoundError("Restock order not found", status_code=404)
        return rows

    def writes(self):
        return [c for c in self.calls if c[0] in ("POST", "PATCH")]


def make_med(id, name, quantity, reorder_point=10, category="diabetes", batch="B-001", **extra):
    med = {
        "id": id,
        "name": name,
        "quantity": quantity,
        "reorderPoint": reorder_point,
        "category": category,
        "batch": batch,
    }
    med.update(extra)
    return med


def make_order(id, name, status="Pending", quantity=50, category="diabetes",
               order_date="2026-10-10", expected="2026-10-24", next_batch="NB-1", delivered=None):
    return {
        "id": id,
        "name": name,
        "quantity": quantity,
        "status": status,
        "order_date": order_date,
        "expected_delivery_date": expected,
        "category": category,
        "next_batch": next_batch,
        "isDelivered": (status == "Completed") if delivered is None else delivered,
    }


@pytest.fixture
def low_stock_meds():
    return [
        make_med(1, "Metformin", 0, category="diabetes"),
        make_med(2, "Atorvastatin", 5, category="cardiovascular"),
        make_med(3, "Insulin Glargine", 8, category="diabetes"),
        make_med(4, "Methotrexate", 2, category="arthritis"),
        make_med(5, "Tamoxifen", 10, category="cancer"),
    ]


@pytest.fixture
def fake_client(low_stock_meds):
    return FakeInventoryClient(low_stock=low_stock_meds)
