import pytest
from conftest import FakeInventoryClient, make_order
from fastapi.testclient import TestClient

from medrestock.core.exceptions import RemoteRejection, TransportError
from medrestock.main import create_app


@pytest.fixture
def api(fake_client):
    with TestClient(create_app(client=fake_client, interval_seconds=3600)) as client:
        assert client.post("/restocks/refresh").status_code == 200
        yield client


def _items(api, view):
    response = api.get(f"/restocks/views/{view}")
    assert response.status_code == 200
    return response.json()["items"]


def test_health_reports_polling(api):
    assert api.get("/health").json() == {"status": "ok", "polling": True}


def test_main_view_lists_low_stock_rows(api):
    items = _items(api, "main")

    assert [i["key"] for i in items] == ["1", "2", "3", "4", "5"]
    assert items[0]["status"] == "Near Restock"
    assert items[0]["status_color"] == "#FFD700"
    assert items[1]["category_label"] == "Cardiovascular"


def test_unknown_view_is_rejected(api):
    assert api.get("/restocks/views/archive").status_code == 422


def test_categories_include_all(api):
    options = api.get("/restocks/categories").json()
    assert options[0] == {"value": "all", "label": "All Categories"}
    assert {"value": "kidney", "label": "Kidney Disease"} in options


def test_filter_and_view_selection(api):
    assert api.put("/restocks/filter", json={"category": "diabetes"}).status_code == 200
    assert [i["name"] for i in _items(api, "main")] == ["Metformin", "Insulin Glargine"]

    response = api.put("/restocks/filter", json={"category": "dermatology"})
    assert response.status_code == 400
    assert response.json()["success"] is False

    assert api.put("/restocks/view", json={"view": "completed"}).status_code == 200
    state = api.get("/restocks/state").json()
    assert state["active_view"] == "completed"
    assert state["category_filter"] == "diabetes"
    assert state["counts"] == {"needs_restock": 5, "processing": 0, "completed": 0}


def test_open_form_prefills(api):
    form = api.post("/restocks/forms/4").json()

    assert form["medication"]["name"] == "Methotrexate"
    assert form["expected_delivery_date"] is not None
    assert form["category"] == "arthritis"
    assert api.post("/restocks/forms/999").status_code == 404


def test_submit_restock_moves_row_to_processing(api, fake_client):
    response = api.post(
        "/restocks",
        json={"medication_key": "2", "quantity": "60", "next_batch": "ATV-11", "expected_delivery_date": "2026-11-01"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Restock order submitted successfully!", "error_kind": None}
    assert "2" not in [i["key"] for i in _items(api, "main")]
    processing = _items(api, "processing")
    assert [(i["key"], i["expected_delivery_date"]) for i in processing] == [("2", "2026-11-01")]
    assert fake_client.writes()[0][2]["next_batch"] == "ATV-11"


def test_submit_validation_error_is_400_and_sends_nothing(api, fake_client):
    response = api.post("/restocks", json={"medication_key": "2", "quantity": "-3", "next_batch": "X"})

    assert response.status_code == 400
    assert response.json()["message"] == "Please enter a valid positive quantity."
    assert fake_client.writes() == []
    assert api.get("/restocks/state").json()["form_open"] is True


def test_submit_without_form_is_400(api):
    assert api.post("/restocks", json={"quantity": "5", "next_batch": "X"}).status_code == 400


def test_submit_remote_rejection_is_502(api, fake_client):
    fake_client.create_error = RemoteRejection("Invalid category", status_code=400)

    response = api.post("/restocks", json={"medication_key": "1", "quantity": "5", "next_batch": "X"})

    assert response.status_code == 502
    assert response.json()["message"] == "Invalid category"


def test_deliver_moves_order_to_completed(api, fake_client):
    fake_client.orders.append(make_order(4, "Methotrexate", category="arthritis"))
    api.post("/restocks/refresh")

    response = api.post("/restocks/4/deliver")

    assert response.status_code == 200
    assert response.json()["message"] == "Order marked as delivered successfully!"
    assert _items(api, "processing") == []
    assert [i["key"] for i in _items(api, "completed")] == ["4"]


def test_deliver_transport_failure_is_503(api, fake_client):
    fake_client.orders.append(make_order(4, "Methotrexate", category="arthritis"))
    fake_client.patch_error = TransportError("timeout")

    response = api.post("/restocks/4/deliver")

    assert response.status_code == 503
    assert response.json()["message"] == "Failed to mark order as delivered. Please try again."


def test_refresh_failure_is_503_and_keeps_rows(api, fake_client):
    fake_client.read_error = TransportError("offline")

    response = api.post("/restocks/refresh")

    assert response.status_code == 503
    assert response.json()["message"] == "Failed to fetch data. Please try again later."
    assert len(_items(api, "main")) == 5
    assert api.get("/restocks/state").json()["last_error"] == "offline"


def test_alerts(api, fake_client):
    fake_client.expiring = [
        {"id": 20, "name": "Heparin", "quantity": 50, "reorderPoint": 10,
         "category": "stroke", "expirationDate": "2099-01-01"},
    ]

    body = api.get("/alerts").json()

    assert body["summary"]["total_medications"] == 6
    assert body["summary"]["low_stock"] == 5
    assert body["summary"]["expiring_soon"] == 0
    assert body["alerts"][0]["id"] == "lowstock-diabetes-1"
    assert body["alerts"][0]["priority"] == "high"


def test_routes_unavailable_outside_lifespan():
    client = TestClient(create_app(client=FakeInventoryClient(), interval_seconds=3600))
    assert client.get("/restocks/state").status_code == 503
