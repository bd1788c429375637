import pytest

from medrestock.schemas.inventory import ReorderLevel, StockStatus
from medrestock.services.stock_status import (
    classify_reorder_level,
    classify_stock_status,
    get_status_info,
)


@pytest.mark.parametrize(
    "quantity, reorder_point, expected",
    [
        (0, 10, StockStatus.NEAR_RESTOCK),
        (5, 10, StockStatus.LOW_STOCK),
        (10, 10, StockStatus.LOW_STOCK),
        (15, 10, StockStatus.IN_STOCK),
        (1, 0, StockStatus.IN_STOCK),
    ],
)
def test_classify_stock_status_scenarios(quantity, reorder_point, expected):
    assert classify_stock_status(quantity, reorder_point) == expected


def test_zero_quantity_is_near_restock_for_any_reorder_point():
    for reorder_point in (0, 1, 10, 1000):
        assert classify_stock_status(0, reorder_point) == StockStatus.NEAR_RESTOCK


def test_classifier_is_total_over_small_grid():
    for quantity in range(0, 25):
        for reorder_point in range(0, 25):
            status = classify_stock_status(quantity, reorder_point)
            assert status in set(StockStatus)
            if quantity > reorder_point:
                assert status == StockStatus.IN_STOCK


@pytest.mark.parametrize(
    "current, reorder, expected",
    [
        ("5", "10", ReorderLevel.REORDER_REQUIRED),
        ("10", "10", ReorderLevel.REORDER_REQUIRED),
        ("15", "10", ReorderLevel.LOW_STOCK),
        ("20", "10", ReorderLevel.LOW_STOCK),
        ("21", "10", ReorderLevel.SUFFICIENT_STOCK),
        (0, 0, ReorderLevel.REORDER_REQUIRED),
    ],
)
def test_classify_reorder_level(current, reorder, expected):
    assert classify_reorder_level(current, reorder, margin=10) == expected


def test_policies_disagree_near_the_reorder_point():
    # Same numbers, different call sites, different answers
    assert classify_stock_status(15, 10) == StockStatus.IN_STOCK
    assert classify_reorder_level(15, 10, margin=10) == ReorderLevel.LOW_STOCK


def test_reorder_level_rejects_non_numeric_input():
    with pytest.raises(ValueError):
        classify_reorder_level("abc", "10")


def test_status_info():
    assert get_status_info(StockStatus.LOW_STOCK) == {"color": "#FFB946", "text": "Low Stock"}
    assert get_status_info("Processing")["color"] == "#4A90E2"
    assert get_status_info("Cancelled") == {"color": "#4A90E2", "text": "Unknown"}
