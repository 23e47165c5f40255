from datetime import datetime, timedelta

import pytest

from common.services.order_service import filter_orders, items_total, store_items


def _orders():
    return [
        {"id": "abc123", "status": "pending", "phone": "+998901112233", "delivery_address": "Chilonzor", "guest_name": None, "guest_email": None},
        {"id": "def456", "status": "completed", "phone": "+998907778899", "delivery_address": "Yunusobod", "guest_name": "Madina", "guest_email": "madina@mail.uz"},
    ]


def test_filter_by_status():
    assert [o["id"] for o in filter_orders(_orders(), status="completed")] == ["def456"]
    assert len(filter_orders(_orders(), status="all")) == 2


@pytest.mark.parametrize("term,expected", [("ABC", ["abc123"]), ("yunus", ["def456"]), ("madina@", ["def456"]), ("7778", ["def456"]), ("zzz", [])])
def test_search_is_case_insensitive_substring(term, expected):
    assert [o["id"] for o in filter_orders(_orders(), search=term)] == expected


def test_list_orders_newest_first_with_nested_items(seed, order_service):
    store_id = seed.store("Meva")
    product_id = seed.product(store_id, "Olma", price=5000)
    older = seed.order([(product_id, 1, 5000)], created_at=datetime.utcnow() - timedelta(days=2))
    newer = seed.order([(product_id, 2, 5000)])

    orders = order_service.list_orders()
    assert [o["id"] for o in orders] == [newer, older]
    item = orders[0]["order_items"][0]
    assert item["quantity"] == 2
    assert item["products"]["name"] == "Olma"
    assert item["products"]["stores"]["name"] == "Meva"


def test_store_orders_only_include_orders_with_store_items(seed, order_service):
    store_a = seed.store("A")
    store_b = seed.store("B")
    apple = seed.product(store_a, "Olma", price=5000)
    bread = seed.product(store_b, "Non", price=3000)
    mixed = seed.order([(apple, 2, 5000), (bread, 1, 3000)])
    seed.order([(bread, 4, 3000)])

    orders = order_service.list_store_orders(store_a)
    assert [o["id"] for o in orders] == [mixed]
    assert orders[0]["store_total"] == 10000
    assert order_service.list_store_orders(None) == []


def test_store_helpers():
    order = {
        "order_items": [
            {"quantity": 2, "price": 100.0, "products": {"store_id": "s1"}},
            {"quantity": 1, "price": 50.0, "products": {"store_id": "s2"}},
            {"quantity": 1, "price": 70.0, "products": None},
        ]
    }
    items = store_items(order, "s1")
    assert len(items) == 1
    assert items_total(items) == 200.0


def test_update_status_any_direction(seed, order_service):
    store_id = seed.store("A")
    product_id = seed.product(store_id, "Olma")
    order_id = seed.order([(product_id, 1, 1000)], status="completed")

    order_service.update_status(order_id, "pending")
    assert order_service.get_order(order_id)["status"] == "pending"


def test_update_status_rejects_unknown_value(seed, order_service):
    store_id = seed.store("A")
    order_id = seed.order([(seed.product(store_id, "Olma"), 1, 1000)])
    with pytest.raises(ValueError):
        order_service.update_status(order_id, "shipped")
    assert order_service.get_order(order_id)["status"] == "pending"


def test_store_cannot_update_foreign_order(seed, order_service):
    store_a = seed.store("A")
    store_b = seed.store("B")
    order_id = seed.order([(seed.product(store_b, "Non"), 1, 1000)])
    with pytest.raises(ValueError):
        order_service.update_status(order_id, "processing", store_id=store_a)
    order_service.update_status(order_id, "processing", store_id=store_b)
    assert order_service.get_order(order_id)["status"] == "processing"


def test_stores_for_order_are_distinct(seed, order_service):
    store_a = seed.store("A", telegram_chat_id="111")
    store_b = seed.store("B")
    order_id = seed.order([
        (seed.product(store_a, "Olma"), 1, 1000),
        (seed.product(store_a, "Nok"), 1, 1000),
        (seed.product(store_b, "Non"), 1, 1000),
    ])
    stores = {s["id"]: s for s in order_service.stores_for_order(order_id)}
    assert set(stores) == {store_a, store_b}
    assert stores[store_a]["telegram_chat_id"] == "111"


def test_user_orders(seed, order_service):
    user = seed.user("buyer@market.uz")
    store_id = seed.store("A")
    mine = seed.order([(seed.product(store_id, "Olma"), 1, 1000)], user_id=user["id"])
    seed.order([(seed.product(store_id, "Nok"), 1, 1000)], guest_name="G", guest_email="g@mail.uz")
    assert [o["id"] for o in order_service.list_user_orders(user["id"])] == [mine]
