import pytest


@pytest.fixture
def owner(seed):
    profile = seed.user("owner@market.uz", role="store", name="Owner")
    store_id = seed.store("Meva", owner_id=profile["id"])
    return {"profile": profile, "store_id": store_id}


@pytest.fixture
def store_client(client, owner, login):
    login("owner@market.uz")
    return client


def test_guard(client, seed, login):
    assert "/auth/login" in client.get("/store/").headers["Location"]
    seed.user("c@market.uz")
    login("c@market.uz")
    assert client.get("/store/").headers["Location"].endswith("/client/")


def test_client_owning_a_store_is_let_in(client, seed, login):
    profile = seed.user("c@market.uz")
    seed.store("Non", owner_id=profile["id"])
    login("c@market.uz")
    assert client.get("/store/").status_code == 200


@pytest.mark.parametrize("tab", ["statistics", "orders", "bot"])
def test_dashboard_tabs(store_client, seed, owner, tab):
    product_id = seed.product(owner["store_id"], "Olma", price=5000)
    seed.order([(product_id, 2, 5000)])
    assert store_client.get(f"/store/?tab={tab}").status_code == 200


def test_store_without_shop_sees_empty_data(client, seed, login):
    seed.user("lonely@market.uz", role="store")
    login("lonely@market.uz")
    assert client.get("/store/orders/data").get_json()["orders"] == []
    assert client.get("/store/statistics/data").get_json()["statistics"]["totalOrders"] == 0
    assert client.get("/store/?tab=orders").status_code == 200


def test_orders_scoped_to_store(store_client, seed, owner):
    mine = seed.product(owner["store_id"], "Olma", price=5000)
    other = seed.product(seed.store("Boshqa"), "Non", price=3000)
    order_id = seed.order([(mine, 2, 5000), (other, 1, 3000)])
    seed.order([(other, 1, 3000)])

    body = store_client.get("/store/orders/data").get_json()
    assert [o["id"] for o in body["orders"]] == [order_id]
    assert body["orders"][0]["store_total"] == 10000


def test_status_update_only_for_own_orders(store_client, seed, owner, order_service):
    mine = seed.order([(seed.product(owner["store_id"], "Olma"), 1, 1000)])
    foreign = seed.order([(seed.product(seed.store("Boshqa"), "Non"), 1, 1000)])

    assert store_client.post(f"/store/orders/{mine}/status", json={"status": "delivering"}).get_json()["status"] == "ok"
    assert order_service.get_order(mine)["status"] == "delivering"

    response = store_client.post(f"/store/orders/{foreign}/status", json={"status": "cancelled"})
    assert response.get_json() == {"status": "error", "message": "Buyurtma holatini yangilashda xatolik"}
    assert order_service.get_order(foreign)["status"] == "pending"


def test_statistics_data(store_client, seed, owner):
    product_id = seed.product(owner["store_id"], "Olma", price=5000)
    seed.order([(product_id, 3, 5000)], status="completed")
    stats = store_client.get("/store/statistics/data").get_json()["statistics"]
    assert stats["totalRevenue"] == 15000
    assert stats["completedOrders"] == 1


def test_bot_buttons(store_client, seed, owner):
    other_button = seed.button("Boshqa", store_id=seed.store("Boshqa"))

    body = store_client.post("/store/bot/buttons", json={"text": "Menyu", "order_index": 1}).get_json()
    button_id = body["button"]["id"]
    assert body["button"]["store_id"] == owner["store_id"]

    body = store_client.post(f"/store/bot/buttons/{button_id}", json={"text": "Menyu 2"}).get_json()
    assert body["button"]["text"] == "Menyu 2"
    assert [b["text"] for b in store_client.get("/store/bot/buttons").get_json()["buttons"]] == ["Menyu 2"]

    assert store_client.delete(f"/store/bot/buttons/{other_button}").status_code == 400
    assert store_client.delete(f"/store/bot/buttons/{button_id}").get_json()["status"] == "ok"
    assert store_client.get("/store/bot/buttons").get_json()["buttons"] == []
