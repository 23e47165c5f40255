from common.models.product import Product


def test_root_redirects_to_catalog(client):
    response = client.get("/")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/client/")


def test_catalog_lists_active_products(client, seed):
    store_id = seed.store("Meva")
    seed.product(store_id, "Olma")
    seed.product(store_id, "Yashirin", is_active=False)
    html = client.get("/client/").get_data(as_text=True)
    assert "Olma" in html
    assert "Yashirin" not in html


def test_guest_checkout_without_cart_redirects(client):
    response = client.get("/client/checkout")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/client/")


def test_guest_checkout_flow(client, seed, session_factory, order_service):
    product_id = seed.product(seed.store("Meva"), "Olma", price=4000, stock=5)
    assert client.post("/client/cart", json={"product_id": product_id, "quantity": 2}).get_json()["status"] == "ok"
    assert client.get("/client/checkout").status_code == 200

    body = client.post("/client/checkout", json={"phone": "+998", "delivery_address": "Chilonzor"}).get_json()
    assert body == {"status": "error", "message": "Iltimos, barcha maydonlarni to'ldiring"}

    body = client.post(
        "/client/checkout",
        json={"phone": "+998", "delivery_address": "Chilonzor", "guest_name": "Madina", "guest_email": "m@mail.uz"},
    ).get_json()
    assert body["status"] == "ok"
    assert body["redirect"].startswith("/client/order-success")

    order = order_service.get_order(body["order_id"])
    assert order["total_amount"] == 8000
    with session_factory() as session:
        assert session.get(Product, product_id).stock == 3
    assert client.get("/client/cart").get_json()["items"] == []
    assert client.get(body["redirect"]).status_code == 200


def test_user_checkout_clears_cart_and_lists_orders(client, seed, login):
    seed.user("buyer@market.uz")
    login("buyer@market.uz")
    product_id = seed.product(seed.store("Meva"), "Olma", price=1000)
    client.post("/client/cart", json={"product_id": product_id})

    body = client.post("/client/checkout", json={"phone": "+998", "delivery_address": "Yunusobod"}).get_json()
    assert body["redirect"] == "/client/orders"
    assert client.get("/client/cart").get_json()["items"] == []
    html = client.get("/client/orders").get_data(as_text=True)
    assert "Yangi" in html


def test_checkout_with_empty_cart(client, seed, login):
    seed.user("buyer@market.uz")
    login("buyer@market.uz")
    body = client.post("/client/checkout", json={"phone": "+998", "delivery_address": "x"}).get_json()
    assert body["status"] == "error"


def test_checkout_survives_notification_errors(client, seed, app, monkeypatch):
    def broken(order_id):
        raise ValueError("order not found")

    monkeypatch.setattr(app.extensions["market_components"]["notifier"], "notify_order", broken)
    product_id = seed.product(seed.store("Meva"), "Olma")
    client.post("/client/cart", json={"product_id": product_id})
    body = client.post(
        "/client/checkout",
        json={"phone": "+998", "delivery_address": "x", "guest_name": "G", "guest_email": "g@mail.uz"},
    ).get_json()
    assert body["status"] == "ok"


def test_cart_rejects_unknown_product(client):
    response = client.post("/client/cart", json={"product_id": "missing"})
    assert response.status_code == 400


def test_orders_page_requires_login(client):
    assert "/auth/login" in client.get("/client/orders").headers["Location"]
