import pytest
import requests

from services.store_notifier import StoreNotifier


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append({"url": url, "json": json})
        return FakeResponse()

    monkeypatch.setattr(requests, "post", fake_post)
    return calls


def _order(seed):
    store_a = seed.store("Meva <A>", telegram_chat_id="111")
    store_b = seed.store("Non", telegram_chat_id="222")
    store_c = seed.store("Chatsiz")
    order_id = seed.order(
        [
            (seed.product(store_a, "Olma", price=5000), 2, 5000),
            (seed.product(store_b, "Non", price=3000), 1, 3000),
            (seed.product(store_c, "Sut", price=9000), 1, 9000),
        ],
        phone="+998901234567",
        delivery_address="Chilonzor 5",
    )
    return order_id


def test_notifies_each_store_with_chat_id(seed, order_service, sent):
    order_id = _order(seed)
    notifier = StoreNotifier("TOKEN", order_service)
    assert notifier.notify_order(order_id) == 2
    assert {c["json"]["chat_id"] for c in sent} == {"111", "222"}
    assert all(c["url"] == "https://api.telegram.org/botTOKEN/sendMessage" for c in sent)

    text = next(c["json"]["text"] for c in sent if c["json"]["chat_id"] == "111")
    assert "Meva &lt;A&gt;" in text
    assert "Olma × 2 = 10 000 so'm" in text
    assert "Non" not in text
    assert "+998901234567" in text
    assert order_id[:8] in text


def test_missing_token_skips(seed, order_service, sent):
    assert StoreNotifier(None, order_service).notify_order(_order(seed)) == 0
    assert sent == []


def test_unknown_order(order_service, sent):
    with pytest.raises(ValueError):
        StoreNotifier("TOKEN", order_service).notify_order("missing")


def test_http_failure_is_logged_not_raised(seed, order_service, monkeypatch):
    def failing_post(url, json=None, timeout=None):
        raise requests.ConnectionError("network down")

    monkeypatch.setattr(requests, "post", failing_post)
    assert StoreNotifier("TOKEN", order_service).notify_order(_order(seed)) == 0
