"""Telegram notifications to stores about new orders."""

from __future__ import annotations

import logging
from html import escape
from typing import Dict, Optional

import requests

from common.services.order_service import OrderService, items_total, store_items
from common.utils.labels import format_sum


class StoreNotifier:
    """Sends each store a Bot API message listing its part of a new order."""

    API_BASE_URL = "https://api.telegram.org"

    def __init__(self, bot_token: Optional[str], order_service: OrderService, timeout: float = 10.0) -> None:
        self._bot_token = bot_token
        self._orders = order_service
        self._timeout = timeout
        self.logger = logging.getLogger(__name__)

    def notify_order(self, order_id: str) -> int:
        """Message every store with items in the order; returns how many were sent."""
        if not self._bot_token:
            self.logger.info("TELEGRAM_BOT_TOKEN not set, skipping notification for order %s", order_id)
            return 0
        order = self._orders.get_order(order_id)
        if not order:
            raise ValueError("order not found")

        sent = 0
        for store in self._orders.stores_for_order(order_id):
            chat_id = store.get("telegram_chat_id")
            if not chat_id:
                continue
            if self.send_message(chat_id, self.build_message(order, store)):
                sent += 1
        return sent

    def build_message(self, order: Dict, store: Dict) -> str:
        items = store_items(order, store["id"])
        lines = [
            f"🛒 <b>Yangi buyurtma</b> #{escape(order['id'][:8])}",
            f"🏪 {escape(store['name'])}",
            "",
        ]
        for item in items:
            lines.append(f"• {escape(item['products']['name'])} × {item['quantity']} = {format_sum(item['price'] * item['quantity'])}")
        lines += [
            "",
            f"💰 Jami: {format_sum(items_total(items))}",
            f"📞 Telefon: {escape(order['phone'])}",
            f"📍 Manzil: {escape(order['delivery_address'])}",
        ]
        return "\n".join(lines)

    def send_message(self, chat_id: str, text: str) -> bool:
        url = f"{self.API_BASE_URL}/bot{self._bot_token}/sendMessage"
        try:
            response = requests.post(
                url,
                json={"chat_id": chat_id, "text": text, "parse_mode": "HTML"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            self.logger.warning("Telegram sendMessage to %s failed: %s", chat_id, exc)
            return False
        return True
