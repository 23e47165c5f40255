from datetime import datetime, timezone
from typing import Dict, Optional

from ..db.session import get_session
from ..models.product import Product
from ..utils.validators import OPEN_ORDER_STATUSES
from .order_service import OrderService, items_total, store_items


TOP_PRODUCTS_LIMIT = 5


def empty_statistics() -> Dict:
    return {
        "totalRevenue": 0,
        "totalOrders": 0,
        "totalProducts": 0,
        "activeProducts": 0,
        "pendingOrders": 0,
        "completedOrders": 0,
        "todayRevenue": 0,
        "todayOrders": 0,
        "topProducts": [],
    }


def _start_of_today_utc(now: datetime) -> datetime:
    """Local midnight of ``now`` as naive UTC, comparable with stored timestamps."""
    if now.tzinfo is None:
        now = now.astimezone()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc).replace(tzinfo=None)


class StatisticsService:
    """Sales figures of a single store, computed from its orders' line items."""

    def __init__(self, order_service: OrderService, session_factory=get_session):
        self._session_factory = session_factory
        self._orders = order_service

    def store_statistics(self, store_id: Optional[str], *, now: Optional[datetime] = None) -> Dict:
        stats = empty_statistics()
        if not store_id:
            return stats

        with self._session_factory() as session:
            flags = [row[0] for row in session.query(Product.is_active).filter(Product.store_id == store_id).all()]
        stats["totalProducts"] = len(flags)
        stats["activeProducts"] = sum(1 for active in flags if active)

        today = _start_of_today_utc(now or datetime.now().astimezone())
        product_stats: Dict[str, Dict] = {}
        orders = self._orders.list_store_orders(store_id)
        for order in orders:
            items = store_items(order, store_id)
            order_total = items_total(items)
            stats["totalRevenue"] += order_total
            created = datetime.fromisoformat(order["created_at"])
            if created >= today:
                stats["todayRevenue"] += order_total
                stats["todayOrders"] += 1
            if order["status"] in OPEN_ORDER_STATUSES:
                stats["pendingOrders"] += 1
            elif order["status"] == "completed":
                stats["completedOrders"] += 1
            for item in items:
                product = item["products"]
                entry = product_stats.setdefault(product["id"], {"name": product["name"] or "Noma'lum", "quantity": 0, "revenue": 0})
                entry["quantity"] += item["quantity"]
                entry["revenue"] += item["price"] * item["quantity"]

        stats["totalOrders"] = len(orders)
        stats["topProducts"] = sorted(product_stats.values(), key=lambda p: p["revenue"], reverse=True)[:TOP_PRODUCTS_LIMIT]
        return stats
