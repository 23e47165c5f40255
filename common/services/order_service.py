from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import selectinload

from ..db.session import get_session
from ..models.order import Order
from ..models.order_item import OrderItem
from ..models.product import Product
from ..models.store import Store
from ..utils.dto import to_order_dto
from ..utils.validators import ORDER_STATUSES, ensure_choice
from .logging import log_event


def filter_orders(orders: Iterable[Dict], *, status: str = "all", search: str = "") -> List[Dict]:
    """Apply the panel's status select and free-text search to loaded orders.

    Search is a lowercase substring match on id, phone, delivery address and
    the guest name/email when present.
    """
    filtered = list(orders)
    if status and status != "all":
        filtered = [o for o in filtered if o["status"] == status]
    term = (search or "").lower()
    if term:
        def matches(o: Dict) -> bool:
            fields = [o["id"], o["phone"], o["delivery_address"], o.get("guest_name"), o.get("guest_email")]
            return any(f and term in f.lower() for f in fields)

        filtered = [o for o in filtered if matches(o)]
    return filtered


def store_items(order: Dict, store_id: str) -> List[Dict]:
    return [
        item for item in order["order_items"]
        if item["products"] and item["products"]["store_id"] == store_id
    ]


def items_total(items: Iterable[Dict]) -> float:
    return sum(item["price"] * item["quantity"] for item in items)


class OrderService:
    """Order listing and status updates for the admin and store panels."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def _load(self, session, *filters) -> List[Dict]:
        q = (
            session.query(Order)
            .options(selectinload(Order.items).joinedload(OrderItem.product).joinedload(Product.store))
            .filter(*filters)
            .order_by(Order.created_at.desc())
        )
        return [to_order_dto(o) for o in q.all()]

    def list_orders(self) -> List[Dict]:
        """All orders, newest first, with line items, products and store names."""
        with self._session_factory() as session:
            return self._load(session)

    def list_store_orders(self, store_id: Optional[str]) -> List[Dict]:
        """Orders containing at least one line item of the given store."""
        if not store_id:
            return []
        with self._session_factory() as session:
            has_store_item = Order.items.any(OrderItem.product.has(Product.store_id == store_id))
            orders = self._load(session, has_store_item)
        for order in orders:
            order["store_total"] = items_total(store_items(order, store_id))
        return orders

    def list_user_orders(self, user_id: str) -> List[Dict]:
        with self._session_factory() as session:
            return self._load(session, Order.user_id == user_id)

    def get_order(self, order_id: str) -> Dict:
        if not order_id:
            return {}
        with self._session_factory() as session:
            orders = self._load(session, Order.id == order_id)
            return orders[0] if orders else {}

    def order_has_store_items(self, order_id: str, store_id: str) -> bool:
        with self._session_factory() as session:
            return (
                session.query(OrderItem.id)
                .join(Product, Product.id == OrderItem.product_id)
                .filter(OrderItem.order_id == order_id, Product.store_id == store_id)
                .first()
                is not None
            )

    def update_status(self, order_id: str, new_status: str, *, store_id: Optional[str] = None) -> Dict:
        """Set an order's status; any status may follow any other.

        With ``store_id`` the order must contain that store's items.
        """
        ensure_choice(new_status, ORDER_STATUSES, "status")
        if store_id is not None and not self.order_has_store_items(order_id, store_id):
            raise ValueError("order does not belong to this store")
        with self._session_factory() as session:
            order = session.get(Order, order_id)
            if order is None:
                raise ValueError("order not found")
            previous = order.status
            order.status = new_status
            session.flush()
            log_event("info", "order.status_updated", order_id=order_id, previous=previous, status=new_status, store_id=store_id)
            return {"order_id": order_id, "status": new_status}

    def stores_for_order(self, order_id: str) -> List[Dict]:
        """Distinct stores whose products appear in the order."""
        with self._session_factory() as session:
            rows = (
                session.query(Store)
                .join(Product, Product.store_id == Store.id)
                .join(OrderItem, OrderItem.product_id == Product.id)
                .filter(OrderItem.order_id == order_id)
                .all()
            )
            unique = {s.id: s for s in rows}
            return [{"id": s.id, "name": s.name, "telegram_chat_id": s.telegram_chat_id} for s in unique.values()]
