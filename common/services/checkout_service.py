from decimal import Decimal
from typing import Dict, List, Optional

from ..db.session import get_session
from ..models.order import Order
from ..models.order_item import OrderItem
from ..models.product import Product
from .logging import log_event


GUEST_FIELDS_REQUIRED = "Iltimos, barcha maydonlarni to'ldiring"


def cart_total(lines: List[Dict]) -> float:
    return float(sum(Decimal(str(line["product"]["price"])) * line["quantity"] for line in lines))


class CheckoutService:
    """Turns a cart into an order.

    The order row, each line item and each stock decrement are written one
    after another as independent calls. A failure part-way leaves the
    earlier writes in place.
    """

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def place_order(
        self,
        lines: List[Dict],
        *,
        delivery_address: str,
        phone: str,
        user_id: Optional[str] = None,
        guest_name: Optional[str] = None,
        guest_email: Optional[str] = None,
    ) -> Dict:
        if not lines:
            raise ValueError("cart is empty")
        if not user_id and (not guest_name or not guest_email):
            raise ValueError(GUEST_FIELDS_REQUIRED)

        total = cart_total(lines)
        with self._session_factory() as session:
            order = Order(
                total_amount=total,
                status="pending",
                delivery_address=delivery_address or "",
                phone=phone or "",
            )
            if user_id:
                order.user_id = user_id
            else:
                order.guest_name = guest_name
                order.guest_email = guest_email
            session.add(order)
            session.flush()
            order_id = order.id
        log_event("info", "order.created", order_id=order_id, items=len(lines), total=total, guest=not user_id)

        for line in lines:
            product = line["product"]
            with self._session_factory() as session:
                session.add(
                    OrderItem(
                        order_id=order_id,
                        product_id=product["id"],
                        quantity=line["quantity"],
                        price=product["price"],
                    )
                )
            with self._session_factory() as session:
                session.query(Product).filter(Product.id == product["id"]).update(
                    {"stock": (product.get("stock") or 0) - line["quantity"]},
                    synchronize_session=False,
                )
        return {"order_id": order_id, "total_amount": total}
