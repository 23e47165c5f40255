from typing import Dict, List, Optional

from sqlalchemy import and_

from ..db.session import get_session
from ..models.cart_item import CartItem
from ..models.product import Product
from ..utils.dto import to_product_dto


class CartService:
    """Carts of signed-in users (``cart_items`` rows) and of guests.

    A guest cart is a plain list of ``{"product_id", "quantity"}`` dicts kept
    in the browser session; the methods taking ``raw`` work on that list and
    return the updated copy.
    """

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    @staticmethod
    def _active_product(session, product_id: str) -> Product:
        prod = (
            session.query(Product)
            .filter(Product.id == product_id, Product.is_active.is_(True))
            .first()
        )
        if not prod:
            raise ValueError("product not found or inactive")
        return prod

    @staticmethod
    def _check_quantity(prod: Product, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError("quantity must be > 0")
        if prod.stock is not None and quantity > int(prod.stock):
            raise ValueError("insufficient stock")

    def get_user_cart(self, user_id: str) -> List[Dict]:
        with self._session_factory() as session:
            items = session.query(CartItem).filter(CartItem.user_id == user_id).order_by(CartItem.created_at).all()
            return [
                {"id": it.id, "product": to_product_dto(it.product), "quantity": it.quantity}
                for it in items
                if it.product is not None
            ]

    def add_item(self, *, user_id: str, product_id: str, quantity: int = 1) -> Dict:
        if not product_id:
            raise ValueError("product_id required")
        qnty = int(quantity or 1)
        with self._session_factory() as session:
            prod = self._active_product(session, product_id)
            existing = (
                session.query(CartItem)
                .filter(and_(CartItem.product_id == product_id, CartItem.user_id == user_id))
                .first()
            )
            if existing:
                self._check_quantity(prod, existing.quantity + qnty)
                existing.quantity = existing.quantity + qnty
                item_id = existing.id
            else:
                self._check_quantity(prod, qnty)
                item = CartItem(user_id=user_id, product_id=product_id, quantity=qnty)
                session.add(item)
                session.flush()
                item_id = item.id
            return {"status": "added", "item_id": item_id}

    def update_item(self, *, user_id: str, item_id: str, quantity: int) -> Dict:
        with self._session_factory() as session:
            it = session.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == user_id).first()
            if not it:
                raise ValueError("item not found")
            qnty = int(quantity)
            if qnty < 0:
                raise ValueError("quantity must be >= 0")
            if qnty == 0:
                session.delete(it)
                return {"status": "removed", "item_id": item_id}
            self._check_quantity(it.product, qnty)
            it.quantity = qnty
            return {"status": "updated", "item_id": item_id}

    def remove_item(self, *, user_id: str, item_id: str) -> None:
        with self._session_factory() as session:
            it = session.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == user_id).first()
            if it:
                session.delete(it)
        return None

    def clear(self, user_id: str) -> None:
        with self._session_factory() as session:
            session.query(CartItem).filter(CartItem.user_id == user_id).delete()
        return None

    # guest carts

    def load_guest_cart(self, raw: Optional[List[Dict]]) -> List[Dict]:
        """Resolve a session cart into ``{"product", "quantity"}`` lines."""
        entries = raw or []
        ids = [e.get("product_id") for e in entries if e.get("product_id")]
        if not ids:
            return []
        with self._session_factory() as session:
            products = {p.id: to_product_dto(p) for p in session.query(Product).filter(Product.id.in_(ids)).all()}
        return [
            {"product": products[e["product_id"]], "quantity": int(e.get("quantity") or 1)}
            for e in entries
            if e.get("product_id") in products
        ]

    def add_to_guest_cart(self, raw: Optional[List[Dict]], *, product_id: str, quantity: int = 1) -> List[Dict]:
        if not product_id:
            raise ValueError("product_id required")
        cart = [dict(e) for e in (raw or [])]
        qnty = int(quantity or 1)
        existing = next((e for e in cart if e.get("product_id") == product_id), None)
        with self._session_factory() as session:
            prod = self._active_product(session, product_id)
            self._check_quantity(prod, qnty + (int(existing["quantity"]) if existing else 0))
        if existing:
            existing["quantity"] = int(existing["quantity"]) + qnty
        else:
            cart.append({"product_id": product_id, "quantity": qnty})
        return cart

    @staticmethod
    def remove_from_guest_cart(raw: Optional[List[Dict]], product_id: str) -> List[Dict]:
        return [dict(e) for e in (raw or []) if e.get("product_id") != product_id]
