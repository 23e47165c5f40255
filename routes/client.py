"""Storefront: catalog, cart, checkout and the buyer's orders."""

from __future__ import annotations

import logging
from typing import Dict, List

from flask import (
    Blueprint,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from sqlalchemy.exc import SQLAlchemyError

from common.services.checkout_service import cart_total

from .auth import current_user


client_bp = Blueprint("client", __name__, url_prefix="/client")
logger = logging.getLogger(__name__)

GUEST_CART_KEY = "guest_cart"


def _components() -> dict:
    return current_app.extensions["market_components"]


def _ok(message: str = "", **data):
    return jsonify({"status": "ok", "message": message, **data})


def _error(message: str, status: int = 400):
    return jsonify({"status": "error", "message": message}), status


def _cart_lines(user: Dict) -> List[Dict]:
    cart = _components()["cart"]
    if user:
        return cart.get_user_cart(user["id"])
    return cart.load_guest_cart(session.get(GUEST_CART_KEY))


@client_bp.get("/")
def catalog():
    query = request.args.get("q", "").strip()
    listing = _components()["catalog"].list_products(
        query=query or None,
        category=request.args.get("category") or None,
        page=request.args.get("page", 1),
    )
    user = current_user()
    return render_template("client/catalog.html", listing=listing, query=query, user=user, cart=_cart_lines(user))


@client_bp.get("/products/<product_id>")
def product_detail(product_id: str):
    product = _components()["catalog"].get_product(product_id)
    if not product:
        return _error("product not found", 404)
    return _ok(product=product)


# cart


@client_bp.get("/cart")
def view_cart():
    lines = _cart_lines(current_user())
    return _ok(items=lines, total=cart_total(lines))


@client_bp.post("/cart")
def add_to_cart():
    payload = request.get_json(silent=True) or {}
    user = current_user()
    cart = _components()["cart"]
    try:
        quantity = int(payload.get("quantity") or 1)
        if user:
            cart.add_item(user_id=user["id"], product_id=payload.get("product_id"), quantity=quantity)
        else:
            session[GUEST_CART_KEY] = cart.add_to_guest_cart(
                session.get(GUEST_CART_KEY), product_id=payload.get("product_id"), quantity=quantity
            )
    except ValueError as exc:
        return _error(str(exc))
    return _ok("Savatga qo'shildi")


@client_bp.post("/cart/<item_id>")
def update_cart_item(item_id: str):
    user = current_user()
    if not user:
        return _error("login required", 401)
    payload = request.get_json(silent=True) or {}
    try:
        result = _components()["cart"].update_item(user_id=user["id"], item_id=item_id, quantity=int(payload.get("quantity", 0)))
    except ValueError as exc:
        return _error(str(exc))
    return _ok(**result)


@client_bp.delete("/cart/<item_id>")
def remove_cart_item(item_id: str):
    """Remove a cart row; for guests ``item_id`` is the product id."""
    user = current_user()
    cart = _components()["cart"]
    if user:
        cart.remove_item(user_id=user["id"], item_id=item_id)
    else:
        session[GUEST_CART_KEY] = cart.remove_from_guest_cart(session.get(GUEST_CART_KEY), item_id)
    return _ok()


# checkout


@client_bp.get("/checkout")
def checkout_form():
    user = current_user()
    if not user and not session.get(GUEST_CART_KEY):
        return redirect(url_for("client.catalog"))
    lines = _cart_lines(user)
    return render_template("client/checkout.html", user=user, cart=lines, total=cart_total(lines))


@client_bp.post("/checkout")
def checkout_submit():
    payload = request.get_json(silent=True) or {}
    user = current_user()
    c = _components()
    lines = _cart_lines(user)
    if not lines:
        return _error("Savat bo'sh")

    try:
        result = c["checkout"].place_order(
            lines,
            delivery_address=payload.get("delivery_address", ""),
            phone=payload.get("phone", ""),
            user_id=user["id"] if user else None,
            guest_name=(payload.get("guest_name") or "").strip() or None,
            guest_email=(payload.get("guest_email") or "").strip() or None,
        )
    except ValueError as exc:
        return _error(str(exc))
    except SQLAlchemyError as exc:
        logger.error("Error creating order: %s", exc)
        return _error(f"Buyurtma yaratishda xatolik: {exc}", 500)

    try:
        c["notifier"].notify_order(result["order_id"])
    except (ValueError, SQLAlchemyError) as exc:
        logger.error("Error notifying stores about order %s: %s", result["order_id"], exc)

    if user:
        c["cart"].clear(user["id"])
        redirect_to = url_for("client.my_orders")
    else:
        session.pop(GUEST_CART_KEY, None)
        redirect_to = url_for("client.order_success", order_id=result["order_id"])
    return _ok("Buyurtma qabul qilindi!", order_id=result["order_id"], redirect=redirect_to)


@client_bp.get("/orders")
def my_orders():
    user = current_user()
    if not user:
        return redirect(url_for("auth.login_form"))
    orders = _components()["orders"].list_user_orders(user["id"])
    return render_template("client/orders.html", orders=orders, user=user)


@client_bp.get("/order-success")
def order_success():
    return render_template("client/order_success.html", order_id=request.args.get("order_id", ""))
