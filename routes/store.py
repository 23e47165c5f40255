"""Store owner panel: statistics, orders and the store's own bot buttons."""

from __future__ import annotations

import logging

from flask import (
    Blueprint,
    current_app,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from sqlalchemy.exc import SQLAlchemyError

from common.services.order_service import filter_orders

from .auth import current_user


store_bp = Blueprint("store", __name__, url_prefix="/store")
logger = logging.getLogger(__name__)

TABS = ("statistics", "orders", "bot")


def _components() -> dict:
    return current_app.extensions["market_components"]


def _ok(message: str = "", **data):
    return jsonify({"status": "ok", "message": message, **data})


def _error(message: str, status: int = 400):
    return jsonify({"status": "error", "message": message}), status


def _store_id():
    return g.store["id"] if g.store else None


@store_bp.before_request
def guard_store_owner():
    user = current_user()
    if not user:
        return redirect(url_for("auth.login_form"))
    c = _components()
    g.store = c["stores"].get_store_for_owner(user["id"])
    role = c["auth"].get_role(user["id"])
    if g.store is None and role not in ("store", "admin"):
        return redirect(url_for("client.catalog"))
    return None


@store_bp.get("/")
def dashboard():
    tab = request.args.get("tab", "statistics")
    if tab not in TABS:
        tab = "statistics"
    c = _components()
    context = {"tab": tab, "store": g.store}
    if tab == "statistics":
        context["stats"] = c["statistics"].store_statistics(_store_id())
    elif tab == "orders":
        status = request.args.get("status", "all")
        search = request.args.get("search", "")
        orders = filter_orders(c["orders"].list_store_orders(_store_id()), status=status, search=search)
        context.update(orders=orders, status_filter=status, search=search)
    else:
        context["buttons"] = c["bot"].list_buttons(_store_id()) if g.store else []
    return render_template("store/dashboard.html", **context)


@store_bp.get("/statistics/data")
def statistics_data():
    try:
        stats = _components()["statistics"].store_statistics(_store_id())
    except SQLAlchemyError as exc:
        logger.error("Error loading statistics: %s", exc)
        return _error(str(exc), 500)
    return _ok(statistics=stats)


@store_bp.get("/orders/data")
def orders_data():
    try:
        orders = _components()["orders"].list_store_orders(_store_id())
    except SQLAlchemyError as exc:
        logger.error("Error loading orders: %s", exc)
        return _error(str(exc), 500)
    filtered = filter_orders(orders, status=request.args.get("status", "all"), search=request.args.get("search", ""))
    return _ok(orders=filtered, count=len(filtered))


@store_bp.post("/orders/<order_id>/status")
def update_order_status(order_id: str):
    if not g.store:
        return _error("Buyurtma holatini yangilashda xatolik", 404)
    payload = request.get_json(silent=True) or {}
    try:
        _components()["orders"].update_status(order_id, payload.get("status"), store_id=_store_id())
    except (ValueError, SQLAlchemyError) as exc:
        logger.error("Error updating order status: %s", exc)
        return _error("Buyurtma holatini yangilashda xatolik", 500 if isinstance(exc, SQLAlchemyError) else 400)
    return _ok()


# bot buttons


@store_bp.get("/bot/buttons")
def list_buttons():
    if not g.store:
        return _ok(buttons=[])
    return _ok(buttons=_components()["bot"].list_buttons(_store_id()))


@store_bp.post("/bot/buttons")
def create_button():
    if not g.store:
        return _error("Do'kon topilmadi", 404)
    payload = request.get_json(silent=True) or {}
    try:
        button = _components()["bot"].create_button(
            text=payload.get("text", ""),
            action=payload.get("action"),
            order_index=payload.get("order_index", 0),
            is_active=payload.get("is_active", True),
            store_id=_store_id(),
        )
    except (ValueError, SQLAlchemyError) as exc:
        return _error(f"Xatolik: {exc}", 500 if isinstance(exc, SQLAlchemyError) else 400)
    return _ok("Tugma saqlandi", button=button)


@store_bp.post("/bot/buttons/<button_id>")
def update_button(button_id: str):
    if not g.store:
        return _error("Do'kon topilmadi", 404)
    payload = request.get_json(silent=True) or {}
    fields = {k: payload[k] for k in ("text", "action", "order_index", "is_active") if k in payload}
    try:
        button = _components()["bot"].update_button(button_id, fields, store_id=_store_id())
    except (ValueError, SQLAlchemyError) as exc:
        return _error(f"Xatolik: {exc}", 500 if isinstance(exc, SQLAlchemyError) else 400)
    return _ok("Tugma saqlandi", button=button)


@store_bp.delete("/bot/buttons/<button_id>")
def delete_button(button_id: str):
    if not g.store:
        return _error("Do'kon topilmadi", 404)
    try:
        _components()["bot"].delete_button(button_id, store_id=_store_id())
    except (ValueError, SQLAlchemyError) as exc:
        return _error(f"Xatolik: {exc}", 500 if isinstance(exc, SQLAlchemyError) else 400)
    return _ok()
