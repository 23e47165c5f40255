"""Administrator panel: orders, products, stores and bot content tabs."""

from __future__ import annotations

import logging

from flask import (
    Blueprint,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from sqlalchemy.exc import SQLAlchemyError

from common.services.auth_service import home_path_for_role
from common.services.catalog_service import product_form_defaults, search_products
from common.services.order_service import filter_orders
from common.services.store_service import FIELDS_REQUIRED

from .auth import current_user


admin_bp = Blueprint("admin", __name__, url_prefix="/admin")
logger = logging.getLogger(__name__)

TABS = ("orders", "products", "stores", "bot")


def _components() -> dict:
    return current_app.extensions["market_components"]


def _ok(message: str = "", **data):
    return jsonify({"status": "ok", "message": message, **data})


def _error(message: str, status: int = 400):
    return jsonify({"status": "error", "message": message}), status


@admin_bp.before_request
def guard_admin():
    user = current_user()
    if not user:
        return redirect(url_for("auth.login_form"))
    role = _components()["auth"].get_role(user["id"])
    if role != "admin":
        return redirect(home_path_for_role(role))
    return None


@admin_bp.get("/")
def dashboard():
    tab = request.args.get("tab", "orders")
    if tab not in TABS:
        tab = "orders"
    c = _components()
    context = {"tab": tab}
    if tab == "orders":
        status = request.args.get("status", "all")
        search = request.args.get("search", "")
        try:
            orders = filter_orders(c["orders"].list_orders(), status=status, search=search)
        except SQLAlchemyError as exc:
            logger.error("Error loading orders: %s", exc)
            orders = []
            context["error_message"] = f"Buyurtmalarni yuklashda xatolik: {exc}"
        context.update(orders=orders, status_filter=status, search=search)
    elif tab == "products":
        search = request.args.get("search", "")
        try:
            products = search_products(c["catalog"].list_all_products(), search)
            stores = c["catalog"].list_store_options()
            categories = c["catalog"].list_categories()
        except SQLAlchemyError as exc:
            logger.error("Error loading products: %s", exc)
            products, stores, categories = [], [], []
            context["error_message"] = f"Ошибка загрузки товаров: {exc}"
        context.update(
            products=products,
            stores=stores,
            categories=categories,
            new_product=product_form_defaults(stores),
            search=search,
        )
    elif tab == "stores":
        try:
            context.update(stores=c["stores"].list_stores(), users=c["stores"].list_client_users())
        except SQLAlchemyError as exc:
            logger.error("Error loading stores: %s", exc)
            context.update(stores=[], users=[], error_message=f"Xatolik: {exc}")
    else:
        try:
            bot = c["bot"].load()
        except SQLAlchemyError as exc:
            logger.error("Error loading bot data: %s", exc)
            bot = {"welcome_message": "", "buttons": []}
            context["error_message"] = f"Ошибка загрузки данных: {exc}"
        context.update(bot=bot)
    return render_template("admin/dashboard.html", **context)


# orders


@admin_bp.get("/orders/data")
def orders_data():
    try:
        orders = _components()["orders"].list_orders()
    except SQLAlchemyError as exc:
        logger.error("Error loading orders: %s", exc)
        return _error(f"Buyurtmalarni yuklashda xatolik: {exc}", 500)
    filtered = filter_orders(orders, status=request.args.get("status", "all"), search=request.args.get("search", ""))
    return _ok(orders=filtered, count=len(filtered))


@admin_bp.post("/orders/<order_id>/status")
def update_order_status(order_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        _components()["orders"].update_status(order_id, payload.get("status"))
    except ValueError as exc:
        return _error(f"Buyurtma holatini yangilashda xatolik: {exc}")
    except SQLAlchemyError as exc:
        logger.error("Error updating order status: %s", exc)
        return _error(f"Buyurtma holatini yangilashda xatolik: {exc}", 500)
    return _ok("Buyurtma holati muvaffaqiyatli yangilandi!")


# products


@admin_bp.get("/products/data")
def products_data():
    catalog = _components()["catalog"]
    try:
        products = catalog.list_all_products()
    except SQLAlchemyError as exc:
        logger.error("Error loading products: %s", exc)
        return _error(f"Ошибка загрузки товаров: {exc}", 500)
    return _ok(
        products=search_products(products, request.args.get("search", "")),
        stores=catalog.list_store_options(),
        categories=catalog.list_categories(),
    )


@admin_bp.get("/products/form")
def product_form():
    catalog = _components()["catalog"]
    stores = catalog.list_store_options()
    product = None
    product_id = request.args.get("product_id")
    if product_id:
        product = next((p for p in catalog.list_all_products() if p["id"] == product_id), None)
        if product is None:
            return _error("product not found", 404)
    return _ok(form=product_form_defaults(stores, product))


@admin_bp.post("/products")
def create_product():
    return _save_product(None)


@admin_bp.post("/products/<product_id>")
def update_product(product_id: str):
    return _save_product(product_id)


def _save_product(product_id):
    form = request.get_json(silent=True) or {}
    prefix = "Ошибка обновления товара: " if product_id else "Ошибка создания товара: "
    try:
        product = _components()["catalog"].save_product(form, product_id)
    except ValueError as exc:
        return _error(prefix + str(exc))
    except SQLAlchemyError as exc:
        logger.error("Product save error: %s", exc)
        return _error(prefix + str(exc), 500)
    return _ok("Товар успешно сохранен!", product=product)


@admin_bp.delete("/products/<product_id>")
def delete_product(product_id: str):
    try:
        _components()["catalog"].delete_product(product_id)
    except SQLAlchemyError as exc:
        logger.error("Product delete error: %s", exc)
        return _error("Ошибка удаления товара", 500)
    return _ok()


@admin_bp.post("/products/<product_id>/active")
def set_product_active(product_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        result = _components()["catalog"].set_product_active(product_id, bool(payload.get("is_active")))
    except ValueError as exc:
        return _error(f"Ошибка обновления статуса: {exc}")
    except SQLAlchemyError as exc:
        return _error(f"Ошибка обновления статуса: {exc}", 500)
    return _ok(product=result)


# stores


@admin_bp.get("/stores/data")
def stores_data():
    stores = _components()["stores"]
    return _ok(stores=stores.list_stores(), users=stores.list_client_users())


@admin_bp.post("/stores")
def create_store():
    form = request.get_json(silent=True) or {}
    try:
        store = _components()["stores"].create_store(form)
    except ValueError as exc:
        message = str(exc)
        return _error(message if message == FIELDS_REQUIRED else f"Xatolik: {message}")
    except SQLAlchemyError as exc:
        logger.error("Store create error: %s", exc)
        return _error(f"Do'kon yaratishda xatolik: {exc}", 500)
    return _ok("Do'kon muvaffaqiyatli yaratildi!", store=store)


@admin_bp.post("/stores/<store_id>/settings")
def save_store_settings(store_id: str):
    form = request.get_json(silent=True) or {}
    try:
        store = _components()["stores"].update_settings(store_id, form)
    except (ValueError, SQLAlchemyError) as exc:
        return _error(f"Xatolik: {exc}", 500 if isinstance(exc, SQLAlchemyError) else 400)
    return _ok("Do'kon sozlamalari muvaffaqiyatli saqlandi!", store=store)


# bot


@admin_bp.get("/bot/data")
def bot_data():
    return _ok(**_components()["bot"].load())


@admin_bp.post("/bot/welcome")
def save_welcome_message():
    payload = request.get_json(silent=True) or {}
    bot = _components()["bot"]
    prefix = "Ошибка обновления сообщения: " if bot.has_welcome_message() else "Ошибка создания сообщения: "
    try:
        bot.save_welcome_message(payload.get("welcome_message", ""))
    except SQLAlchemyError as exc:
        logger.error("Error saving welcome message: %s", exc)
        return _error(prefix + str(exc), 500)
    return _ok("Сообщение успешно сохранено!")


@admin_bp.get("/bot/buttons/<button_id>/response")
def button_response_form(button_id: str):
    try:
        form = _components()["bot"].response_form(button_id)
    except ValueError as exc:
        return _error(str(exc), 404)
    return _ok(form=form)


@admin_bp.post("/bot/response")
def save_button_response():
    payload = request.get_json(silent=True) or {}
    try:
        _components()["bot"].save_button_response(payload.get("buttonKey"), payload.get("responseText", ""))
    except (ValueError, SQLAlchemyError) as exc:
        logger.error("Error saving button response: %s", exc)
        return _error(f"Ошибка сохранения: {exc}", 500 if isinstance(exc, SQLAlchemyError) else 400)
    return _ok("Текст ответа успешно сохранен!")


@admin_bp.post("/bot/buttons/<button_id>")
def update_bot_button(button_id: str):
    payload = request.get_json(silent=True) or {}
    fields = {k: payload[k] for k in ("is_active", "order_index") if k in payload}
    try:
        button = _components()["bot"].update_button(button_id, fields)
    except ValueError as exc:
        return _error(f"Ошибка сохранения: {exc}")
    return _ok(button=button)
