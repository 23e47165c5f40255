"""Marketplace admin and storefront Flask application."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from flask import Flask, redirect, url_for

from common.db.session import SessionFactory
from common.services.auth_service import AuthService
from common.services.bot_content_service import BotContentService
from common.services.cart_service import CartService
from common.services.catalog_service import CatalogService
from common.services.checkout_service import CheckoutService
from common.services.logging import configure_logging
from common.services.order_service import OrderService
from common.services.statistics_service import StatisticsService
from common.services.store_service import StoreService
from common.utils import labels
from common.utils.labels import format_date, format_sum, order_status_text, store_status_text
from config import MarketConfig
from routes import admin, api, auth, client, store
from services import ImageStorage, StoreNotifier


def create_app(config: Optional[MarketConfig] = None, session_factory: Optional[SessionFactory] = None) -> Flask:
    config = config or MarketConfig.load()
    configure_logging(config.log_level)

    if session_factory is None:
        session_factory = SessionFactory(config.database_url)
        session_factory.create_all()

    app = Flask(
        __name__,
        template_folder=str(Path(__file__).parent / "templates"),
        static_folder=str(config.static_dir),
    )
    app.config["SECRET_KEY"] = config.secret_key
    app.config["MARKET_CONFIG"] = config
    # multipart overhead on top of the image limit
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes * 2

    auth_service = AuthService(
        jwt_secret=config.jwt_secret,
        expire_minutes=config.jwt_expire_minutes,
        session_factory=session_factory,
    )
    order_service = OrderService(session_factory)
    components = {
        "auth": auth_service,
        "orders": order_service,
        "catalog": CatalogService(session_factory),
        "stores": StoreService(auth_service, session_factory),
        "bot": BotContentService(session_factory),
        "statistics": StatisticsService(order_service, session_factory),
        "cart": CartService(session_factory),
        "checkout": CheckoutService(session_factory),
        "images": ImageStorage(
            config.storage_dir,
            config.static_dir.parent,
            config.public_url,
            max_bytes=config.max_upload_bytes,
        ),
        "notifier": StoreNotifier(config.telegram_bot_token, order_service),
    }
    app.extensions["market_components"] = components

    app.register_blueprint(auth.auth_bp)
    app.register_blueprint(admin.admin_bp)
    app.register_blueprint(store.store_bp)
    app.register_blueprint(client.client_bp)
    app.register_blueprint(api.api_bp)

    app.add_template_filter(order_status_text)
    app.add_template_filter(store_status_text)
    app.add_template_filter(format_sum)
    app.add_template_filter(format_date)
    app.jinja_env.globals.update(
        ORDER_STATUS_LABELS=labels.ORDER_STATUS_LABELS,
        STORE_STATUS_LABELS=labels.STORE_STATUS_LABELS,
        SALE_TYPE_LABELS=labels.SALE_TYPE_LABELS,
        PACKAGE_TYPE_LABELS=labels.PACKAGE_TYPE_LABELS,
        BADGE_LABELS=labels.BADGE_LABELS,
    )

    @app.get("/")
    def index():
        return redirect(url_for("client.catalog"))

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
