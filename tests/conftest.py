from pathlib import Path

import pytest

from app import create_app
from common.db.session import SessionFactory
from common.models.bot_button import BotButton
from common.models.order import Order
from common.models.order_item import OrderItem
from common.models.product import Product
from common.models.store import Store
from common.services.auth_service import AuthService
from common.services.order_service import OrderService
from config import MarketConfig


@pytest.fixture
def session_factory(tmp_path: Path) -> SessionFactory:
    factory = SessionFactory(f"sqlite:///{tmp_path / 'market.db'}")
    factory.create_all()
    return factory


@pytest.fixture
def config(tmp_path: Path) -> MarketConfig:
    return MarketConfig(
        secret_key="test-secret",
        database_url=f"sqlite:///{tmp_path / 'market.db'}",
        jwt_secret="test-jwt-secret",
        jwt_expire_minutes=60,
        public_base_url="http://testserver",
        log_level="WARNING",
        max_upload_mb=5,
        project_root=tmp_path,
    )


@pytest.fixture
def app(config: MarketConfig, session_factory: SessionFactory):
    config.storage_dir.mkdir(parents=True, exist_ok=True)
    flask_app = create_app(config, session_factory=session_factory)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_service(session_factory) -> AuthService:
    return AuthService(jwt_secret="test-jwt-secret", session_factory=session_factory)


@pytest.fixture
def order_service(session_factory) -> OrderService:
    return OrderService(session_factory)


class Seed:
    """Inserts rows straight into the test database."""

    def __init__(self, session_factory: SessionFactory, auth_service: AuthService) -> None:
        self._factory = session_factory
        self._auth = auth_service

    def user(self, email: str, role: str = "client", name: str = "User", password: str = "secret123") -> dict:
        return self._auth.sign_up(email=email, password=password, name=name, role=role)

    def store(self, name: str, owner_id=None, telegram_chat_id=None) -> str:
        with self._factory() as session:
            store = Store(name=name, owner_id=owner_id, status="active", delivery_radius=0, delivery_price=0, telegram_chat_id=telegram_chat_id)
            session.add(store)
            session.flush()
            return store.id

    def product(self, store_id: str, name: str, price: float = 1000, stock: int = 10, is_active: bool = True, created_at=None) -> str:
        with self._factory() as session:
            product = Product(name=name, price=price, stock=stock, store_id=store_id, is_active=is_active)
            if created_at is not None:
                product.created_at = created_at
            session.add(product)
            session.flush()
            return product.id

    def order(self, items, status: str = "pending", created_at=None, **fields) -> str:
        """``items`` is a list of ``(product_id, quantity, price)``."""
        with self._factory() as session:
            order = Order(
                total_amount=sum(q * p for _, q, p in items),
                status=status,
                delivery_address=fields.pop("delivery_address", "Toshkent, Chilonzor 5"),
                phone=fields.pop("phone", "+998901234567"),
                **fields,
            )
            if created_at is not None:
                order.created_at = created_at
            session.add(order)
            session.flush()
            for product_id, quantity, price in items:
                session.add(OrderItem(order_id=order.id, product_id=product_id, quantity=quantity, price=price))
            return order.id

    def button(self, text: str, store_id=None, order_index: int = 0) -> str:
        with self._factory() as session:
            button = BotButton(text=text, store_id=store_id, order_index=order_index, is_active=True)
            session.add(button)
            session.flush()
            return button.id


@pytest.fixture
def seed(session_factory, auth_service) -> Seed:
    return Seed(session_factory, auth_service)


@pytest.fixture
def login(client):
    def _login(email: str, password: str = "secret123"):
        return client.post("/auth/login", data={"email": email, "password": password})

    return _login
