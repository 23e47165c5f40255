from contextlib import contextmanager
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ..models.base import Base
from ..models import (  # noqa: F401  registers every backend table on Base.metadata
    become_seller_page,
    bot_button,
    bot_setting,
    cart_item,
    category,
    order,
    order_item,
    product,
    site_setting,
    store,
    store_credential,
    user_profile,
)


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/market.db")


def _ensure_sqlite_dir(database_url: str) -> None:
    # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = database_url.split("sqlite:///")[-1]
        try:
            Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            # real error will surface on connect if still invalid
            pass


class SessionFactory:
    """Opens sessions against the marketplace backend database.

    Calling the factory yields a session that commits on a clean exit and
    rolls back when the block raises, so every ``with factory() as session``
    block is one independent write against the backend.
    """

    def __init__(self, database_url: str = DATABASE_URL, **engine_kwargs) -> None:
        _ensure_sqlite_dir(database_url)
        self.database_url = database_url
        self.engine = create_engine(database_url, future=True, **engine_kwargs)
        self._maker = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False, future=True)

    @contextmanager
    def __call__(self):
        session = self._maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create missing tables (local development and tests)."""
        Base.metadata.create_all(self.engine)


_default_factory: Optional[SessionFactory] = None


def default_session_factory() -> SessionFactory:
    global _default_factory
    if _default_factory is None:
        _default_factory = SessionFactory(DATABASE_URL)
    return _default_factory


@contextmanager
def get_session():
    with default_session_factory()() as session:
        yield session
