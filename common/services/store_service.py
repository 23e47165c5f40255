import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..db.session import get_session
from ..models.store import Store
from ..models.store_credential import StoreCredential
from ..utils.validators import STORE_STATUSES, blank_to_none, ensure_choice, parse_float_or_zero
from .auth_service import AuthService
from .logging import log_event


logger = logging.getLogger(__name__)

FIELDS_REQUIRED = "Barcha maydonlarni to'ldiring"
UNKNOWN_OWNER = {"name": "Noma'lum", "email": ""}


def to_store_dto(store: Store, credential: Optional[StoreCredential] = None) -> Dict:
    owner = store.owner
    return {
        "id": store.id,
        "name": store.name,
        "owner_id": store.owner_id,
        "status": store.status or "active",
        "working_hours": store.working_hours or "",
        "delivery_radius": store.delivery_radius or 0,
        "delivery_price": float(store.delivery_price or 0),
        "telegram_chat_id": store.telegram_chat_id,
        "owner": {"name": owner.name, "email": owner.email} if owner is not None else dict(UNKNOWN_OWNER),
        "credentials": {"email": credential.email, "password": credential.password} if credential else None,
    }


class StoreService:
    """Store onboarding and per-store settings."""

    def __init__(self, auth_service: AuthService, session_factory=get_session):
        self._session_factory = session_factory
        self._auth = auth_service

    def list_stores(self) -> List[Dict]:
        """Stores newest first, with owner name/email and any issued credentials."""
        with self._session_factory() as session:
            stores = session.query(Store).order_by(Store.created_at.desc()).all()
            credentials = {c.store_id: c for c in session.query(StoreCredential).all()}
            return [to_store_dto(s, credentials.get(s.id)) for s in stores]

    def list_client_users(self) -> List[Dict]:
        return self._auth.list_users(role="client")

    def get_store_for_owner(self, owner_id: Optional[str]) -> Optional[Dict]:
        if not owner_id:
            return None
        with self._session_factory() as session:
            store = session.query(Store).filter(Store.owner_id == owner_id).order_by(Store.created_at).first()
            return to_store_dto(store) if store else None

    def update_settings(self, store_id: str, form: Dict) -> Dict:
        status = form.get("status") or "active"
        ensure_choice(status, STORE_STATUSES, "status")
        with self._session_factory() as session:
            store = session.get(Store, store_id)
            if store is None:
                raise ValueError("store not found")
            store.status = status
            store.working_hours = blank_to_none(form.get("working_hours"))
            store.delivery_radius = parse_float_or_zero(form.get("delivery_radius"))
            store.delivery_price = parse_float_or_zero(form.get("delivery_price"))
            if "telegram_chat_id" in form:
                store.telegram_chat_id = blank_to_none(form.get("telegram_chat_id"))
            session.flush()
            log_event("info", "store.settings_updated", store_id=store_id, status=status)
            return to_store_dto(store)

    def create_store(self, form: Dict) -> Dict:
        """Onboard a store, optionally creating its owner account first.

        Owner sign-up, store insert and credential insert are separate
        writes; a failed credential insert is logged and does not undo the
        store.
        """
        store_name = (form.get("store_name") or "").strip()
        if not store_name:
            raise ValueError(FIELDS_REQUIRED)
        create_new_user = bool(form.get("create_new_user", True))
        if create_new_user:
            email = (form.get("owner_email") or "").strip()
            name = (form.get("owner_name") or "").strip()
            password = form.get("owner_password") or ""
            if not email or not name or not password:
                raise ValueError(FIELDS_REQUIRED)
            profile = self._auth.sign_up(email=email, password=password, name=name, role="store")
            owner_id = profile["id"]
            self._auth.upsert_profile(user_id=owner_id, email=email, name=name, role="store")
        else:
            owner_id = form.get("existing_user_id") or None
            if not owner_id:
                raise ValueError(FIELDS_REQUIRED)

        with self._session_factory() as session:
            store = Store(
                name=store_name,
                owner_id=owner_id,
                status="active",
                delivery_radius=0,
                delivery_price=0,
            )
            session.add(store)
            session.flush()
            store_id = store.id
        log_event("info", "store.created", store_id=store_id, owner_id=owner_id, new_owner=create_new_user)

        if create_new_user:
            try:
                with self._session_factory() as session:
                    session.add(
                        StoreCredential(
                            store_id=store_id,
                            owner_id=owner_id,
                            email=form.get("owner_email").strip(),
                            password=form.get("owner_password"),
                        )
                    )
            except SQLAlchemyError as exc:
                logger.error("Error saving credentials for store %s: %s", store_id, exc)

        return {"id": store_id, "name": store_name, "owner_id": owner_id}
