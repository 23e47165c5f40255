from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
from sqlalchemy import func
from werkzeug.security import check_password_hash, generate_password_hash

from ..db.session import get_session
from ..models.user_profile import UserProfile
from ..utils.dto import to_profile_dto
from ..utils.validators import USER_ROLES, ensure_choice
from .logging import log_event


ROLE_HOME = {"admin": "/admin", "store": "/store"}


def home_path_for_role(role: Optional[str]) -> str:
    """Where a user lands after login; unknown roles go to the storefront."""
    return ROLE_HOME.get(role or "client", "/client")


class AuthService:
    """Sign-up, password sign-in and access tokens for the marketplace users."""

    def __init__(self, *, jwt_secret: str, expire_minutes: int = 1440, session_factory=get_session):
        self._session_factory = session_factory
        self._jwt_secret = jwt_secret
        self._expire_minutes = expire_minutes

    def sign_up(self, *, email: str, password: str, name: str, role: str = "client") -> Dict:
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValueError("Email and password are required")
        ensure_choice(role, USER_ROLES, "role")
        with self._session_factory() as session:
            exists = session.query(UserProfile.id).filter(func.lower(UserProfile.email) == email).first()
            if exists:
                raise ValueError("User already registered")
            profile = UserProfile(
                email=email,
                name=(name or "").strip(),
                role=role,
                password_hash=generate_password_hash(password),
            )
            session.add(profile)
            session.flush()
            log_event("info", "auth.signed_up", user_id=profile.id, role=role)
            return to_profile_dto(profile)

    def upsert_profile(self, *, user_id: str, email: str, name: str, role: str) -> Dict:
        """Write name/email/role onto an existing profile row (conflict on id)."""
        ensure_choice(role, USER_ROLES, "role")
        with self._session_factory() as session:
            profile = session.get(UserProfile, user_id)
            if profile is None:
                raise ValueError("user not found")
            profile.email = (email or profile.email).strip().lower()
            profile.name = name or profile.name
            profile.role = role
            session.flush()
            return to_profile_dto(profile)

    def sign_in_with_password(self, *, email: str, password: str) -> Dict:
        email = (email or "").strip().lower()
        with self._session_factory() as session:
            profile = session.query(UserProfile).filter(func.lower(UserProfile.email) == email).first()
            if profile is None or not check_password_hash(profile.password_hash, password or ""):
                log_event("warning", "auth.sign_in_failed", email=email)
                raise ValueError("Invalid login credentials")
            log_event("info", "auth.signed_in", user_id=profile.id)
            return to_profile_dto(profile)

    def get_profile(self, user_id: Optional[str]) -> Dict:
        if not user_id:
            return {}
        with self._session_factory() as session:
            profile = session.get(UserProfile, user_id)
            return to_profile_dto(profile) if profile else {}

    def get_role(self, user_id: str) -> Optional[str]:
        """Role read straight from the profiles table; ``None`` when there is no profile."""
        with self._session_factory() as session:
            row = session.query(UserProfile.role).filter(UserProfile.id == user_id).first()
            if row is None:
                return None
            return row[0] or "client"

    def list_users(self, *, role: Optional[str] = None):
        with self._session_factory() as session:
            q = session.query(UserProfile)
            if role:
                q = q.filter(UserProfile.role == role)
            return [to_profile_dto(p) for p in q.order_by(UserProfile.created_at.desc()).all()]

    def issue_token(self, profile: Dict) -> str:
        exp = datetime.now(timezone.utc) + timedelta(minutes=self._expire_minutes)
        payload = {"sub": profile["id"], "role": profile.get("role") or "client", "exp": exp}
        return jwt.encode(payload, self._jwt_secret, algorithm="HS256")

    def decode_token(self, token: Optional[str]) -> Optional[str]:
        """Return the user id carried by a valid token, else ``None``."""
        if not token:
            return None
        try:
            data = jwt.decode(token, self._jwt_secret, algorithms=["HS256"])
        except jwt.PyJWTError:
            return None
        return data.get("sub")
