from sqlalchemy import Column, DateTime, ForeignKey, String
from .base import Base, new_id, utcnow


class StoreCredential(Base):
    """Owner login issued when the admin onboards a store (stored as entered)."""

    __tablename__ = "store_credentials"

    id = Column(String(36), primary_key=True, default=new_id)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False, index=True)
    owner_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False)
    email = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
