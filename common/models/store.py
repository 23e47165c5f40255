from sqlalchemy import Column, DateTime, Float, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class Store(Base):
    __tablename__ = "stores"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    owner_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True, index=True)
    status = Column(String(16), nullable=True, default="active")  # active | paused | closed
    working_hours = Column(String(255), nullable=True)
    delivery_radius = Column(Float, nullable=True, default=0)
    delivery_price = Column(Numeric(12, 2), nullable=True, default=0)
    telegram_chat_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    owner = relationship("UserProfile", lazy="joined")
