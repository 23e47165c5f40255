from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    delivery_address = Column(Text, nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    user_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True, index=True)
    guest_name = Column(String(255), nullable=True)
    guest_email = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")
