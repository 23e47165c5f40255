from sqlalchemy import Boolean, Column, DateTime, String, Text
from .base import Base, new_id, utcnow


class BecomeSellerPage(Base):
    __tablename__ = "become_seller_page"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
