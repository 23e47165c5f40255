from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from .base import Base, new_id, utcnow


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    image_url = Column(String(1024), nullable=True)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("product_categories.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    package_type = Column(String(16), nullable=True)  # 1kg | 3kg | 5kg | 10kg
    min_order = Column(Float, nullable=True, default=1)
    max_order = Column(Float, nullable=True)
    badge = Column(String(32), nullable=True)  # top | discount | recommended
    sale_type = Column(String(16), nullable=False, default="by_piece")  # by_kg | by_piece | by_package
    created_at = Column(DateTime, nullable=False, default=utcnow)

    store = relationship("Store", lazy="joined")
