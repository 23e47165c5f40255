from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from .base import Base, new_id


class BotButton(Base):
    __tablename__ = "bot_buttons"

    id = Column(String(36), primary_key=True, default=new_id)
    text = Column(String(255), nullable=False)
    action = Column(String(255), nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=True, index=True)  # null = main bot
