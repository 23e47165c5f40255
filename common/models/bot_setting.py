from sqlalchemy import Column, String, Text
from .base import Base, new_id


class BotSetting(Base):
    __tablename__ = "bot_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    key = Column(String(128), nullable=False, unique=True)
    value = Column(Text, nullable=False, default="")
    description = Column(String(255), nullable=True)
