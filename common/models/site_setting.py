from sqlalchemy import Column, String, Text
from .base import Base, new_id


class SiteSetting(Base):
    __tablename__ = "site_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    key = Column(String(128), nullable=False, unique=True)
    value = Column(Text, nullable=True)
    description = Column(String(255), nullable=True)
