from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.orm import declarative_base


Base = declarative_base()


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    # naive UTC, matching what the backend returns for timestamp columns
    return datetime.now(timezone.utc).replace(tzinfo=None)
