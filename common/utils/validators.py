from typing import Any, Optional


ORDER_STATUSES = ("pending", "processing", "delivering", "completed", "cancelled")
OPEN_ORDER_STATUSES = ("pending", "processing", "delivering")
STORE_STATUSES = ("active", "paused", "closed")
SALE_TYPES = ("by_kg", "by_piece", "by_package")
PACKAGE_TYPES = ("1kg", "3kg", "5kg", "10kg")
BADGES = ("top", "discount", "recommended")
USER_ROLES = ("admin", "store", "client")
UPLOAD_FOLDERS = ("products", "banners", "categories", "stores")


def ensure_choice(value: Optional[str], choices, field: str) -> str:
    if value not in choices:
        raise ValueError(f"invalid {field}: {value!r}")
    return value


def blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_float(value: Any, field: str, default: Optional[float] = None) -> Optional[float]:
    """Parse a form number; blank gives ``default``, garbage raises."""
    text = "" if value is None else str(value).strip()
    if not text:
        return default
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{field} must be a number") from None


def parse_float_or_zero(value: Any) -> float:
    text = "" if value is None else str(value).strip()
    try:
        return float(text) if text else 0.0
    except ValueError:
        return 0.0


def parse_int(value: Any, field: str) -> int:
    text = "" if value is None else str(value).strip()
    try:
        return int(float(text))
    except ValueError:
        raise ValueError(f"{field} must be an integer") from None
