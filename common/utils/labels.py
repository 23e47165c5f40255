"""Display labels and formatting shared by the admin and store panels."""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union


ORDER_STATUS_LABELS = {
    "pending": "Yangi",
    "processing": "Tayyorlanmoqda",
    "delivering": "Yetkazilmoqda",
    "completed": "Yakunlangan",
    "cancelled": "Bekor qilingan",
}

STORE_STATUS_LABELS = {
    "active": "Aktiv",
    "paused": "Pauza",
    "closed": "Yopiq",
}

SALE_TYPE_LABELS = {
    "by_kg": "Kg bo'yicha",
    "by_piece": "Dona bo'yicha",
    "by_package": "Paket bo'yicha",
}

PACKAGE_TYPE_LABELS = {
    "1kg": "1 kg",
    "3kg": "3 kg",
    "5kg": "5 kg",
    "10kg": "10 kg",
}

BADGE_LABELS = {
    "top": "Top",
    "discount": "15%",
    "recommended": "Tavsiya etiladi",
}


def order_status_text(status: str) -> str:
    return ORDER_STATUS_LABELS.get(status, status)


def store_status_text(status: str) -> str:
    return STORE_STATUS_LABELS.get(status, status)


def format_sum(amount: Union[int, float, Decimal, None]) -> str:
    """Round to whole so'm and group thousands: ``12 345 so'm``."""
    value = Decimal(str(amount or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{int(value):,}".replace(",", " ") + " so'm"


def format_date(value: Optional[Union[str, datetime]]) -> str:
    if value is None:
        return ""
    try:
        if isinstance(value, str):
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value.strftime("%d.%m.%Y %H:%M")
    except ValueError:
        return str(value)


def preview(text: Optional[str], limit: int = 50) -> str:
    text = text or ""
    return text[:limit] + ("..." if len(text) > limit else "")
