from typing import Any, Dict, Optional


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _num(value) -> float:
    return float(value or 0)


def to_product_dto(row: Any) -> Dict:
    store = getattr(row, "store", None)
    return {
        "id": getattr(row, "id", None),
        "name": getattr(row, "name", None),
        "description": getattr(row, "description", None),
        "price": _num(getattr(row, "price", 0)),
        "stock": getattr(row, "stock", 0) or 0,
        "image_url": getattr(row, "image_url", None),
        "store_id": getattr(row, "store_id", None),
        "category_id": getattr(row, "category_id", None),
        "is_active": bool(getattr(row, "is_active", True)),
        "package_type": getattr(row, "package_type", None),
        "min_order": getattr(row, "min_order", None),
        "max_order": getattr(row, "max_order", None),
        "badge": getattr(row, "badge", None),
        "sale_type": getattr(row, "sale_type", None) or "by_piece",
        "created_at": _iso(getattr(row, "created_at", None)),
        "stores": {"name": store.name} if store is not None else None,
    }


def to_order_item_dto(row: Any) -> Dict:
    product = row.product
    store = product.store if product is not None else None
    return {
        "quantity": row.quantity,
        "price": _num(row.price),
        "products": {
            "id": product.id,
            "name": product.name,
            "store_id": product.store_id,
            "stores": {"name": store.name} if store is not None else None,
        }
        if product is not None
        else None,
    }


def to_order_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "total_amount": _num(row.total_amount),
        "status": row.status,
        "delivery_address": row.delivery_address or "",
        "phone": row.phone or "",
        "user_id": row.user_id,
        "guest_name": row.guest_name,
        "guest_email": row.guest_email,
        "created_at": _iso(row.created_at),
        "order_items": [to_order_item_dto(item) for item in row.items],
    }


def to_profile_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "email": row.email,
        "name": row.name,
        "role": row.role or "client",
        "created_at": _iso(row.created_at),
    }


def to_bot_button_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "text": row.text,
        "action": row.action,
        "order_index": row.order_index,
        "is_active": bool(row.is_active),
        "store_id": row.store_id,
    }
