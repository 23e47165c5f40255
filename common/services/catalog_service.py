from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_

from ..db.session import get_session
from ..models.category import ProductCategory
from ..models.product import Product
from ..models.store import Store
from ..utils.dto import to_product_dto
from ..utils.pagination import normalize_paging, page_offset
from ..utils.validators import (
    BADGES,
    PACKAGE_TYPES,
    SALE_TYPES,
    blank_to_none,
    ensure_choice,
    parse_float,
    parse_int,
)
from .logging import log_event


def search_products(products: Iterable[Dict], term: str) -> List[Dict]:
    """Case-insensitive substring match on name, description and store name."""
    needle = (term or "").lower()
    if not needle:
        return list(products)

    def matches(p: Dict) -> bool:
        store_name = (p.get("stores") or {}).get("name")
        return any(f and needle in f.lower() for f in (p["name"], p.get("description"), store_name))

    return [p for p in products if matches(p)]


def product_form_defaults(stores: List[Dict], product: Optional[Dict] = None) -> Dict:
    """Initial values of the product form, for editing or for a new product."""
    if product:
        return {
            "name": product["name"],
            "description": product.get("description") or "",
            "price": str(product["price"]),
            "stock": str(product["stock"]),
            "image_url": product.get("image_url") or "",
            "store_id": product["store_id"],
            "category_id": product.get("category_id") or "",
            "is_active": product["is_active"],
            "package_type": product.get("package_type") or "",
            "min_order": str(product["min_order"]) if product.get("min_order") is not None else "1",
            "max_order": str(product["max_order"]) if product.get("max_order") is not None else "",
            "badge": product.get("badge") or "",
            "sale_type": product.get("sale_type") or "by_piece",
        }
    return {
        "name": "",
        "description": "",
        "price": "",
        "stock": "",
        "image_url": "",
        "store_id": stores[0]["id"] if stores else "",
        "category_id": "",
        "is_active": True,
        "package_type": "",
        "min_order": "1",
        "max_order": "",
        "badge": "",
        "sale_type": "by_piece",
    }


def product_values_from_form(form: Dict) -> Dict:
    """Convert submitted form strings into column values."""
    package_type = blank_to_none(form.get("package_type"))
    badge = blank_to_none(form.get("badge"))
    sale_type = form.get("sale_type") or "by_piece"
    if package_type is not None:
        ensure_choice(package_type, PACKAGE_TYPES, "package_type")
    if badge is not None:
        ensure_choice(badge, BADGES, "badge")
    ensure_choice(sale_type, SALE_TYPES, "sale_type")
    price = parse_float(form.get("price"), "price")
    if price is None:
        raise ValueError("price is required")
    return {
        "name": (form.get("name") or "").strip(),
        "description": form.get("description") or "",
        "price": price,
        "stock": parse_int(form.get("stock"), "stock"),
        "image_url": blank_to_none(form.get("image_url")),
        "store_id": form.get("store_id") or None,
        "category_id": blank_to_none(form.get("category_id")),
        "is_active": bool(form.get("is_active", True)),
        "package_type": package_type,
        "min_order": parse_float(form.get("min_order"), "min_order", default=1.0),
        "max_order": parse_float(form.get("max_order"), "max_order"),
        "badge": badge,
        "sale_type": sale_type,
    }


class CatalogService:
    """Product catalog: admin management and the client storefront listing."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def list_all_products(self) -> List[Dict]:
        """Every product including inactive ones, newest first, with the store name."""
        with self._session_factory() as session:
            rows = session.query(Product).order_by(Product.created_at.desc()).all()
            return [to_product_dto(r) for r in rows]

    def list_store_options(self) -> List[Dict]:
        with self._session_factory() as session:
            return [{"id": s.id, "name": s.name} for s in session.query(Store).order_by(Store.created_at).all()]

    def list_categories(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = (
                session.query(ProductCategory)
                .filter(ProductCategory.is_active.is_(True))
                .order_by(ProductCategory.order_index.asc())
                .all()
            )
            return [{"id": c.id, "name": c.name} for c in rows]

    def save_product(self, form: Dict, product_id: Optional[str] = None) -> Dict:
        """Insert a product, or update it when ``product_id`` is given."""
        values = product_values_from_form(form)
        with self._session_factory() as session:
            if product_id:
                product = session.get(Product, product_id)
                if product is None:
                    raise ValueError("product not found")
                for key, value in values.items():
                    setattr(product, key, value)
            else:
                product = Product(**values)
                session.add(product)
            session.flush()
            log_event("info", "product.saved", product_id=product.id, created=not product_id, image_url=product.image_url)
            return to_product_dto(product)

    def delete_product(self, product_id: str) -> None:
        with self._session_factory() as session:
            product = session.get(Product, product_id)
            if product is not None:
                session.delete(product)
                log_event("info", "product.deleted", product_id=product_id)
        return None

    def set_product_active(self, product_id: str, is_active: bool) -> Dict:
        with self._session_factory() as session:
            product = session.get(Product, product_id)
            if product is None:
                raise ValueError("product not found")
            product.is_active = bool(is_active)
            session.flush()
            return {"id": product_id, "is_active": product.is_active}

    def list_products(self, *, query: Optional[str] = None, category: Optional[str] = None, page=1, page_size=20) -> Dict:
        """Storefront listing of active products: { items, page, page_size, total }."""
        p, ps = normalize_paging(page, page_size)
        with self._session_factory() as session:
            q = session.query(Product).filter(Product.is_active.is_(True))
            if query:
                like = f"%{query}%"
                q = q.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
            if category:
                q = q.filter(Product.category_id == category)
            total = q.count()
            rows = q.order_by(Product.created_at.desc()).offset(page_offset(p, ps)).limit(ps).all()
            return {"items": [to_product_dto(r) for r in rows], "page": p, "page_size": ps, "total": total}

    def get_product(self, product_id: str) -> Dict:
        with self._session_factory() as session:
            r = session.query(Product).filter(Product.id == product_id, Product.is_active.is_(True)).first()
            return to_product_dto(r) if r else {}
