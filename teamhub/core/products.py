"""
core/products.py — Product CRUD; only the owner may change or remove a product.
"""
from __future__ import annotations

import logging
import math
import uuid
from typing import Any, Optional

from ..auth import users
from ..auth.models import User, iso, parse_ts, utcnow
from ..auth.sqlite_db import get_conn
from .errors import NotFoundError, ValidationError
from .models import Pagination, ProductView, UserSummary, clamp_page
from .policy import require_owner

logger = logging.getLogger(__name__)


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Valid product name is required")
    return name.strip()


def _check_price(price: Any) -> float:
    if (
        isinstance(price, bool)
        or not isinstance(price, (int, float))
        or not math.isfinite(price)
        or price < 0
    ):
        raise ValidationError("Valid price is required and must be non-negative")
    return float(price)


def _load_row(product_id: str):
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM products WHERE id = ?", (product_id,)).fetchone()
    if not row:
        raise NotFoundError("Product not found")
    return row


def _to_view(row, owners: dict[str, User]) -> ProductView:
    owner = owners.get(row["owner_id"])
    return ProductView(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        price=row["price"],
        owner=UserSummary.of(owner) if owner else None,
        created_at=parse_ts(row["created_at"]),
        updated_at=parse_ts(row["updated_at"]),
    )


def _view(product_id: str) -> ProductView:
    row = _load_row(product_id)
    return _to_view(row, users.get_users_by_ids([row["owner_id"]]))


def create_product(owner: User, *, name: Any, price: Any, description: Optional[str] = None) -> ProductView:
    name = _check_name(name)
    price = _check_price(price)

    product_id = str(uuid.uuid4())
    now = iso(utcnow())
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO products (id, name, description, price, owner_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (product_id, name, (description or "").strip(), price, owner.id, now, now),
        )
        conn.commit()
    logger.info("Product %s added by %s", product_id, owner.id)
    return _view(product_id)


def list_products(page: Optional[int] = None, limit: Optional[int] = None) -> tuple[list[ProductView], Pagination]:
    page, limit, offset = clamp_page(page, limit)
    with get_conn() as conn:
        total = conn.execute("SELECT COUNT(*) FROM products").fetchone()[0]
        rows = conn.execute(
            "SELECT * FROM products ORDER BY created_at DESC LIMIT ? OFFSET ?", (limit, offset)
        ).fetchall()
    owners = users.get_users_by_ids(r["owner_id"] for r in rows)
    return [_to_view(r, owners) for r in rows], Pagination.build(page, limit, total)


def get_product(product_id: str) -> ProductView:
    return _view(product_id)


def update_product(user: User, product_id: str, fields: dict[str, Any]) -> ProductView:
    row = _load_row(product_id)
    require_owner(row["owner_id"], user, "product", "update")

    changes: dict[str, Any] = {}
    if fields.get("name") is not None:
        changes["name"] = _check_name(fields["name"])
    if fields.get("price") is not None:
        changes["price"] = _check_price(fields["price"])
    if fields.get("description") is not None:
        changes["description"] = str(fields["description"]).strip()
    if changes:
        assignments = ", ".join(f"{col} = ?" for col in changes)
        with get_conn() as conn:
            conn.execute(
                f"UPDATE products SET {assignments}, updated_at = ? WHERE id = ?",
                (*changes.values(), iso(utcnow()), product_id),
            )
            conn.commit()
    return _view(product_id)


def delete_product(user: User, product_id: str) -> None:
    row = _load_row(product_id)
    require_owner(row["owner_id"], user, "product", "delete")
    with get_conn() as conn:
        conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
        conn.commit()
    logger.info("Product %s deleted by %s", product_id, user.id)
