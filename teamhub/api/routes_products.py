"""
api/routes_products.py — Product listing and owner-managed CRUD.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.models import User
from ..core import products
from .dependencies import get_current_user
from .dto import ProductRequest
from .errors import paged, success_response

router = APIRouter()


@router.get("/api/products")
async def list_products(page: Optional[int] = Query(default=None), limit: Optional[int] = Query(default=None)):
    items, pagination = products.list_products(page, limit)
    return success_response("Products fetched successfully", paged(items, pagination, "products"))


@router.get("/api/products/{product_id}")
async def get_product(product_id: str):
    return success_response("Product fetched successfully", products.get_product(product_id))


@router.post("/api/products/addproduct")
async def add_product(body: ProductRequest, user: User = Depends(get_current_user)):
    product = products.create_product(
        user, name=body.name, price=body.price, description=body.description
    )
    return success_response("Product added successfully", product, http_status=201)


@router.put("/api/products/{product_id}")
async def update_product(product_id: str, body: ProductRequest, user: User = Depends(get_current_user)):
    product = products.update_product(user, product_id, body.model_dump(exclude_unset=True))
    return success_response("Product updated successfully", product)


@router.delete("/api/products/{product_id}")
async def delete_product(product_id: str, user: User = Depends(get_current_user)):
    products.delete_product(user, product_id)
    return success_response("Product deleted successfully")
