# barbershop/routers/products_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Product, ProductCategory, User
from barbershop.schemas import (
    ProductCategoryCreate,
    ProductCategoryPublic,
    ProductCreate,
    ProductPublic,
    ProductUpdate,
)
from barbershop.auth import get_current_user
from barbershop.deps import require_admin

router = APIRouter(
    tags=["products"],
)


@router.get("/product-categories", response_model=List[ProductCategoryPublic])
def list_product_categories(session: Session = Depends(get_session)):
    return session.exec(select(ProductCategory).order_by(ProductCategory.id)).all()


@router.get("/product-categories/{category_id}", response_model=ProductCategoryPublic)
def get_product_category(category_id: int, session: Session = Depends(get_session)):
    category = session.get(ProductCategory, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("/product-categories", response_model=ProductCategoryPublic, status_code=201)
def create_product_category(
    data: ProductCategoryCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    category = ProductCategory(**data.model_dump())
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.get("/products", response_model=List[ProductPublic])
def list_products(
    category_id: Optional[int] = None,
    in_stock: Optional[bool] = None,
    session: Session = Depends(get_session),
):
    stmt = select(Product)
    if category_id is not None:
        stmt = stmt.where(Product.category_id == category_id)
    if in_stock is not None:
        stmt = stmt.where(Product.in_stock == in_stock)
    return session.exec(stmt.order_by(Product.id)).all()


@router.get("/products/{product_id}", response_model=ProductPublic)
def get_product(product_id: int, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/products", response_model=ProductPublic, status_code=201)
def create_product(
    data: ProductCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    if session.get(ProductCategory, data.category_id) is None:
        raise HTTPException(status_code=422, detail="Category not found")

    product = Product(**data.model_dump(), in_stock=data.stock_quantity > 0)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@router.put("/products/{product_id}", response_model=ProductPublic)
def update_product(
    product_id: int,
    data: ProductUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    product = session.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes and session.get(ProductCategory, changes["category_id"]) is None:
        raise HTTPException(status_code=422, detail="Category not found")
    for key, value in changes.items():
        setattr(product, key, value)
    product.in_stock = product.stock_quantity > 0

    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_admin(current_user)
    product = session.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    session.delete(product)
    session.commit()
    return Response(status_code=204)
