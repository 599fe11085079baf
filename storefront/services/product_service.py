# storefront/services/product_service.py

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import status
from sqlalchemy import func
from sqlmodel import Session, or_, select

from storefront.configuration.settings import Configuration
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.enums.product_category import ProductCategory
from storefront.helpers.pagination import Page, normalize_paging, paginate, resolve_sort
from storefront.models.product import Product
from storefront.schemas.product import ProductCreate, ProductUpdate

configuration = Configuration()

SORTABLE_FIELDS = ("name", "price", "created_at", "stock_quantity")
DEFAULT_SORT = "name"


def _keyword_filter(keyword: str):
    pattern = f"%{keyword.strip().lower()}%"
    return or_(
        func.lower(Product.name).like(pattern),
        func.lower(func.coalesce(Product.description, "")).like(pattern),
    )


def _page(session: Session, statement, page, size, sort_by, sort_dir, default_size) -> Page[Product]:
    page, size = normalize_paging(page, size, default_size)
    order, _, _ = resolve_sort(Product, sort_by, sort_dir, SORTABLE_FIELDS, DEFAULT_SORT)
    return paginate(session, statement.order_by(order, Product.id), page, size)


def get_all_active_products(
    session: Session,
    page: int = 0,
    size: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = None,
) -> Page[Product]:
    statement = select(Product).where(Product.is_active == True)  # noqa: E712
    return _page(session, statement, page, size, sort_by, sort_dir, configuration.products_page_size)


def get_products_by_category(
    session: Session,
    category: ProductCategory,
    page: int = 0,
    size: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = None,
) -> Page[Product]:
    statement = select(Product).where(Product.is_active == True, Product.category == category)  # noqa: E712
    return _page(session, statement, page, size, sort_by, sort_dir, configuration.products_page_size)


def search_products(
    session: Session,
    keyword: str,
    page: int = 0,
    size: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = None,
) -> Page[Product]:
    """Active products whose name or description contains `keyword`, ignoring case."""
    statement = select(Product).where(Product.is_active == True, _keyword_filter(keyword))  # noqa: E712
    return _page(session, statement, page, size, sort_by, sort_dir, configuration.products_page_size)


def get_all_products_including_inactive(
    session: Session,
    page: int = 0,
    size: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = None,
    search: Optional[str] = None,
) -> Page[Product]:
    statement = select(Product)
    if search and search.strip():
        statement = statement.where(_keyword_filter(search))
    return _page(session, statement, page, size, sort_by, sort_dir, configuration.admin_page_size)


def list_active_products(session: Session, category: Optional[ProductCategory] = None, keyword: Optional[str] = None) -> List[Product]:
    """Unpaginated listing used by the JSON API. A keyword wins over a category."""
    statement = select(Product).where(Product.is_active == True)  # noqa: E712
    if keyword and keyword.strip():
        statement = statement.where(_keyword_filter(keyword))
    elif category is not None:
        statement = statement.where(Product.category == category)
    return list(session.exec(statement.order_by(Product.name, Product.id)).all())


def get_in_stock_products(session: Session) -> List[Product]:
    statement = select(Product).where(Product.stock_quantity > 0).order_by(Product.name)
    return list(session.exec(statement).all())


def get_product_by_id(session: Session, product_id: int) -> Optional[Product]:
    return session.get(Product, product_id)


def get_product_or_404(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if not product:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


def save_product(session: Session, product: Product) -> Product:
    if product.id is not None:
        product.updated_at = datetime.now(timezone.utc)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def create_product(session: Session, data: ProductCreate) -> Product:
    product = Product(**data.model_dump())
    product = save_product(session, product)
    logging.info(f"ADMIN >>> Product created: {product.id} - {product.name}")
    return product


def update_product(session: Session, product_id: int, data: ProductUpdate) -> Product:
    product = get_product_or_404(session, product_id)

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(product, key, value)

    product = save_product(session, product)
    logging.info(f"ADMIN >>> Product updated: {product.id} - {product.name}")
    return product


def delete_product(session: Session, product_id: int) -> Product:
    """Soft delete: the product stays referenced by orders and reviews."""
    product = get_product_or_404(session, product_id)
    product.is_active = False
    return save_product(session, product)


def toggle_product_status(session: Session, product_id: int) -> Product:
    product = get_product_or_404(session, product_id)
    product.is_active = not product.is_active
    product = save_product(session, product)
    logging.info(f"ADMIN >>> Product {product.id} is_active={product.is_active}")
    return product


def update_stock(session: Session, product_id: int, stock_quantity: int) -> Product:
    if stock_quantity < 0:
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="Stock quantity cannot be negative")

    product = get_product_or_404(session, product_id)
    product.stock_quantity = stock_quantity
    product = save_product(session, product)
    logging.info(f"ADMIN >>> Product {product.id} stock set to {stock_quantity}")
    return product


def count_active_products(session: Session) -> int:
    return session.exec(select(func.count(Product.id)).where(Product.is_active == True)).one()  # noqa: E712
