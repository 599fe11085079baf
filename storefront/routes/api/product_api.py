# storefront/routes/api/product_api.py

from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.exceptions.app_exception import AppHttpException
from storefront.database.connection import get_session
from storefront.enums.product_category import ProductCategory
from storefront.schemas.product import CategoryResponse, ProductResponse
from storefront.services import product_service

db_session = get_session


def category_or_400(value: str) -> ProductCategory:
    try:
        return ProductCategory(value.strip().upper())
    except ValueError:
        raise AppHttpException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown category: {value}",
            solution="Use one of: " + ", ".join(category.value for category in ProductCategory),
        )


class ProductApiRouter(APIRouter):
    """Read-only JSON view of the active catalog."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, prefix="/api/products", tags=["products"], **kwargs)
        self.add_api_route("", self.list_products, methods=["GET"], response_model=List[ProductResponse])
        self.add_api_route("/categories", self.list_categories, methods=["GET"], response_model=List[CategoryResponse])
        self.add_api_route("/search", self.search_products, methods=["GET"], response_model=List[ProductResponse])
        self.add_api_route("/category/{category}", self.products_by_category, methods=["GET"], response_model=List[ProductResponse])
        self.add_api_route("/{product_id}", self.get_product, methods=["GET"], response_model=ProductResponse)

    def list_products(self, category: Optional[str] = None, search: Optional[str] = None, session: Session = Depends(db_session)):
        keyword = search.strip() if search else None
        selected_category = category_or_400(category) if category and not keyword else None
        return product_service.list_active_products(session, category=selected_category, keyword=keyword)

    def list_categories(self):
        return [CategoryResponse(name=category.value, display_name=category.display_name) for category in ProductCategory]

    def search_products(self, keyword: str, session: Session = Depends(db_session)):
        return product_service.list_active_products(session, keyword=keyword.strip() or None)

    def products_by_category(self, category: str, session: Session = Depends(db_session)):
        return product_service.list_active_products(session, category=category_or_400(category))

    def get_product(self, product_id: int, session: Session = Depends(db_session)):
        product = product_service.get_product_by_id(session, product_id)
        if not product or not product.is_active:
            raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
        return product
