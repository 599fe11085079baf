# storefront/routes/product.py

from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from storefront.auth.auth import get_optional_user
from storefront.core.templates import redirect, render
from storefront.database.connection import get_session
from storefront.enums.product_category import ProductCategory
from storefront.models.user import User
from storefront.services import product_service, review_service

db_session = get_session


def parse_category(value: Optional[str]) -> Optional[ProductCategory]:
    if not value:
        return None
    try:
        return ProductCategory(value.strip().upper())
    except ValueError:
        return None


class ProductRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/products", self.list_products, methods=["GET"], include_in_schema=False)
        self.add_api_route("/products/{product_id}", self.product_detail, methods=["GET"], include_in_schema=False)

    def list_products(
        self,
        request: Request,
        category: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 0,
        size: Optional[int] = None,
        sort_by: str = "name",
        sort_dir: str = "asc",
        session: Session = Depends(db_session),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        selected_category = parse_category(category)
        keyword = search.strip() if search else None

        if keyword:
            product_page = product_service.search_products(session, keyword, page, size, sort_by, sort_dir)
        elif selected_category:
            product_page = product_service.get_products_by_category(session, selected_category, page, size, sort_by, sort_dir)
        else:
            product_page = product_service.get_all_active_products(session, page, size, sort_by, sort_dir)

        return render(request, "products.html", {
            "product_page": product_page,
            "products": product_page.items,
            "search_keyword": keyword,
            "selected_category": None if keyword else selected_category,
            "sort_by": sort_by if sort_by in product_service.SORTABLE_FIELDS else product_service.DEFAULT_SORT,
            "sort_dir": "desc" if sort_dir.lower() == "desc" else "asc",
        })

    def product_detail(
        self,
        request: Request,
        product_id: int,
        session: Session = Depends(db_session),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        product = product_service.get_product_by_id(session, product_id)
        if not product or (not product.is_active and not (current_user and current_user.is_admin)):
            return redirect("/products", error="Product not found")

        context = {
            "product": product,
            "reviews": review_service.get_product_reviews(session, product),
            "review_stats": review_service.get_review_stats(session, product),
            "can_review": False,
            "has_reviewed": False,
            "user_review": None,
        }

        if current_user:
            user_review = review_service.get_user_review_for_product(session, product, current_user)
            context.update({
                "can_review": review_service.can_user_review_product(session, product, current_user),
                "has_reviewed": user_review is not None,
                "user_review": user_review,
            })

        return render(request, "product_detail.html", context)
