# storefront/routes/review.py

from typing import Optional
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from sqlmodel import Session

from storefront.auth.auth import get_current_user
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.templates import redirect, render
from storefront.database.connection import get_session
from storefront.models.review import Review
from storefront.models.user import User
from storefront.schemas.review import ReviewCreate, ReviewUpdate
from storefront.services import product_service, review_service

db_session = get_session


def validation_message(error: ValidationError) -> str:
    return "; ".join(f"{err['loc'][-1]}: {err['msg']}" for err in error.errors())


class ReviewRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/reviews/add/{product_id}", self.add_review_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/reviews/add/{product_id}", self.add_review, methods=["POST"], include_in_schema=False)
        self.add_api_route("/reviews/edit/{review_id}", self.edit_review_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/reviews/edit/{review_id}", self.edit_review, methods=["POST"], include_in_schema=False)
        self.add_api_route("/reviews/delete/{review_id}", self.delete_review, methods=["POST"], include_in_schema=False)
        self.add_api_route("/reviews/my-reviews", self.my_reviews, methods=["GET"], include_in_schema=False)
        self.add_api_route("/reviews/helpful/{review_id}", self.mark_helpful, methods=["POST"], include_in_schema=False)

    def add_review_page(self, request: Request, product_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        product = product_service.get_product_by_id(session, product_id)
        if not product or not product.is_active:
            return redirect("/products", error="Product not found")

        if review_service.has_user_reviewed_product(session, product, current_user):
            return redirect(f"/products/{product_id}", error="You have already reviewed this product")

        return render(request, "add_review.html", {
            "product": product,
            "can_review": review_service.can_user_review_product(session, product, current_user),
        })

    def add_review(
        self,
        product_id: int,
        rating: int = Form(...),
        review_text: Optional[str] = Form(None),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        product = product_service.get_product_by_id(session, product_id)
        if not product or not product.is_active:
            return redirect("/products", error="Product not found")

        try:
            data = ReviewCreate(rating=rating, review_text=review_text)
            review_service.add_review(session, product, current_user, data)
        except ValidationError as e:
            return redirect(f"/reviews/add/{product_id}", error=validation_message(e))
        except AppHttpException as e:
            return redirect(f"/products/{product_id}", error=e.detail)

        return redirect(f"/products/{product_id}", success="Review added successfully!")

    def edit_review_page(self, request: Request, review_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        review = session.get(Review, review_id)
        if not review or review.user_id != current_user.id:
            return redirect("/reviews/my-reviews", error="Review not found")

        return render(request, "edit_review.html", {
            "review": review,
            "product": review.product,
        })

    def edit_review(
        self,
        review_id: int,
        rating: int = Form(...),
        review_text: Optional[str] = Form(None),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        try:
            data = ReviewUpdate(rating=rating, review_text=review_text)
            review = review_service.update_review(session, review_id, data, current_user)
        except ValidationError as e:
            return redirect(f"/reviews/edit/{review_id}", error=validation_message(e))
        except AppHttpException as e:
            return redirect("/reviews/my-reviews", error=e.detail)

        return redirect(f"/products/{review.product_id}", success="Review updated successfully!")

    def delete_review(self, review_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        try:
            review = review_service.get_review_or_404(session, review_id)
            product_id = review.product_id
            review_service.delete_review(session, review_id, current_user)
        except AppHttpException as e:
            return redirect("/reviews/my-reviews", error=e.detail)

        return redirect(f"/products/{product_id}", success="Review deleted successfully!")

    def my_reviews(self, request: Request, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        return render(request, "my_reviews.html", {
            "reviews": review_service.get_user_reviews(session, current_user),
        })

    def mark_helpful(self, review_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        review = review_service.mark_review_helpful(session, review_id)
        return PlainTextResponse(str(review.helpful_count))
