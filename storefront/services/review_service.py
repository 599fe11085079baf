# storefront/services/review_service.py

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import status
from sqlalchemy import func
from sqlmodel import Session, select

from storefront.configuration.settings import Configuration
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.enums.order_status import PURCHASED_STATUSES
from storefront.helpers.pagination import Page, normalize_paging, paginate
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.product import Product
from storefront.models.review import Review
from storefront.models.user import User
from storefront.schemas.review import ReviewCreate, ReviewStats, ReviewUpdate

configuration = Configuration()


def has_purchased_product(session: Session, user: User, product: Product) -> bool:
    statement = (
        select(Order.id)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .where(
            Order.user_id == user.id,
            OrderItem.product_id == product.id,
            Order.status.in_(PURCHASED_STATUSES),
        )
        .limit(1)
    )
    return session.exec(statement).first() is not None


def can_user_review_product(session: Session, product: Product, user: User) -> bool:
    return has_purchased_product(session, user, product)


def get_user_review_for_product(session: Session, product: Product, user: User) -> Optional[Review]:
    return session.exec(
        select(Review).where(Review.product_id == product.id, Review.user_id == user.id)
    ).first()


def has_user_reviewed_product(session: Session, product: Product, user: User) -> bool:
    return get_user_review_for_product(session, product, user) is not None


def add_review(session: Session, product: Product, user: User, data: ReviewCreate) -> Review:
    if has_user_reviewed_product(session, product, user):
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="You have already reviewed this product")

    review = Review(
        product_id=product.id,
        user_id=user.id,
        rating=data.rating,
        review_text=data.review_text,
        verified_purchase=has_purchased_product(session, user, product),
    )
    session.add(review)
    session.commit()
    session.refresh(review)

    logging.info(f"REVIEW >>> {user.username} rated product {product.id} with {review.rating} (verified={review.verified_purchase})")
    return review


def get_review_or_404(session: Session, review_id: int) -> Review:
    review = session.get(Review, review_id)
    if not review:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    return review


def update_review(session: Session, review_id: int, data: ReviewUpdate, user: User) -> Review:
    review = get_review_or_404(session, review_id)

    if review.user_id != user.id:
        raise AppHttpException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only update your own reviews")

    review.rating = data.rating
    review.review_text = data.review_text
    review.updated_at = datetime.now(timezone.utc)
    session.add(review)
    session.commit()
    session.refresh(review)
    return review


def delete_review(session: Session, review_id: int, user: User) -> None:
    review = get_review_or_404(session, review_id)

    if review.user_id != user.id and not user.is_admin:
        raise AppHttpException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own reviews")

    session.delete(review)
    session.commit()
    logging.info(f"REVIEW >>> Review {review_id} deleted by {user.username}")


def _product_reviews_statement(product: Product):
    return (
        select(Review)
        .where(Review.product_id == product.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )


def get_product_reviews(session: Session, product: Product) -> List[Review]:
    return list(session.exec(_product_reviews_statement(product)).all())


def get_product_reviews_page(session: Session, product: Product, page: int = 0, size: Optional[int] = None) -> Page[Review]:
    page, size = normalize_paging(page, size, configuration.products_page_size)
    return paginate(session, _product_reviews_statement(product), page, size)


def get_user_reviews(session: Session, user: User) -> List[Review]:
    statement = select(Review).where(Review.user_id == user.id).order_by(Review.created_at.desc(), Review.id.desc())
    return list(session.exec(statement).all())


def get_average_rating(session: Session, product: Product) -> float:
    average = session.exec(select(func.avg(Review.rating)).where(Review.product_id == product.id)).one()
    return round(float(average), 1) if average is not None else 0.0


def get_review_count(session: Session, product: Product) -> int:
    return session.exec(select(func.count(Review.id)).where(Review.product_id == product.id)).one()


def get_review_stats(session: Session, product: Product) -> ReviewStats:
    rows = session.exec(
        select(Review.rating, func.count(Review.id))
        .where(Review.product_id == product.id)
        .group_by(Review.rating)
    ).all()

    stats = ReviewStats(
        total_reviews=get_review_count(session, product),
        average_rating=get_average_rating(session, product),
    )
    for rating, count in rows:
        stats.rating_counts[rating] = count
    return stats


def mark_review_helpful(session: Session, review_id: int) -> Review:
    review = get_review_or_404(session, review_id)
    review.helpful_count += 1
    session.add(review)
    session.commit()
    session.refresh(review)
    return review
