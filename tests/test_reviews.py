import pytest
from sqlmodel import Session

from storefront.core.exceptions.app_exception import AppHttpException
from storefront.enums.order_status import OrderStatus
from storefront.schemas.review import ReviewCreate, ReviewUpdate
from storefront.services import cart_service, order_service, review_service


def buy(session: Session, user, product, order_status=OrderStatus.CONFIRMED):
    cart_service.add_to_cart(session, user, product.id, 1)
    order = order_service.create_order_from_cart(session, user, "1 Main St")
    if order_status != OrderStatus.PENDING:
        order_service.update_order_status(session, order.id, order_status)
    return order


class TestReviewRules:
    def test_review_without_purchase_is_not_verified(self, session: Session, user, product):
        review = review_service.add_review(session, product, user, ReviewCreate(rating=4, review_text="Nice"))
        assert review.verified_purchase is False
        assert review.helpful_count == 0

    @pytest.mark.parametrize("order_status", [OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_confirmed_purchase_is_verified(self, session: Session, user, product, order_status):
        buy(session, user, product, order_status)
        assert review_service.can_user_review_product(session, product, user)
        review = review_service.add_review(session, product, user, ReviewCreate(rating=5))
        assert review.verified_purchase is True

    @pytest.mark.parametrize("order_status", [OrderStatus.PENDING, OrderStatus.CANCELLED])
    def test_unpaid_order_is_not_a_purchase(self, session: Session, user, product, order_status):
        buy(session, user, product, order_status)
        assert not review_service.has_purchased_product(session, user, product)

    def test_one_review_per_product(self, session: Session, user, product):
        review_service.add_review(session, product, user, ReviewCreate(rating=4))
        with pytest.raises(AppHttpException) as exc_info:
            review_service.add_review(session, product, user, ReviewCreate(rating=2))
        assert exc_info.value.detail == "You have already reviewed this product"

    def test_rating_bounds(self):
        with pytest.raises(ValueError):
            ReviewCreate(rating=0)
        with pytest.raises(ValueError):
            ReviewCreate(rating=6)
        with pytest.raises(ValueError):
            ReviewCreate(rating=3, review_text="x" * 1001)

    def test_blank_text_is_stored_as_none(self):
        assert ReviewCreate(rating=3, review_text="   ").review_text is None

    def test_only_owner_can_update(self, session: Session, user, other_user, product):
        review = review_service.add_review(session, product, user, ReviewCreate(rating=3))

        updated = review_service.update_review(session, review.id, ReviewUpdate(rating=5, review_text="Better"), user)
        assert updated.rating == 5
        assert updated.updated_at is not None

        with pytest.raises(AppHttpException) as exc_info:
            review_service.update_review(session, review.id, ReviewUpdate(rating=1), other_user)
        assert exc_info.value.status_code == 403

    def test_owner_or_admin_can_delete(self, session: Session, user, other_user, admin, product, cheap_product):
        review = review_service.add_review(session, product, user, ReviewCreate(rating=3))
        with pytest.raises(AppHttpException) as exc_info:
            review_service.delete_review(session, review.id, other_user)
        assert exc_info.value.status_code == 403

        review_service.delete_review(session, review.id, admin)
        assert review_service.get_review_count(session, product) == 0

        own = review_service.add_review(session, cheap_product, user, ReviewCreate(rating=2))
        review_service.delete_review(session, own.id, user)
        assert review_service.get_user_reviews(session, user) == []


class TestReviewStats:
    def test_average_and_breakdown(self, session: Session, user, other_user, admin, product):
        review_service.add_review(session, product, user, ReviewCreate(rating=5))
        review_service.add_review(session, product, other_user, ReviewCreate(rating=4))
        review_service.add_review(session, product, admin, ReviewCreate(rating=4))

        assert review_service.get_average_rating(session, product) == 4.3
        stats = review_service.get_review_stats(session, product)
        assert stats.total_reviews == 3
        assert stats.five_star_count == 1
        assert stats.four_star_count == 2
        assert stats.one_star_count == 0
        assert round(stats.percentage(stats.four_star_count), 1) == 66.7

    def test_no_reviews(self, session: Session, product):
        assert review_service.get_average_rating(session, product) == 0.0
        stats = review_service.get_review_stats(session, product)
        assert stats.total_reviews == 0
        assert stats.percentage(0) == 0.0

    def test_reviews_newest_first(self, session: Session, user, other_user, product):
        first = review_service.add_review(session, product, user, ReviewCreate(rating=1))
        second = review_service.add_review(session, product, other_user, ReviewCreate(rating=2))
        assert [r.id for r in review_service.get_product_reviews(session, product)] == [second.id, first.id]
        assert review_service.get_product_reviews_page(session, product, size=1).total_pages == 2

    def test_mark_helpful(self, session: Session, user, product):
        review = review_service.add_review(session, product, user, ReviewCreate(rating=3))
        review_service.mark_review_helpful(session, review.id)
        assert review_service.mark_review_helpful(session, review.id).helpful_count == 2


class TestReviewPages:
    def test_add_review_flow(self, user_client, session: Session, user, product):
        assert user_client.get(f"/reviews/add/{product.id}").status_code == 200

        response = user_client.post(
            f"/reviews/add/{product.id}",
            data={"rating": 5, "review_text": "Great laptop"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"].startswith(f"/products/{product.id}?success=")

        page = user_client.get(f"/products/{product.id}")
        assert "Great laptop" in page.text
        assert "Edit your review" in page.text

    def test_add_review_form_redirects_when_already_reviewed(self, user_client, session: Session, user, product):
        review_service.add_review(session, product, user, ReviewCreate(rating=4))
        response = user_client.get(f"/reviews/add/{product.id}", follow_redirects=False)
        assert response.headers["location"].startswith(f"/products/{product.id}?error=")

    def test_invalid_rating_redirects_back(self, user_client, product):
        response = user_client.post(f"/reviews/add/{product.id}", data={"rating": 9}, follow_redirects=False)
        assert response.headers["location"].startswith(f"/reviews/add/{product.id}?error=")

    def test_edit_review(self, user_client, session: Session, user, product):
        review = review_service.add_review(session, product, user, ReviewCreate(rating=2))
        assert user_client.get(f"/reviews/edit/{review.id}").status_code == 200

        user_client.post(f"/reviews/edit/{review.id}", data={"rating": 4, "review_text": "Grew on me"})
        session.refresh(review)
        assert review.rating == 4
        assert review.review_text == "Grew on me"

    def test_cannot_edit_someone_elses_review(self, user_client, session: Session, other_user, product):
        review = review_service.add_review(session, product, other_user, ReviewCreate(rating=2))
        response = user_client.get(f"/reviews/edit/{review.id}", follow_redirects=False)
        assert response.headers["location"].startswith("/reviews/my-reviews?error=")

    def test_delete_review(self, user_client, session: Session, user, product):
        review = review_service.add_review(session, product, user, ReviewCreate(rating=2))
        response = user_client.post(f"/reviews/delete/{review.id}", follow_redirects=False)
        assert response.headers["location"].startswith(f"/products/{product.id}?success=")
        assert review_service.get_review_count(session, product) == 0

    def test_my_reviews(self, user_client, session: Session, user, product):
        review_service.add_review(session, product, user, ReviewCreate(rating=3, review_text="Solid"))
        response = user_client.get("/reviews/my-reviews")
        assert "Solid" in response.text
        assert product.name in response.text

    def test_helpful_returns_plain_count(self, user_client, session: Session, other_user, product):
        review = review_service.add_review(session, product, other_user, ReviewCreate(rating=3))
        response = user_client.post(f"/reviews/helpful/{review.id}")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "1"

    def test_verified_badge_is_shown(self, user_client, session: Session, user, product):
        buy(session, user, product)
        review_service.add_review(session, product, user, ReviewCreate(rating=5))
        response = user_client.get(f"/products/{product.id}")
        assert "Verified purchase" in response.text
