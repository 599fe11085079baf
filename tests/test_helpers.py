from datetime import datetime

import pytest
from sqlmodel import Session, select

from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.templates import redirect, safe_next
from storefront.database.populate import populate_database
from storefront.enums.user_role import UserRole
from storefront.helpers.formatters import format_currency, format_date
from storefront.helpers.pagination import Page, normalize_paging
from storefront.helpers.payment_masking import detect_card_type, last_four, mask_account, mask_email
from storefront.models import Product, User
from storefront.models.order import generate_order_code
from storefront.services import user_service


class TestPaymentMasking:
    @pytest.mark.parametrize("account, expected", [
        ("1234567890", "******7890"),
        ("12345", "*2345"),
        ("1234", "1234"),
        ("", ""),
        (None, None),
    ])
    def test_mask_account(self, account, expected):
        assert mask_account(account) == expected

    def test_mask_email(self):
        assert mask_email("john.doe@example.com") == "jo******@example.com"
        assert mask_email("jd@example.com") == "jd@example.com"
        assert mask_email("not-an-email") == "not-an-email"

    @pytest.mark.parametrize("number, brand", [
        ("4111 1111 1111 1111", "Visa"),
        ("5500000000000004", "Mastercard"),
        ("2221000000000009", "Mastercard"),
        ("378282246310005", "American Express"),
        ("6011111111111117", "Discover"),
        ("9999", "Unknown"),
        ("", "Unknown"),
    ])
    def test_detect_card_type(self, number, brand):
        assert detect_card_type(number) == brand

    def test_last_four_ignores_separators(self):
        assert last_four("4111-1111-1111-1234") == "1234"


class TestPagination:
    def test_page_window(self):
        page = Page(items=[], page=5, size=10, total=95)
        assert page.total_pages == 10
        assert (page.start_page, page.end_page) == (3, 7)
        assert page.has_previous and page.has_next

    def test_window_is_clamped(self):
        page = Page(items=[], page=0, size=10, total=15)
        assert (page.start_page, page.end_page) == (0, 1)
        assert not page.has_previous

    def test_empty_page(self):
        page = Page(items=[], page=0, size=10, total=0)
        assert page.total_pages == 0
        assert page.end_page == 0
        assert not page.has_next

    def test_normalize_paging(self):
        assert normalize_paging(None, None, 12) == (0, 12)
        assert normalize_paging(-3, 0, 12) == (0, 12)
        assert normalize_paging(2, 10_000, 12) == (2, 100)
        assert normalize_paging(1, -5, 12) == (1, 1)


class TestFormatting:
    def test_currency(self):
        assert format_currency(1299.99) == "$1,299.99"
        assert format_currency(None) == "$0.00"

    def test_date(self):
        assert format_date(datetime(2024, 3, 5, 14, 30)) == "Mar 5, 2024 14:30"
        assert format_date(None) == ""


class TestNavigationHelpers:
    @pytest.mark.parametrize("url, expected", [
        ("/cart", "/cart"),
        ("/orders?page=2", "/orders?page=2"),
        ("https://evil.example.com", "/products"),
        ("//evil.example.com", "/products"),
        ("cart", "/products"),
        (None, "/products"),
    ])
    def test_safe_next(self, url, expected):
        assert safe_next(url) == expected

    def test_redirect_encodes_flash(self):
        response = redirect("/cart?x=1", error="Out of stock")
        assert response.status_code == 303
        assert response.headers["location"] == "/cart?x=1&error=Out+of+stock"

    def test_order_code(self):
        code = generate_order_code()
        assert len(code) == 10
        assert code == code.upper()
        assert code != generate_order_code()


class TestSeedData:
    def test_populate_seeds_catalog_and_accounts(self, session: Session):
        populate_database(session)

        products = session.exec(select(Product)).all()
        assert len(products) == 10
        assert len({p.category for p in products}) == 5

        admin = user_service.find_by_username(session, "admin")
        assert admin.role == UserRole.ADMIN
        assert user_service.verify_password("password", admin.password_hash)
        assert user_service.find_by_username(session, "testuser").role == UserRole.USER

    def test_populate_is_idempotent(self, session: Session):
        populate_database(session)
        populate_database(session)
        assert len(session.exec(select(Product)).all()) == 10
        assert len(session.exec(select(User)).all()) == 2


class TestAppHttpException:
    def test_content_includes_solution_only_when_set(self):
        assert AppHttpException(404, "Product not found").content == {"detail": "Product not found"}
        error = AppHttpException(400, "Unknown category", solution="Use one of: BOOKS")
        assert error.content == {"detail": "Unknown category", "solution": "Use one of: BOOKS"}

    def test_invalid_request_carries_field_errors(self):
        errors = [{"loc": ["body", "rating"], "msg": "Input should be less than or equal to 5"}]
        error = AppHttpException.invalid_request(errors)
        assert error.status_code == 422
        assert error.content == {"detail": "Invalid request", "errors": errors}
        assert error.fields == ["rating"]
