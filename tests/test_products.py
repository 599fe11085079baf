import pytest
from sqlmodel import Session

from storefront.core.exceptions.app_exception import AppHttpException
from storefront.enums.product_category import ProductCategory
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services import product_service
from tests.conftest import make_product


def seed_catalog(session: Session):
    make_product(session, "Gaming Laptop", price=1299.99, stock=10)
    make_product(session, "Smartphone Pro", price=899.99, stock=25)
    make_product(session, "Cotton T-Shirt", price=29.99, stock=0, category=ProductCategory.CLOTHING)
    make_product(session, "Coffee Maker", price=89.99, stock=20, category=ProductCategory.HOME)
    make_product(session, "Retired Lamp", price=45.99, stock=5, category=ProductCategory.HOME, is_active=False)


class TestProductQueries:
    def test_active_products_are_sorted_by_name_by_default(self, session: Session):
        seed_catalog(session)
        page = product_service.get_all_active_products(session)
        assert [p.name for p in page.items] == ["Coffee Maker", "Cotton T-Shirt", "Gaming Laptop", "Smartphone Pro"]
        assert page.total == 4
        assert page.page == 0

    def test_sort_by_price_descending(self, session: Session):
        seed_catalog(session)
        page = product_service.get_all_active_products(session, sort_by="price", sort_dir="desc")
        assert page.items[0].name == "Gaming Laptop"
        assert page.items[-1].name == "Cotton T-Shirt"

    def test_unknown_sort_field_falls_back_to_name(self, session: Session):
        seed_catalog(session)
        page = product_service.get_all_active_products(session, sort_by="password_hash")
        assert page.items[0].name == "Coffee Maker"

    def test_pagination_slices_results(self, session: Session):
        seed_catalog(session)
        page = product_service.get_all_active_products(session, page=1, size=3)
        assert [p.name for p in page.items] == ["Smartphone Pro"]
        assert page.total_pages == 2
        assert page.has_previous
        assert not page.has_next

    def test_category_filter_excludes_inactive(self, session: Session):
        seed_catalog(session)
        page = product_service.get_products_by_category(session, ProductCategory.HOME)
        assert [p.name for p in page.items] == ["Coffee Maker"]

    def test_search_matches_name_and_description_ignoring_case(self, session: Session):
        seed_catalog(session)
        assert [p.name for p in product_service.search_products(session, "LAPTOP").items] == ["Gaming Laptop"]
        # every fixture description ends in "description"
        assert product_service.search_products(session, "description").total == 4

    def test_admin_listing_includes_inactive(self, session: Session):
        seed_catalog(session)
        page = product_service.get_all_products_including_inactive(session, search="lamp")
        assert [p.name for p in page.items] == ["Retired Lamp"]

    def test_in_stock_products(self, session: Session):
        seed_catalog(session)
        names = [p.name for p in product_service.get_in_stock_products(session)]
        assert "Cotton T-Shirt" not in names


class TestProductMutations:
    def test_create_and_update_product(self, session: Session):
        product = product_service.create_product(session, ProductCreate(
            name="Desk", price=199.0, stock_quantity=3, category=ProductCategory.HOME,
        ))
        assert product.id is not None
        assert product.updated_at is None

        updated = product_service.update_product(session, product.id, ProductUpdate(price=149.5))
        assert updated.price == 149.5
        assert updated.name == "Desk"
        assert updated.updated_at is not None

    def test_delete_is_soft(self, session: Session, product):
        product_service.delete_product(session, product.id)
        assert product_service.get_product_by_id(session, product.id) is not None
        assert product_service.get_product_by_id(session, product.id).is_active is False

    def test_toggle_status(self, session: Session, product):
        assert product_service.toggle_product_status(session, product.id).is_active is False
        assert product_service.toggle_product_status(session, product.id).is_active is True

    def test_negative_stock_is_rejected(self, session: Session, product):
        with pytest.raises(AppHttpException) as exc_info:
            product_service.update_stock(session, product.id, -1)
        assert exc_info.value.status_code == 400

    def test_missing_product_is_404(self, session: Session):
        with pytest.raises(AppHttpException) as exc_info:
            product_service.get_product_or_404(session, 999)
        assert exc_info.value.status_code == 404


class TestProductPages:
    def test_home_redirects_to_products(self, client):
        response = client.get("/", follow_redirects=False)
        assert response.headers["location"] == "/products"

    def test_products_page_lists_active_products(self, client, session: Session):
        seed_catalog(session)
        response = client.get("/products")
        assert response.status_code == 200
        assert "Gaming Laptop" in response.text
        assert "Retired Lamp" not in response.text

    def test_products_page_filters_by_category(self, client, session: Session):
        seed_catalog(session)
        response = client.get("/products", params={"category": "home"})
        assert "Coffee Maker" in response.text
        assert "Gaming Laptop" not in response.text

    def test_search_wins_over_category(self, client, session: Session):
        seed_catalog(session)
        response = client.get("/products", params={"category": "HOME", "search": "smartphone"})
        assert "Smartphone Pro" in response.text
        assert "Coffee Maker" not in response.text

    def test_unknown_category_shows_everything(self, client, session: Session):
        seed_catalog(session)
        response = client.get("/products", params={"category": "TOYS"})
        assert response.status_code == 200
        assert "Gaming Laptop" in response.text

    def test_product_detail(self, client, product):
        response = client.get(f"/products/{product.id}")
        assert response.status_code == 200
        assert product.name in response.text
        assert "No reviews yet" in response.text

    def test_missing_product_redirects_with_error(self, client):
        response = client.get("/products/999", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"].startswith("/products?error=")

    def test_inactive_product_is_hidden_from_customers(self, client, session: Session):
        hidden = make_product(session, "Hidden", is_active=False)
        response = client.get(f"/products/{hidden.id}", follow_redirects=False)
        assert response.status_code == 303

    def test_flash_message_is_rendered(self, client):
        response = client.get("/products", params={"success": "Saved!"})
        assert "Saved!" in response.text
