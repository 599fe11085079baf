import os

# Must be set before the storefront package reads its configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["POPULATE_DATABASE"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from storefront import create_app
from storefront.auth.auth import TOKEN_COOKIE, auth_router
from storefront.database.connection import build_engine, create_tables, get_session
from storefront.enums.product_category import ProductCategory
from storefront.enums.user_role import UserRole
from storefront.models import Product, User
from storefront.services.user_service import hash_password

PASSWORD = "secret123"


@pytest.fixture(name="session")
def session_fixture():
    engine = build_engine("sqlite://")
    create_tables(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed database for tests that need more than one connection."""
    engine = build_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="app")
def app_fixture(session: Session):
    app = create_app()

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(name="client")
def client_fixture(app):
    return TestClient(app)


def make_user(session: Session, username: str, role: UserRole = UserRole.USER, is_active: bool = True) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(PASSWORD),
        first_name=username.capitalize(),
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_product(session: Session, name: str = "Widget", price: float = 10.0, stock: int = 10,
                 category: ProductCategory = ProductCategory.ELECTRONICS, is_active: bool = True) -> Product:
    product = Product(
        name=name,
        description=f"{name} description",
        price=price,
        stock_quantity=stock,
        category=category,
        is_active=is_active,
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def login(client: TestClient, user: User) -> TestClient:
    client.cookies.set(TOKEN_COOKIE, auth_router._generate_jwt(user.id))
    return client


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {auth_router._generate_jwt(user.id)}"}


@pytest.fixture
def user(session: Session) -> User:
    return make_user(session, "alice")


@pytest.fixture
def other_user(session: Session) -> User:
    return make_user(session, "bob")


@pytest.fixture
def admin(session: Session) -> User:
    return make_user(session, "admin", role=UserRole.ADMIN)


@pytest.fixture
def product(session: Session) -> Product:
    return make_product(session, "Gaming Laptop", price=1299.99, stock=10)


@pytest.fixture
def cheap_product(session: Session) -> Product:
    return make_product(session, "Cotton T-Shirt", price=29.99, stock=100, category=ProductCategory.CLOTHING)


@pytest.fixture
def user_client(client: TestClient, user: User) -> TestClient:
    return login(client, user)


@pytest.fixture
def admin_client(client: TestClient, admin: User) -> TestClient:
    return login(client, admin)
