import logging
from sqlmodel import Session, select

from storefront.enums.product_category import ProductCategory
from storefront.enums.user_role import UserRole
from storefront.models import Product, User
from storefront.services.user_service import hash_password

DEFAULT_PASSWORD = "password"


def populate_database(session: Session):
    """Seeds the demo catalog and the two default accounts."""
    populate_products(session)
    populate_admin_user(session)
    populate_test_user(session)


def populate_products(session: Session):
    existing_product = session.exec(select(Product)).first()
    if existing_product:
        return

    products = [
        Product(
            name="Gaming Laptop",
            description="High-performance laptop for gaming and professional work",
            price=1299.99,
            stock_quantity=10,
            category=ProductCategory.ELECTRONICS,
            image_url="/static/images/laptop.jpg",
        ),
        Product(
            name="Smartphone Pro",
            description="Latest smartphone with advanced camera and long battery life",
            price=899.99,
            stock_quantity=25,
            category=ProductCategory.ELECTRONICS,
            image_url="/static/images/smartphone.jpg",
        ),
        Product(
            name="Wireless Headphones",
            description="Noise-cancelling wireless headphones with premium sound",
            price=199.99,
            stock_quantity=50,
            category=ProductCategory.ELECTRONICS,
            image_url="/static/images/headphones.jpg",
        ),
        Product(
            name="Cotton T-Shirt",
            description="Comfortable 100% cotton t-shirt in various colors",
            price=29.99,
            stock_quantity=100,
            category=ProductCategory.CLOTHING,
            image_url="/static/images/tshirt.jpg",
        ),
        Product(
            name="Classic Jeans",
            description="Classic fit denim jeans, durable and stylish",
            price=79.99,
            stock_quantity=75,
            category=ProductCategory.CLOTHING,
            image_url="/static/images/jeans.jpg",
        ),
        Product(
            name="Java Programming Guide",
            description="Comprehensive guide to Java programming for all levels",
            price=49.99,
            stock_quantity=30,
            category=ProductCategory.BOOKS,
            image_url="/static/images/java-book.jpg",
        ),
        Product(
            name="Web Development Handbook",
            description="Modern web development techniques and best practices",
            price=39.99,
            stock_quantity=40,
            category=ProductCategory.BOOKS,
            image_url="/static/images/web-book.jpg",
        ),
        Product(
            name="Coffee Maker",
            description="Programmable coffee maker with thermal carafe",
            price=89.99,
            stock_quantity=20,
            category=ProductCategory.HOME,
            image_url="/static/images/coffee-maker.jpg",
        ),
        Product(
            name="LED Desk Lamp",
            description="Adjustable LED desk lamp with USB charging port",
            price=45.99,
            stock_quantity=35,
            category=ProductCategory.HOME,
            image_url="/static/images/desk-lamp.jpg",
        ),
        Product(
            name="Professional Basketball",
            description="Official size and weight basketball for indoor and outdoor play",
            price=24.99,
            stock_quantity=60,
            category=ProductCategory.SPORTS,
            image_url="/static/images/basketball.jpg",
        ),
    ]

    session.add_all(products)
    session.commit()
    logging.info(f"DATABASE >>> {len(products)} products seeded")


def _populate_user(session: Session, username: str, email: str, first_name: str, last_name: str, role: UserRole):
    user = session.exec(select(User).where(User.username == username)).first()
    if user:
        return user

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(DEFAULT_PASSWORD),
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logging.info(f"DATABASE >>> Default user created: {username} ({role.value})")
    return user


def populate_admin_user(session: Session):
    return _populate_user(session, "admin", "admin@ecommerce.com", "Admin", "User", UserRole.ADMIN)


def populate_test_user(session: Session):
    return _populate_user(session, "testuser", "test@ecommerce.com", "Test", "User", UserRole.USER)
