# storefront/services/order_service.py

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import status
from sqlalchemy import func, update
from sqlmodel import Session, select

from storefront.configuration.settings import Configuration
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.enums.order_status import OrderStatus
from storefront.helpers.pagination import Page, normalize_paging, paginate
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services import cart_service

configuration = Configuration()


def _reserve_stock(session: Session, product: Product, quantity: int) -> None:
    # Conditional decrement: matches no row once the stock is gone
    statement = (
        update(Product)
        .where(
            Product.id == product.id,
            Product.is_active == True,  # noqa: E712
            Product.stock_quantity >= quantity,
        )
        .values(
            stock_quantity=Product.stock_quantity - quantity,
            updated_at=datetime.now(timezone.utc),
        )
    )
    result = session.connection().execute(statement)
    if result.rowcount != 1:
        raise AppHttpException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Product {product.name} is not available or insufficient stock",
        )


def create_order_from_cart(session: Session, user: User, shipping_address: str) -> Order:
    """Turns the user's cart into a PENDING order.

    Stock is checked and decremented, prices are copied onto the order lines
    and the cart is emptied, all in a single commit. Nothing is written when
    any line fails validation, including a line whose stock was taken by
    another checkout in the meantime.
    """
    shipping_address = (shipping_address or "").strip()
    if not shipping_address:
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="Shipping address is required")

    cart_items = cart_service.get_cart_items(session, user)
    if not cart_items:
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty")

    for cart_item in cart_items:
        product = cart_item.product
        if not product.is_available(cart_item.quantity):
            raise AppHttpException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product {product.name} is not available or insufficient stock",
            )

    try:
        order = Order(user_id=user.id, shipping_address=shipping_address, status=OrderStatus.PENDING)

        total_amount = 0.0
        for cart_item in cart_items:
            product = cart_item.product
            order_item = OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=cart_item.quantity,
                price=product.price,
            )
            order.items.append(order_item)
            total_amount += order_item.subtotal

            _reserve_stock(session, product, cart_item.quantity)

        order.total_amount = round(total_amount, 2)
        session.add(order)

        cart_service.clear_cart(session, user, commit=False)
        session.commit()
    except AppHttpException:
        session.rollback()
        logging.warning(f"ORDER >>> Checkout for {user.username} rejected: stock changed during checkout")
        raise
    except Exception:
        session.rollback()
        logging.error(f"ORDER >>> Checkout failed for {user.username}", exc_info=True)
        raise

    session.refresh(order)
    logging.info(f"ORDER >>> Order {order.code} created for {user.username}: {len(order.items)} line(s), total {order.total_amount}")
    return order


def get_user_orders(session: Session, user: User) -> List[Order]:
    statement = select(Order).where(Order.user_id == user.id).order_by(Order.order_date.desc(), Order.id.desc())
    return list(session.exec(statement).all())


def get_order_by_id(session: Session, order_id: int) -> Optional[Order]:
    return session.get(Order, order_id)


def get_order_or_404(session: Session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if not order:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


def get_user_order_or_404(session: Session, user: User, order_id: int) -> Order:
    order = get_order_or_404(session, order_id)
    if order.user_id != user.id:
        # Other users' orders read as missing
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


def get_user_order_for_update(session: Session, user: User, order_id: int) -> Order:
    """Owner lookup that row-locks the order and reloads its current state."""
    statement = (
        select(Order)
        .where(Order.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    order = session.exec(statement).first()
    if not order or order.user_id != user.id:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


def update_order_status(session: Session, order_id: int, new_status: OrderStatus, commit: bool = True) -> Order:
    order = get_order_or_404(session, order_id)
    previous = order.status
    order.status = new_status
    order.updated_at = datetime.now(timezone.utc)
    session.add(order)

    if commit:
        session.commit()
        session.refresh(order)

    logging.info(f"ORDER >>> Order {order.code} status {previous.value} -> {new_status.value}")
    return order


def _newest_first(statement):
    return statement.order_by(Order.order_date.desc(), Order.id.desc())


def get_orders_by_status(
    session: Session,
    order_status: OrderStatus,
    page: int = 0,
    size: Optional[int] = None,
) -> Page[Order]:
    page, size = normalize_paging(page, size, configuration.admin_page_size)
    statement = _newest_first(select(Order).where(Order.status == order_status))
    return paginate(session, statement, page, size)


def get_all_orders(session: Session, page: int = 0, size: Optional[int] = None) -> Page[Order]:
    page, size = normalize_paging(page, size, configuration.admin_page_size)
    return paginate(session, _newest_first(select(Order)), page, size)


def get_recent_orders(session: Session, limit: int = 5) -> List[Order]:
    return list(session.exec(_newest_first(select(Order)).limit(limit)).all())


def count_orders(session: Session, order_status: Optional[OrderStatus] = None) -> int:
    statement = select(func.count(Order.id))
    if order_status is not None:
        statement = statement.where(Order.status == order_status)
    return session.exec(statement).one()
