# storefront/services/cart_service.py

import logging
from typing import List

from fastapi import status
from sqlmodel import Session, select

from storefront.core.exceptions.app_exception import AppHttpException
from storefront.models.cart_item import CartItem
from storefront.models.product import Product
from storefront.models.user import User


def get_cart_items(session: Session, user: User) -> List[CartItem]:
    statement = select(CartItem).where(CartItem.user_id == user.id).order_by(CartItem.created_at, CartItem.id)
    return list(session.exec(statement).all())


def get_cart_total(session: Session, user: User) -> float:
    return round(sum(item.subtotal for item in get_cart_items(session, user)), 2)


def get_cart_item_count(session: Session, user: User) -> int:
    return sum(item.quantity for item in get_cart_items(session, user))


def _get_owned_item(session: Session, user: User, cart_item_id: int) -> CartItem:
    item = session.exec(
        select(CartItem).where(
            CartItem.id == cart_item_id,
            CartItem.user_id == user.id,
        )
    ).first()

    if not item:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in your cart")
    return item


def add_to_cart(session: Session, user: User, product_id: int, quantity: int = 1) -> CartItem:
    if quantity < 1:
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="Quantity must be at least 1")

    product = session.get(Product, product_id)
    if not product:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.user_id == user.id,
            CartItem.product_id == product_id,
        )
    ).first()

    # Stock must cover everything the cart will hold for this product
    requested = quantity + (existing_item.quantity if existing_item else 0)
    if not product.is_available(requested):
        raise AppHttpException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product not available or insufficient stock",
            solution=f"Only {product.stock_quantity} unit(s) of {product.name} are available",
        )

    if existing_item:
        existing_item.quantity = requested
        item = existing_item
    else:
        item = CartItem(user_id=user.id, product_id=product.id, quantity=quantity)

    session.add(item)
    session.commit()
    session.refresh(item)

    logging.info(f"CART >>> {user.username} added {quantity}x product {product.id} (line total {item.quantity})")
    return item


def update_cart_item(session: Session, user: User, cart_item_id: int, quantity: int) -> None:
    item = _get_owned_item(session, user, cart_item_id)

    if quantity <= 0:
        session.delete(item)
        session.commit()
        logging.info(f"CART >>> {user.username} removed item {cart_item_id} by setting quantity {quantity}")
        return

    if not item.product.is_available(quantity):
        raise AppHttpException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product not available or insufficient stock",
            solution=f"Only {item.product.stock_quantity} unit(s) of {item.product.name} are available",
        )

    item.quantity = quantity
    session.add(item)
    session.commit()


def remove_from_cart(session: Session, user: User, cart_item_id: int) -> None:
    item = _get_owned_item(session, user, cart_item_id)
    session.delete(item)
    session.commit()
    logging.info(f"CART >>> {user.username} removed item {cart_item_id}")


def clear_cart(session: Session, user: User, commit: bool = True) -> None:
    for item in get_cart_items(session, user):
        session.delete(item)
    if commit:
        session.commit()
