# storefront/routes/cart.py

from fastapi import APIRouter, Depends, Form, Request
from sqlmodel import Session

from storefront.auth.auth import get_current_user
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.templates import redirect, render
from storefront.database.connection import get_session
from storefront.models.user import User
from storefront.services import cart_service

db_session = get_session


class CartRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/cart", self.view_cart, methods=["GET"], include_in_schema=False)
        self.add_api_route("/cart/add", self.add_to_cart, methods=["POST"], include_in_schema=False)
        self.add_api_route("/cart/update", self.update_cart_item, methods=["POST"], include_in_schema=False)
        self.add_api_route("/cart/remove", self.remove_from_cart, methods=["POST"], include_in_schema=False)
        self.add_api_route("/cart/clear", self.clear_cart, methods=["POST"], include_in_schema=False)

    def view_cart(self, request: Request, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        return render(request, "cart.html", {
            "cart_items": cart_service.get_cart_items(session, current_user),
            "total": cart_service.get_cart_total(session, current_user),
        })

    def add_to_cart(
        self,
        product_id: int = Form(...),
        quantity: int = Form(1),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        try:
            cart_service.add_to_cart(session, current_user, product_id, quantity)
        except AppHttpException as e:
            return redirect(f"/products/{product_id}", error=e.detail)
        return redirect(f"/products/{product_id}", success="Product added to cart successfully")

    def update_cart_item(
        self,
        cart_item_id: int = Form(...),
        quantity: int = Form(...),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        try:
            cart_service.update_cart_item(session, current_user, cart_item_id, quantity)
        except AppHttpException as e:
            return redirect("/cart", error=e.detail)
        return redirect("/cart", success="Cart updated successfully")

    def remove_from_cart(
        self,
        cart_item_id: int = Form(...),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        try:
            cart_service.remove_from_cart(session, current_user, cart_item_id)
        except AppHttpException as e:
            return redirect("/cart", error=e.detail)
        return redirect("/cart", success="Item removed from cart")

    def clear_cart(self, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        cart_service.clear_cart(session, current_user)
        return redirect("/cart", success="Cart cleared successfully")
