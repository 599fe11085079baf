# storefront/routes/order.py

from fastapi import APIRouter, Depends, Form, Request
from pydantic import ValidationError
from sqlmodel import Session

from storefront.auth.auth import get_current_user
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.templates import redirect, render
from storefront.database.connection import get_session
from storefront.models.user import User
from storefront.schemas.order import CheckoutRequest
from storefront.services import cart_service, order_service

db_session = get_session


class OrderRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/orders/checkout", self.checkout_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/orders/checkout", self.process_checkout, methods=["POST"], include_in_schema=False)
        self.add_api_route("/orders", self.order_history, methods=["GET"], include_in_schema=False)
        self.add_api_route("/orders/{order_id}", self.order_detail, methods=["GET"], include_in_schema=False)

    def checkout_page(self, request: Request, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        cart_items = cart_service.get_cart_items(session, current_user)
        if not cart_items:
            return redirect("/cart", error="Your cart is empty")

        return render(request, "checkout.html", {
            "cart_items": cart_items,
            "total": cart_service.get_cart_total(session, current_user),
            "user": current_user,
        })

    def process_checkout(
        self,
        shipping_address: str = Form(""),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        try:
            data = CheckoutRequest(shipping_address=shipping_address)
            order = order_service.create_order_from_cart(session, current_user, data.shipping_address)
        except ValidationError:
            return redirect("/orders/checkout", error="Please enter a valid shipping address (up to 500 characters)")
        except AppHttpException as e:
            return redirect("/orders/checkout", error=e.detail)

        return redirect(f"/payment/process/{order.id}", success="Order created successfully! Please complete payment.")

    def order_history(self, request: Request, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        return render(request, "order_history.html", {
            "orders": order_service.get_user_orders(session, current_user),
        })

    def order_detail(self, request: Request, order_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        order = order_service.get_order_by_id(session, order_id)
        if not order or order.user_id != current_user.id:
            return redirect("/orders", error="Order not found")

        return render(request, "order_detail.html", {
            "order": order,
            "payment": order.latest_payment,
        })
