# storefront/routes/payment.py

import logging
from fastapi import APIRouter, Depends, Form, Request
from pydantic import ValidationError
from sqlmodel import Session

from storefront.auth.auth import get_current_user
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.templates import redirect, render
from storefront.database.connection import get_session
from storefront.enums.order_status import OrderStatus
from storefront.enums.payment_method import PaymentMethod
from storefront.enums.payment_status import PaymentStatus
from storefront.models.user import User
from storefront.schemas.payment import PaymentRequest
from storefront.services import order_service, payment_service

db_session = get_session


class PaymentRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/payment/process/{order_id}", self.payment_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/payment/process/{order_id}", self.process_payment, methods=["POST"], include_in_schema=False)
        self.add_api_route("/payment/status/{transaction_id}", self.payment_status, methods=["GET"], include_in_schema=False)

    def payment_page(self, request: Request, order_id: int, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        order = order_service.get_order_by_id(session, order_id)
        if not order or order.user_id != current_user.id:
            return redirect("/orders", error="Order not found")

        if order.status != OrderStatus.PENDING:
            return redirect(f"/orders/{order.id}", error="This order has already been processed")

        return render(request, "payment.html", {
            "order": order,
            "payment_methods": list(PaymentMethod),
            "last_payment": order.latest_payment,
        })

    def process_payment(
        self,
        order_id: int,
        payment_method: str = Form(...),
        payment_details: str = Form(""),
        session: Session = Depends(db_session),
        current_user: User = Depends(get_current_user),
    ):
        try:
            data = PaymentRequest(payment_method=payment_method, payment_details=payment_details.strip())
        except ValidationError:
            return redirect(f"/payment/process/{order_id}", error="Please select a valid payment method and enter the payment details")

        try:
            payment = payment_service.pay_order(session, current_user, order_id, data.payment_method, data.payment_details)
        except AppHttpException as e:
            logging.warning(f"PAYMENT >>> Payment for order {order_id} rejected: {e.detail}")
            return redirect(f"/payment/process/{order_id}", error=e.detail)

        if payment.payment_status == PaymentStatus.COMPLETED:
            return redirect(f"/payment/status/{payment.transaction_id}", success="Payment processed successfully!")
        return redirect(f"/payment/status/{payment.transaction_id}", error=f"Payment failed: {payment.gateway_response}")

    def payment_status(self, request: Request, transaction_id: str, session: Session = Depends(db_session), current_user: User = Depends(get_current_user)):
        payment = payment_service.get_payment_by_transaction_id(session, transaction_id)
        if not payment or (payment.order.user_id != current_user.id and not current_user.is_admin):
            return redirect("/orders", error="Payment not found")

        return render(request, "payment_status.html", {
            "payment": payment,
            "order": payment.order,
        })
