# storefront/services/payment_service.py

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import status
from sqlalchemy import func
from sqlmodel import Session, select

from storefront.configuration.settings import Configuration
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.enums.order_status import OrderStatus
from storefront.enums.payment_method import PaymentMethod
from storefront.enums.payment_status import PaymentStatus
from storefront.helpers.payment_masking import detect_card_type, last_four, mask_account, mask_email
from storefront.models.order import Order
from storefront.models.payment import Payment
from storefront.models.user import User
from storefront.services import order_service

configuration = Configuration()

# Gateway messages per method: (success, failure)
GATEWAY_RESPONSES = {
    PaymentMethod.DIGITAL_WALLET: ("Digital wallet payment successful via {wallet}", "Digital wallet payment failed - insufficient funds"),
    PaymentMethod.PAYPAL: ("PayPal payment successful", "PayPal payment failed - account verification required"),
    PaymentMethod.APPLE_PAY: ("Apple Pay payment successful - Touch ID verified", "Apple Pay payment failed - authentication failed"),
    PaymentMethod.GOOGLE_PAY: ("Google Pay payment successful - Fingerprint verified", "Google Pay payment failed - network error"),
    PaymentMethod.CREDIT_CARD: ("Card payment successful - Authorization: {auth_code}", "Card payment failed - declined by issuer"),
    PaymentMethod.DEBIT_CARD: ("Card payment successful - Authorization: {auth_code}", "Card payment failed - declined by issuer"),
}


class PaymentGateway:
    """Simulated gateway: every charge succeeds with probability `success_rate`."""

    def __init__(self, success_rate: Optional[float] = None, rng: Optional[random.Random] = None):
        self.success_rate = configuration.payment_success_rate if success_rate is None else success_rate
        self.rng = rng or random.Random()

    def generate_transaction_id(self) -> str:
        return "TXN-" + uuid.uuid4().hex[:8].upper()

    def generate_auth_code(self) -> str:
        return f"{self.rng.randint(0, 999999):06d}"

    def charge(self, payment: Payment) -> Payment:
        payment.payment_status = PaymentStatus.PROCESSING

        if self.rng.random() < self.success_rate:
            payment.payment_status = PaymentStatus.COMPLETED
        else:
            payment.payment_status = PaymentStatus.FAILED

        payment.processed_at = datetime.now(timezone.utc)
        return payment


gateway = PaymentGateway()


def _apply_method_details(payment: Payment, method: PaymentMethod, details: str) -> None:
    details = (details or "").strip()

    if method.is_card:
        # "cardNumber:expiryMonth:expiryYear:cvv", only the number is kept
        card_number = details.split(":")[0]
        payment.card_last_four = last_four(card_number)
        payment.card_type = detect_card_type(card_number)
    elif method == PaymentMethod.DIGITAL_WALLET:
        # "walletType:accountId"
        parts = details.split(":")
        if len(parts) == 2:
            payment.wallet_type = parts[0]
            payment.wallet_account = mask_account(parts[1])
    elif method == PaymentMethod.PAYPAL:
        payment.wallet_type = "PayPal"
        payment.wallet_account = mask_email(details)
    elif method == PaymentMethod.APPLE_PAY:
        payment.wallet_type = "Apple Pay"
        payment.wallet_account = mask_account(details)
    elif method == PaymentMethod.GOOGLE_PAY:
        payment.wallet_type = "Google Pay"
        payment.wallet_account = mask_account(details)
    else:
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported payment method: {method}")


def _gateway_response(payment: Payment, payment_gateway: PaymentGateway) -> str:
    success, failure = GATEWAY_RESPONSES[payment.payment_method]
    if payment.payment_status != PaymentStatus.COMPLETED:
        return failure
    return success.format(wallet=payment.wallet_type or "wallet", auth_code=payment_gateway.generate_auth_code())


def process_payment(
    session: Session,
    order: Order,
    method: PaymentMethod,
    payment_details: str,
    payment_gateway: Optional[PaymentGateway] = None,
    commit: bool = True,
) -> Payment:
    """Charges the order total and records the attempt."""
    payment_gateway = payment_gateway or gateway

    payment = Payment(
        order_id=order.id,
        amount=order.total_amount,
        payment_method=method,
        payment_status=PaymentStatus.PENDING,
        transaction_id=payment_gateway.generate_transaction_id(),
    )
    _apply_method_details(payment, method, payment_details)
    payment_gateway.charge(payment)
    payment.gateway_response = _gateway_response(payment, payment_gateway)

    session.add(payment)
    if commit:
        session.commit()
        session.refresh(payment)

    logging.info(
        f"PAYMENT >>> {payment.transaction_id} order={order.code} method={method.value} "
        f"amount={payment.amount} status={payment.payment_status.value}"
    )
    return payment


def pay_order(
    session: Session,
    user: User,
    order_id: int,
    method: PaymentMethod,
    payment_details: str,
    payment_gateway: Optional[PaymentGateway] = None,
) -> Payment:
    """Pays one of the user's PENDING orders; a completed charge confirms it.

    The payment row and the order confirmation are committed together.
    """
    order = order_service.get_user_order_for_update(session, user, order_id)

    if order.status != OrderStatus.PENDING:
        solution = f"Order {order.code} is {order.status.display_name}"
        # Releases the row lock
        session.rollback()
        raise AppHttpException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only pending orders can be paid",
            solution=solution,
        )

    try:
        payment = process_payment(session, order, method, payment_details, payment_gateway, commit=False)
        if payment.payment_status == PaymentStatus.COMPLETED:
            order_service.update_order_status(session, order.id, OrderStatus.CONFIRMED, commit=False)
        session.commit()
    except Exception:
        session.rollback()
        logging.error(f"PAYMENT >>> Payment for order {order_id} could not be recorded", exc_info=True)
        raise

    session.refresh(payment)
    return payment


def get_payment_by_order_id(session: Session, order_id: int) -> Optional[Payment]:
    """Latest attempt for the order."""
    statement = (
        select(Payment)
        .where(Payment.order_id == order_id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
    )
    return session.exec(statement).first()


def get_payment_by_transaction_id(session: Session, transaction_id: str) -> Optional[Payment]:
    return session.exec(select(Payment).where(Payment.transaction_id == transaction_id)).first()


def get_payments_by_status(session: Session, payment_status: PaymentStatus) -> List[Payment]:
    statement = (
        select(Payment)
        .where(Payment.payment_status == payment_status)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
    )
    return list(session.exec(statement).all())


def get_all_payments(session: Session) -> List[Payment]:
    return list(session.exec(select(Payment).order_by(Payment.created_at.desc(), Payment.id.desc())).all())


def refund_payment(session: Session, payment_id: int) -> Payment:
    payment = session.get(Payment, payment_id)
    if not payment:
        raise AppHttpException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")

    if payment.payment_status != PaymentStatus.COMPLETED:
        raise AppHttpException(status_code=status.HTTP_400_BAD_REQUEST, detail="Can only refund completed payments")

    payment.payment_status = PaymentStatus.REFUNDED
    payment.gateway_response = "Payment refunded successfully"
    session.add(payment)
    session.commit()
    session.refresh(payment)

    logging.info(f"PAYMENT >>> {payment.transaction_id} refunded ({payment.amount})")
    return payment


def get_total_revenue(session: Session) -> float:
    statement = select(func.coalesce(func.sum(Payment.amount), 0.0)).where(
        Payment.payment_status == PaymentStatus.COMPLETED
    )
    return round(float(session.exec(statement).one()), 2)
