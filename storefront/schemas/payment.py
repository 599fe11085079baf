from pydantic import BaseModel, Field

from storefront.enums.payment_method import PaymentMethod


class PaymentRequest(BaseModel):
    payment_method: PaymentMethod
    # Card: "number:mm:yy:cvv", wallet: "walletType:accountId", PayPal: email, Apple/Google Pay: device id
    payment_details: str = Field(..., min_length=1, max_length=255)
