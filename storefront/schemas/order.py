from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    shipping_address: str = Field(..., min_length=1, max_length=500)
