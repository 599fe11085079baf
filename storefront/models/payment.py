from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING
from sqlalchemy import Column, Enum
from sqlmodel import Field, Relationship, SQLModel

from storefront.enums.payment_method import PaymentMethod
from storefront.enums.payment_status import PaymentStatus

if TYPE_CHECKING:
    from storefront.models.order import Order

class Payment(SQLModel, table=True):
    __tablename__ = "tb_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="tb_order.id", index=True)
    amount: float = Field(default=0.0)

    payment_method: PaymentMethod = Field(sa_column=Column(Enum(PaymentMethod), nullable=False))
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, sa_column=Column(Enum(PaymentStatus), nullable=False, index=True))

    transaction_id: str = Field(index=True, unique=True)
    gateway_response: Optional[str] = Field(default=None)

    # Digital wallet details
    wallet_type: Optional[str] = Field(default=None)
    wallet_account: Optional[str] = Field(default=None)

    # Card details, never the full number
    card_last_four: Optional[str] = Field(default=None, max_length=4)
    card_type: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    processed_at: Optional[datetime] = Field(default=None)

    order: Optional["Order"] = Relationship(back_populates="payments")
