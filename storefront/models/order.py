from datetime import datetime, timezone
from typing import Optional, List, TYPE_CHECKING
import uuid
from sqlmodel import Field, Relationship, SQLModel
from sqlalchemy import Column, Enum

from storefront.enums.order_status import OrderStatus
from storefront.core.utils.hash_utils import generate_hash

if TYPE_CHECKING:
    from storefront.models.order_item import OrderItem
    from storefront.models.payment import Payment
    from storefront.models.user import User

ORDER_CODE_HASH_LENGTH = 10

def generate_order_code() -> str:
    timestamp = datetime.now(timezone.utc).isoformat()
    raw = f"{timestamp}-{uuid.uuid4()}"
    return generate_hash(raw)[:ORDER_CODE_HASH_LENGTH].upper()

class Order(SQLModel, table=True):
    __tablename__ = "tb_order"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(default_factory=generate_order_code, index=True, unique=True)

    user_id: int = Field(foreign_key="tb_user.id", index=True)
    user: Optional["User"] = Relationship(back_populates="orders")

    status: OrderStatus = Field(default=OrderStatus.PENDING, sa_column=Column(Enum(OrderStatus), nullable=False, index=True))
    total_amount: float = Field(default=0.0, ge=0)
    shipping_address: str = Field(max_length=500)

    order_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: Optional[datetime] = None

    items: List["OrderItem"] = Relationship(back_populates="order")
    payments: List["Payment"] = Relationship(back_populates="order")

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items or [])

    @property
    def latest_payment(self) -> Optional["Payment"]:
        if not self.payments:
            return None
        return max(self.payments, key=lambda payment: payment.id or 0)
