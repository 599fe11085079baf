from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from storefront.models.product import Product
    from storefront.models.user import User

class CartItem(SQLModel, table=True):
    __tablename__ = "tb_cart_item"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_item_user_product"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="tb_user.id", index=True)
    product_id: int = Field(foreign_key="tb_product.id")
    quantity: int = Field(default=1, ge=1)

    user: Optional["User"] = Relationship(back_populates="cart_items")
    product: Optional["Product"] = Relationship()

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def subtotal(self) -> float:
        # Live price: the cart follows catalog changes until checkout
        if self.product is None:
            return 0.0
        return round(self.product.price * self.quantity, 2)
