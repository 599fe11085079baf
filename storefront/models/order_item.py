from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from storefront.models.order import Order
    from storefront.models.product import Product

class OrderItem(SQLModel, table=True):
    __tablename__ = "tb_order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="tb_order.id", index=True)
    product_id: int = Field(foreign_key="tb_product.id", index=True)

    # Snapshot taken at checkout
    product_name: str
    quantity: int = Field(default=1, ge=1)
    price: float = Field(default=0.0, ge=0)

    order: Optional["Order"] = Relationship(back_populates="items")
    product: Optional["Product"] = Relationship()

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)
