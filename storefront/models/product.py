from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING
from sqlalchemy import Column, Enum
from sqlmodel import Field, Relationship, SQLModel

from storefront.enums.product_category import ProductCategory

if TYPE_CHECKING:
    from storefront.models.review import Review

class Product(SQLModel, table=True):
    __tablename__ = "tb_product"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: float = Field(gt=0)
    stock_quantity: int = Field(default=0, ge=0)
    category: ProductCategory = Field(sa_column=Column(Enum(ProductCategory), nullable=False, index=True))
    image_url: Optional[str] = None
    is_active: bool = Field(default=True)

    reviews: List["Review"] = Relationship(back_populates="product")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = Field(default=None)

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    def is_available(self, quantity: int = 1) -> bool:
        return self.is_active and self.stock_quantity >= quantity
