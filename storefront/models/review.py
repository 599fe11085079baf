from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from storefront.models.product import Product
    from storefront.models.user import User

class Review(SQLModel, table=True):
    __tablename__ = "tb_review"
    __table_args__ = (UniqueConstraint("product_id", "user_id", name="uq_review_product_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="tb_product.id", index=True)
    user_id: int = Field(foreign_key="tb_user.id", index=True)

    rating: int = Field(ge=1, le=5)
    review_text: Optional[str] = Field(default=None, max_length=1000)
    verified_purchase: bool = Field(default=False)
    helpful_count: int = Field(default=0, ge=0)

    product: Optional["Product"] = Relationship(back_populates="reviews")
    user: Optional["User"] = Relationship(back_populates="reviews")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = Field(default=None)
