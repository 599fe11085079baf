from enum import Enum

# PENDING -> CONFIRMED -> SHIPPED -> DELIVERED, or CANCELLED
class OrderStatus(str, Enum):
    PENDING = "PENDING"         # Created at checkout, awaiting payment
    CONFIRMED = "CONFIRMED"     # Payment completed
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


# Statuses that prove the customer bought the items
PURCHASED_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED)
