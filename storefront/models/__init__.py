# storefront/models/__init__.py

from .user import User
from .product import Product
from .cart_item import CartItem
from .order import Order
from .order_item import OrderItem
from .payment import Payment
from .review import Review
