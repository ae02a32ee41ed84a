# storefront/models/__init__.py
from .admin import Admin
from .item import Item
from .item_image import ItemImage
from .order import Order
from .order_item import OrderItem

__all__ = [
    "Admin",
    "Item",
    "ItemImage",
    "Order",
    "OrderItem",
]
