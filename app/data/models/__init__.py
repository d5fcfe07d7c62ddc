#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.models.user_profile import UserProfileModel

__all__ = ["CartModel", "CartItemModel", "OrderModel", "OrderItemModel", "UserProfileModel"]
