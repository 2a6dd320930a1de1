#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from foodexpress.data.models.cart_item import CartItemModel
from foodexpress.data.models.order import OrderModel
from foodexpress.data.models.order_item import OrderItemModel
from foodexpress.data.models.order_sequence import OrderSequenceModel

__all__ = ["CartItemModel", "OrderModel", "OrderItemModel", "OrderSequenceModel"]
