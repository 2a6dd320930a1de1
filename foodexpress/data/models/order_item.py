from sqlalchemy import Column, Integer, String, Text, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from foodexpress.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(Integer, nullable=False)

    # snapshot z chwili zamowienia, niezalezny od pozniejszych zmian w menu
    item_name = Column(String(100), nullable=False)
    item_price = Column(Numeric(10, 2), nullable=False)

    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    instructions = Column(Text, nullable=True)

    order = relationship("OrderModel", back_populates="items")

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_order_items_quantity"),)
