from sqlalchemy import Column, Integer, Text, DateTime, UniqueConstraint
from datetime import datetime, timezone

from foodexpress.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    item_id = Column(Integer, nullable=False)
    restaurant_id = Column(Integer, nullable=True, index=True)

    quantity = Column(Integer, nullable=False)
    instructions = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (UniqueConstraint("user_id", "item_id", name="u_cart_user_item"),)
