from sqlalchemy import Column, Integer, Date

from foodexpress.data.database import Base


class OrderSequenceModel(Base):
    """Last order-number sequence value handed out per calendar day."""

    __tablename__ = "order_sequences"

    day = Column(Date, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
