# foodexpress/repos/cart_repo.py
from typing import List

from sqlalchemy import select, delete, func
from sqlalchemy.orm import Session

from foodexpress.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_line(self, line_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, line_id)

    def get_line_by_item(self, user_id: int, item_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.item_id == item_id,
            )
        ).scalar_one_or_none()

    def get_lines(self, user_id: int, restaurant_id: int | None = None) -> List[CartItemModel]:
        stmt = select(CartItemModel).where(CartItemModel.user_id == user_id)
        if restaurant_id is not None:
            stmt = stmt.where(CartItemModel.restaurant_id == restaurant_id)
        return list(self.db.execute(stmt.order_by(CartItemModel.id)).scalars().all())

    def count_quantity(self, user_id: int) -> int:
        return self.db.execute(
            select(func.coalesce(func.sum(CartItemModel.quantity), 0)).where(
                CartItemModel.user_id == user_id
            )
        ).scalar_one()

    def add_line(self, line: CartItemModel) -> CartItemModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, line: CartItemModel) -> None:
        self.db.delete(line)

    def delete_lines(self, user_id: int, restaurant_id: int | None = None) -> int:
        stmt = delete(CartItemModel).where(CartItemModel.user_id == user_id)
        if restaurant_id is not None:
            stmt = stmt.where(CartItemModel.restaurant_id == restaurant_id)
        result = self.db.execute(stmt)
        return result.rowcount
