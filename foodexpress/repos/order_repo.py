# foodexpress/repos/order_repo.py
from datetime import date
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from foodexpress.data.models.order import OrderModel
from foodexpress.data.models.order_sequence import OrderSequenceModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return select(OrderModel).options(selectinload(OrderModel.items))

    def add_order(self, order: OrderModel) -> OrderModel:
        # bez commita - commit robi transakcja wywolujacego
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int, for_update: bool = False) -> OrderModel | None:
        stmt = self._query().where(OrderModel.id == order_id)
        if for_update:
            stmt = stmt.with_for_update(of=OrderModel)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_user(self, user_id: int) -> List[OrderModel]:
        stmt = (
            self._query()
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_by_status(
        self, status: str, limit: int | None = None, offset: int = 0
    ) -> List[OrderModel]:
        stmt = (
            self._query()
            .where(OrderModel.status == status)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        return list(self.db.execute(stmt).scalars().all())

    def get_all(self, limit: int, offset: int) -> List[OrderModel]:
        stmt = (
            self._query()
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.execute(stmt).scalars().all())

    def count_all(self) -> int:
        return self.db.execute(select(func.count(OrderModel.id))).scalar_one()

    def count_by_status(self) -> Dict[str, int]:
        rows = self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status)
        ).all()
        return {status: count for status, count in rows}

    def revenue(self, exclude_status: str) -> Decimal:
        value = self.db.execute(
            select(func.coalesce(func.sum(OrderModel.total_amount), 0)).where(
                OrderModel.status != exclude_status
            )
        ).scalar_one()
        return Decimal(str(value))

    def reserve_sequence(self, day: date) -> int:
        """Increment and return the day's order sequence.

        The UPDATE takes the row lock, so concurrent checkouts on the same day
        queue up behind it until the surrounding transaction ends. A race on the
        first insert of the day surfaces as an IntegrityError.
        """
        result = self.db.execute(
            update(OrderSequenceModel)
            .where(OrderSequenceModel.day == day)
            .values(last_value=OrderSequenceModel.last_value + 1)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            self.db.add(OrderSequenceModel(day=day, last_value=1))
            self.db.flush()
            return 1

        return self.db.execute(
            select(OrderSequenceModel.last_value).where(OrderSequenceModel.day == day)
        ).scalar_one()
