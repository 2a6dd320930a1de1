# foodexpress/services/order_service.py
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from foodexpress.data.models.order import OrderModel
from foodexpress.domain.errors import NotFound, ValidationError
from foodexpress.domain.status import OrderStatus, parse_status
from foodexpress.repos.order_repo import OrderRepo

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50


def _check_paging(page: int, limit: int):
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")


class OrderService:
    """
    Odczyty zamowien (Query). Zapisy robia tylko CheckoutService i
    FulfillmentService.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    def get_by_id(self, order_id: int, user_id: int | None = None) -> OrderModel:
        order = self.repo.get_order(order_id)

        # cudze zamowienie wyglada tak samo jak nieistniejace
        if not order or (user_id is not None and order.user_id != user_id):
            raise NotFound("Order not found or access denied")

        return order

    def get_by_user(self, user_id: int) -> List[OrderModel]:
        return self.repo.get_by_user(user_id)

    def get_by_status(
        self, status: str, page: int | None = None, limit: int | None = None
    ) -> List[OrderModel]:
        value = parse_status(status).value
        if page is None and limit is None:
            return self.repo.get_by_status(value)

        page = 1 if page is None else page
        limit = DEFAULT_PAGE_SIZE if limit is None else limit
        _check_paging(page, limit)
        return self.repo.get_by_status(value, limit=limit, offset=(page - 1) * limit)

    def get_all(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> List[OrderModel]:
        _check_paging(page, limit)
        return self.repo.get_all(limit=limit, offset=(page - 1) * limit)

    def get_stats(self) -> Dict[str, Any]:
        by_status = {s.value: 0 for s in OrderStatus}
        by_status.update(self.repo.count_by_status())

        return {
            "total_orders": self.repo.count_all(),
            "total_revenue": self.repo.revenue(exclude_status=OrderStatus.CANCELLED.value),
            "by_status": by_status,
        }
