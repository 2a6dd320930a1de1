# foodexpress/services/fulfillment_service.py
from datetime import datetime, timedelta
from typing import Callable, Dict

from sqlalchemy.orm import Session

from foodexpress.data.database import transaction
from foodexpress.data.models.order import OrderModel
from foodexpress.domain.errors import InvalidStatus, NotFound, TerminalStateViolation
from foodexpress.domain.status import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    TERMINAL_STATUSES,
    check_transition,
    parse_status,
)
from foodexpress.repos.cart_repo import CartRepo
from foodexpress.repos.order_repo import OrderRepo
from foodexpress.services.checkout_service import utcnow
from foodexpress.services.notification_service import NotificationService
from foodexpress.utils.settings import ESTIMATED_DELIVERY_MINUTES
from foodexpress.utils.logging import get_logger

logger = get_logger(__name__)


class FulfillmentService:
    """
    Przejscia statusu zamowienia i ich efekty uboczne.

    Zapis statusu i efekt uboczny ida w jednej transakcji. Serwis pilnuje
    tylko ksztaltu grafu przejsc, nie tego kto moze je wywolac.
    """

    def __init__(self, db: Session, notifier: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.notifier = notifier or NotificationService()

        # jeden handler na kazdy status docelowy
        self._handlers: Dict[OrderStatus, Callable[[OrderModel, datetime, str | None], None]] = {
            OrderStatus.PENDING: self._noop,
            OrderStatus.CONFIRMED: self._on_confirmed,
            OrderStatus.PREPARING: self._noop,
            OrderStatus.READY: self._noop,
            OrderStatus.OUT_FOR_DELIVERY: self._on_out_for_delivery,
            OrderStatus.DELIVERED: self._on_delivered,
            OrderStatus.CANCELLED: self._on_cancelled,
        }

    def set_status(
        self,
        order_id: int,
        new_status: str,
        cancellation_reason: str | None = None,
    ) -> OrderModel:
        return self._apply(order_id, parse_status(new_status), cancellation_reason)

    def cancel_order(self, order_id: int, user_id: int, reason: str | None = None) -> OrderModel:
        """Self-service cancellation: own orders only, and only while pending."""

        def owner_and_pending(order: OrderModel):
            if order.user_id != user_id:
                raise NotFound("Order not found or access denied")
            if order.status != OrderStatus.PENDING.value:
                raise InvalidStatus(f"Cannot cancel order with status: {order.status}")

        return self._apply(order_id, OrderStatus.CANCELLED, reason, guard=owner_and_pending)

    def _apply(self, order_id: int, target: OrderStatus, reason: str | None, guard=None) -> OrderModel:
        with transaction(self.db):
            order = self._load(order_id)
            if guard:
                guard(order)
            previous = order.status
            check_transition(order.status, target)

            now = utcnow()
            self._handlers[target](order, now, reason)
            order.status = target.value
            order.updated_at = now

            user_id, order_number = order.user_id, order.order_number

        logger.info(f"Order {order_number} ({order_id}) status {previous} -> {target.value}")
        self.notifier.status_changed(user_id, order_id, order_number, target.value)
        return self.repo.get_order(order_id)

    def assign_driver(self, order_id: int, driver_id: int) -> OrderModel:
        with transaction(self.db):
            order = self._load(order_id)
            if parse_status(order.status) in TERMINAL_STATUSES:
                raise TerminalStateViolation(
                    f"Cannot assign a driver to a {order.status} order"
                )
            order.driver_id = driver_id
            order.updated_at = utcnow()

        logger.info(f"Driver {driver_id} assigned to order {order_id}")
        return self.repo.get_order(order_id)

    def _load(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id, for_update=True)
        if not order:
            raise NotFound("Order not found")
        return order

    # efekty uboczne przejsc

    def _noop(self, order: OrderModel, now: datetime, reason: str | None) -> None:
        return None

    def _on_confirmed(self, order: OrderModel, now: datetime, reason: str | None) -> None:
        # restauracja przyjela zamowienie - dopiero teraz czyscimy koszyk
        removed = self.cart_repo.delete_lines(order.user_id, order.restaurant_id)
        logger.info(
            f"Order {order.order_number} confirmed, {removed} cart lines of user "
            f"{order.user_id} cleared for restaurant {order.restaurant_id}"
        )

    def _on_out_for_delivery(self, order: OrderModel, now: datetime, reason: str | None) -> None:
        order.estimated_delivery = now + timedelta(minutes=ESTIMATED_DELIVERY_MINUTES)

    def _on_delivered(self, order: OrderModel, now: datetime, reason: str | None) -> None:
        order.actual_delivery = now
        if order.payment_method == PaymentMethod.CASH.value:
            order.payment_status = PaymentStatus.PAID.value

    def _on_cancelled(self, order: OrderModel, now: datetime, reason: str | None) -> None:
        order.cancelled_at = now
        if reason:
            order.cancellation_reason = reason
