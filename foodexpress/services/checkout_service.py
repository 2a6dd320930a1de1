# foodexpress/services/checkout_service.py
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy.orm import Session

from foodexpress.data.database import transaction
from foodexpress.data.models.order import OrderModel
from foodexpress.data.models.order_item import OrderItemModel
from foodexpress.domain.errors import ItemUnavailable, ValidationError
from foodexpress.domain.pricing import PricingPolicy, compute_totals, line_subtotal
from foodexpress.domain.status import OrderStatus, PaymentMethod, PaymentStatus
from foodexpress.repos.cart_repo import CartRepo
from foodexpress.repos.order_repo import OrderRepo
from foodexpress.services.catalog_client import CatalogItem, CatalogReader
from foodexpress.services.notification_service import NotificationService
from foodexpress.utils.retry import conflict_retry
from foodexpress.utils.settings import ORDER_NUMBER_PREFIX
from foodexpress.utils.logging import get_logger

logger = get_logger(__name__)

# unikalnosc numeru zamowienia i wiersza sekwencji dnia pilnuje baza
_SEQUENCE_CONSTRAINTS = ("order_number", "order_sequences")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_order_number(day, sequence: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}{day:%Y%m%d}{sequence:04d}"


@dataclass(frozen=True)
class LineRequest:
    item_id: int
    quantity: int
    instructions: str | None = None


@dataclass(frozen=True)
class _ResolvedLine:
    item: CatalogItem
    quantity: int
    instructions: str | None

    @property
    def subtotal(self):
        return line_subtotal(self.item.price, self.quantity)


class CheckoutService:
    """
    Zamiana koszyka (albo dowolnej listy pozycji) w zamowienie.

    Cala walidacja dzieje sie przed pierwszym zapisem. Naglowek zamowienia,
    numer zamowienia i wszystkie pozycje zapisuja sie w jednej transakcji.
    Koszyk NIE jest czyszczony tutaj, tylko przy przejsciu do `confirmed`.
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogReader,
        pricing: PricingPolicy | None = None,
        notifier: NotificationService | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.catalog = catalog
        self.pricing = pricing or PricingPolicy()
        self.notifier = notifier or NotificationService()

    def place_order(
        self,
        user_id: int,
        restaurant_id: int,
        lines: Iterable[LineRequest],
        delivery_address: str,
        phone: str,
        payment_method: str = PaymentMethod.CASH.value,
        notes: str | None = None,
    ) -> OrderModel:
        lines = self._merge_lines(lines)
        delivery_address = (delivery_address or "").strip()
        phone = (phone or "").strip()

        if not delivery_address:
            raise ValidationError("Delivery address is required")
        if not phone:
            raise ValidationError("Phone number is required for delivery")
        try:
            payment_method = PaymentMethod(payment_method or PaymentMethod.CASH.value).value
        except ValueError:
            raise ValidationError(f"Unknown payment method '{payment_method}'") from None

        resolved = [self._resolve(restaurant_id, line) for line in lines]

        subtotals = [r.subtotal for r in resolved]
        adjustments = self.pricing.adjustments(restaurant_id, sum(subtotals))
        totals = compute_totals(subtotals, adjustments)

        order_id = self._commit(
            user_id=user_id,
            restaurant_id=restaurant_id,
            resolved=resolved,
            totals=totals,
            delivery_address=delivery_address,
            phone=phone,
            payment_method=payment_method,
            notes=notes,
        )

        order = self.repo.get_order(order_id)
        logger.info(
            f"Order {order.order_number} ({order.id}) placed by user {user_id}: "
            f"{len(order.items)} lines, total {order.total_amount}"
        )
        self.notifier.order_placed(user_id, order.id, order.order_number)
        return order

    def place_order_from_cart(
        self,
        user_id: int,
        restaurant_id: int,
        delivery_address: str,
        phone: str,
        payment_method: str = PaymentMethod.CASH.value,
        notes: str | None = None,
    ) -> OrderModel:
        cart_lines = self.cart_repo.get_lines(user_id, restaurant_id)
        if not cart_lines:
            raise ValidationError("Cart is empty for this restaurant")

        line_requests = [
            LineRequest(item_id=c.item_id, quantity=c.quantity, instructions=c.instructions)
            for c in cart_lines
        ]
        return self.place_order(
            user_id, restaurant_id, line_requests, delivery_address, phone, payment_method, notes
        )

    @staticmethod
    def _merge_lines(lines: Iterable[LineRequest]) -> List[LineRequest]:
        merged = {}
        for line in lines or []:
            if not isinstance(line.item_id, int) or line.item_id <= 0:
                raise ValidationError("Invalid item format. Each item needs id and quantity")
            if not isinstance(line.quantity, int) or isinstance(line.quantity, bool) or line.quantity <= 0:
                raise ValidationError(f"Quantity for item {line.item_id} must be a positive integer")

            if line.item_id in merged:
                prev = merged[line.item_id]
                merged[line.item_id] = LineRequest(
                    item_id=line.item_id,
                    quantity=prev.quantity + line.quantity,
                    instructions=prev.instructions or line.instructions,
                )
            else:
                merged[line.item_id] = line

        if not merged:
            raise ValidationError("Order items are required")
        return list(merged.values())

    def _resolve(self, restaurant_id: int, line: LineRequest) -> _ResolvedLine:
        # cena i dostepnosc tylko z katalogu, nigdy od klienta
        item = self.catalog.resolve_item(line.item_id)
        if not item.available:
            raise ItemUnavailable(item.id, item.name)
        if item.restaurant_id is not None and item.restaurant_id != restaurant_id:
            raise ValidationError(f'Menu item "{item.name}" belongs to another restaurant')
        return _ResolvedLine(item=item, quantity=line.quantity, instructions=line.instructions)

    @conflict_retry()
    def _commit(self, *, user_id, restaurant_id, resolved, totals, delivery_address, phone, payment_method, notes) -> int:
        now = utcnow()

        with transaction(self.db, conflict_on=_SEQUENCE_CONSTRAINTS):
            sequence = self.repo.reserve_sequence(now.date())

            order = OrderModel(
                order_number=format_order_number(now.date(), sequence),
                user_id=user_id,
                restaurant_id=restaurant_id,
                status=OrderStatus.PENDING.value,
                payment_method=payment_method,
                payment_status=PaymentStatus.PENDING.value,
                subtotal=totals.subtotal,
                delivery_fee=totals.delivery_fee,
                tax_amount=totals.tax_amount,
                discount_amount=totals.discount_amount,
                total_amount=totals.total_amount,
                delivery_address=delivery_address,
                phone=phone,
                notes=notes,
                created_at=now,
                updated_at=now,
                items=[
                    OrderItemModel(
                        item_id=r.item.id,
                        item_name=r.item.name,
                        item_price=r.item.price,
                        quantity=r.quantity,
                        subtotal=r.subtotal,
                        instructions=r.instructions,
                    )
                    for r in resolved
                ],
            )
            self.repo.add_order(order)
            order_id = order.id

        return order_id
