"""Checkout: authoritative pricing, all-or-nothing commit, order numbers."""

import threading
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from foodexpress.data.models.order import OrderModel
from foodexpress.data.models.order_item import OrderItemModel
from foodexpress.data.models.order_sequence import OrderSequenceModel
from foodexpress.domain.errors import (
    ItemNotFound,
    ItemUnavailable,
    PersistenceFailure,
    ValidationError,
)
from foodexpress.domain.pricing import FlatPricing
from foodexpress.services import checkout_service
from foodexpress.services.cart_service import CartService
from foodexpress.services.catalog_client import CatalogItem
from foodexpress.services.checkout_service import CheckoutService, LineRequest

USER = 10
RESTAURANT = 1


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def _place(svc, lines, **overrides):
    kwargs = {
        "user_id": USER,
        "restaurant_id": RESTAURANT,
        "lines": lines,
        "delivery_address": "123 Main Street, Dar es Salaam",
        "phone": "0711111111",
    }
    kwargs.update(overrides)
    return svc.place_order(**kwargs)


@pytest.fixture()
def checkout(db, catalog, notifier):
    return CheckoutService(db, catalog, pricing=FlatPricing(delivery_fee="2000"), notifier=notifier)


class TestPlaceOrder:
    def test_scenario_two_lines_with_delivery_fee(self, checkout):
        order = _place(checkout, [LineRequest(1, 2), LineRequest(2, 1)])

        assert order.subtotal == Decimal("13000.00")
        assert order.delivery_fee == Decimal("2000.00")
        assert order.total_amount == Decimal("15000.00")
        assert len(order.items) == 2
        assert order.status == "pending"
        assert order.payment_status == "pending"

    def test_lines_snapshot_catalog_name_and_price(self, checkout, catalog, db):
        order = _place(checkout, [LineRequest(1, 2)])
        catalog.put(1, "Chips Mayai Deluxe", "9999.00")

        line = db.get(OrderItemModel, order.items[0].id)

        assert line.item_name == "Chips Mayai"
        assert line.item_price == Decimal("5000.00")
        assert line.subtotal == Decimal("10000.00")

    def test_duplicate_item_ids_merge_into_one_line(self, checkout):
        order = _place(checkout, [LineRequest(1, 1), LineRequest(1, 2), LineRequest(2, 1)])

        quantities = {line.item_id: line.quantity for line in order.items}
        assert quantities == {1: 3, 2: 1}

    def test_order_number_format(self, checkout):
        order = _place(checkout, [LineRequest(1, 1)])

        today = datetime.now(timezone.utc)
        assert order.order_number == f"ORD{today:%Y%m%d}0001"

    def test_order_number_sequence_is_per_day(self, checkout, monkeypatch):
        monkeypatch.setattr(
            checkout_service, "utcnow", lambda: datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        )
        first = _place(checkout, [LineRequest(1, 1)])
        second = _place(checkout, [LineRequest(1, 1)])

        monkeypatch.setattr(
            checkout_service, "utcnow", lambda: datetime(2026, 1, 16, 8, 0, tzinfo=timezone.utc)
        )
        next_day = _place(checkout, [LineRequest(1, 1)])

        assert first.order_number == "ORD202601150001"
        assert second.order_number == "ORD202601150002"
        assert next_day.order_number == "ORD202601160001"

    def test_cart_is_not_cleared_by_checkout(self, checkout, db, catalog):
        cart = CartService(db, catalog)
        cart.add_item(USER, 1, 2)

        _place(checkout, [LineRequest(1, 2)])

        assert cart.get_count(USER) == 2

    def test_notification_sent_after_commit(self, checkout, notifier):
        order = _place(checkout, [LineRequest(1, 1)])

        assert notifier.sent == [("placed", USER, order.id, order.order_number)]

    def test_address_and_phone_are_stripped(self, checkout):
        order = _place(checkout, [LineRequest(1, 1)], delivery_address="  Road 1 ", phone=" 0700 ")

        assert order.delivery_address == "Road 1"
        assert order.phone == "0700"


class TestValidation:
    @pytest.mark.parametrize(
        "lines",
        [
            [],
            [LineRequest(1, 0)],
            [LineRequest(1, -2)],
            [LineRequest(0, 1)],
        ],
    )
    def test_bad_lines_are_rejected(self, checkout, db, lines):
        with pytest.raises(ValidationError):
            _place(checkout, lines)

        assert _count(db, OrderModel) == 0

    @pytest.mark.parametrize("field", ["delivery_address", "phone"])
    def test_blank_contact_fields_are_rejected(self, checkout, field):
        with pytest.raises(ValidationError):
            _place(checkout, [LineRequest(1, 1)], **{field: "   "})

    def test_unknown_payment_method_is_rejected(self, checkout):
        with pytest.raises(ValidationError):
            _place(checkout, [LineRequest(1, 1)], payment_method="bitcoin")

    def test_unknown_item_creates_nothing(self, checkout, db):
        with pytest.raises(ItemNotFound):
            _place(checkout, [LineRequest(1, 1), LineRequest(999, 1)])

        assert _count(db, OrderModel) == 0
        assert _count(db, OrderItemModel) == 0

    def test_unavailable_item_creates_nothing_and_leaves_cart(self, checkout, db, catalog):
        cart = CartService(db, catalog)
        cart.add_item(USER, 1, 1)

        with pytest.raises(ItemUnavailable):
            _place(checkout, [LineRequest(1, 1), LineRequest(3, 1)])

        assert _count(db, OrderModel) == 0
        assert _count(db, OrderItemModel) == 0
        assert cart.get_count(USER) == 1

    def test_item_from_other_restaurant_is_rejected(self, checkout, db):
        with pytest.raises(ValidationError):
            _place(checkout, [LineRequest(4, 1)])

        assert _count(db, OrderModel) == 0


class TestAtomicity:
    def test_failing_line_insert_rolls_back_header_and_sequence(self, db, catalog, notifier):
        # brak nazwy lamie NOT NULL na order_items dopiero przy zapisie pozycji
        catalog.items[2] = CatalogItem(
            id=2, name=None, price=Decimal("3000"), available=True, restaurant_id=RESTAURANT
        )
        svc = CheckoutService(db, catalog, notifier=notifier)

        with pytest.raises(PersistenceFailure):
            _place(svc, [LineRequest(1, 1), LineRequest(2, 1)])

        assert _count(db, OrderModel) == 0
        assert _count(db, OrderItemModel) == 0
        assert _count(db, OrderSequenceModel) == 0
        assert notifier.sent == []

    def test_retry_after_failure_succeeds(self, db, catalog, notifier):
        catalog.items[2] = CatalogItem(
            id=2, name=None, price=Decimal("3000"), available=True, restaurant_id=RESTAURANT
        )
        svc = CheckoutService(db, catalog, notifier=notifier)
        with pytest.raises(PersistenceFailure):
            _place(svc, [LineRequest(1, 1), LineRequest(2, 1)])

        catalog.put(2, "Chai Maziwa", "3000.00")
        order = _place(svc, [LineRequest(1, 1), LineRequest(2, 1)])

        assert order.order_number.endswith("0001")
        assert len(order.items) == 2


class TestCheckoutFromCart:
    def test_uses_cart_lines_of_that_restaurant(self, checkout, db, catalog):
        cart = CartService(db, catalog)
        cart.add_item(USER, 1, 2, instructions="extra spicy")
        cart.add_item(USER, 2, 1)
        cart.add_item(USER, 4, 1)

        order = checkout.place_order_from_cart(USER, RESTAURANT, "Road 1", "0700")

        assert sorted(line.item_id for line in order.items) == [1, 2]
        assert order.total_amount == Decimal("15000.00")
        assert {line.item_id: line.instructions for line in order.items}[1] == "extra spicy"

    def test_empty_cart_is_rejected(self, checkout):
        with pytest.raises(ValidationError):
            checkout.place_order_from_cart(USER, RESTAURANT, "Road 1", "0700")


class TestConcurrency:
    def test_concurrent_checkouts_get_unique_order_numbers(self, session_factory, catalog, notifier):
        workers = 8
        barrier = threading.Barrier(workers)
        numbers, errors = [], []
        lock = threading.Lock()

        def place(user_id):
            session = session_factory()
            try:
                svc = CheckoutService(session, catalog, notifier=notifier)
                barrier.wait()
                order = _place(svc, [LineRequest(1, 1)], user_id=user_id)
                with lock:
                    numbers.append(order.order_number)
            except Exception as e:
                with lock:
                    errors.append(e)
            finally:
                session.close()

        threads = [threading.Thread(target=place, args=(100 + i,)) for i in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(numbers) == workers
        assert len(set(numbers)) == workers
