# foodexpress/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, List
from decimal import Decimal
from datetime import datetime

from foodexpress.domain.status import OrderStatus, PaymentMethod


class CartItemIn(BaseModel):
    """Schema dla dodawania pozycji do koszyka."""

    item_id: int = Field(..., gt=0, description="ID pozycji menu (musi być > 0)")
    quantity: int = Field(1, gt=0, description="Ilość (musi być > 0)")
    instructions: str | None = Field(None, max_length=500)


class CartQuantityIn(BaseModel):
    # bez gt=0 - serwis zwraca invalid_quantity z wlasnym kodem bledu
    quantity: int


class CartLineOut(BaseModel):
    id: int
    item_id: int
    restaurant_id: int | None = None
    quantity: int
    instructions: str | None = None
    name: str | None = None
    price: Decimal | None = None
    available: bool
    subtotal: Decimal


class CartOut(BaseModel):
    """Schema dla koszyka (response), ceny aktualne z katalogu."""

    user_id: int
    items: List[CartLineOut]
    total: Decimal
    count: int


class CartLineChangeOut(BaseModel):
    id: int
    item_id: int
    quantity: int


class OrderLineIn(BaseModel):
    """Pozycja zamowienia - bez ceny, cene bierzemy z katalogu."""

    id: int = Field(..., gt=0, description="ID pozycji menu")
    quantity: int = Field(..., gt=0)
    instructions: str | None = Field(None, max_length=500)


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia."""

    user_id: int = Field(..., gt=0)
    restaurant_id: int = Field(..., gt=0)
    items: List[OrderLineIn] = Field(..., min_length=1)
    delivery_address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=20)
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str | None = None


class CheckoutIn(BaseModel):
    """Zamowienie z zawartosci koszyka dla jednej restauracji."""

    user_id: int = Field(..., gt=0)
    restaurant_id: int = Field(..., gt=0)
    delivery_address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=20)
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str | None = None


class StatusUpdateIn(BaseModel):
    # string, nie enum - nieznany status to invalid_status z serwisu
    status: str
    cancellation_reason: str | None = None


class CancelIn(BaseModel):
    reason: str | None = None


class DriverIn(BaseModel):
    driver_id: int = Field(..., gt=0)


class OrderLineOut(BaseModel):
    id: int
    item_id: int
    item_name: str
    item_price: Decimal
    quantity: int
    subtotal: Decimal
    instructions: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    order_number: str
    user_id: int
    restaurant_id: int
    status: OrderStatus
    subtotal: Decimal
    delivery_fee: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    payment_method: str
    payment_status: str
    notes: str | None = None
    delivery_address: str
    phone: str
    driver_id: int | None = None
    estimated_delivery: datetime | None = None
    actual_delivery: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderLineOut]

    model_config = ConfigDict(from_attributes=True)


class OrderStatusOut(BaseModel):
    """Sledzenie zamowienia przez klienta."""

    id: int
    order_number: str
    status: OrderStatus
    created_at: datetime
    estimated_delivery: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderPlacedOut(BaseModel):
    order: OrderOut
    order_number: str


class OrderPageOut(BaseModel):
    count: int
    page: int
    limit: int
    data: List[OrderOut]


class OrderStatsOut(BaseModel):
    total_orders: int
    total_revenue: Decimal
    by_status: Dict[str, int]
