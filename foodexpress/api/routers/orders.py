# foodexpress/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from foodexpress.api.deps import get_catalog, get_notifier, get_pricing, to_http
from foodexpress.data.database import get_db
from foodexpress.domain.errors import OrderingError
from foodexpress.domain.pricing import PricingPolicy
from foodexpress.domain.schemas import (
    CancelIn,
    CheckoutIn,
    DriverIn,
    OrderCreate,
    OrderOut,
    OrderPageOut,
    OrderPlacedOut,
    OrderStatsOut,
    OrderStatusOut,
    StatusUpdateIn,
)
from foodexpress.services.catalog_client import CatalogReader
from foodexpress.services.checkout_service import CheckoutService, LineRequest
from foodexpress.services.fulfillment_service import FulfillmentService
from foodexpress.services.notification_service import NotificationService
from foodexpress.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_checkout(
    db: Session = Depends(get_db),
    catalog: CatalogReader = Depends(get_catalog),
    pricing: PricingPolicy = Depends(get_pricing),
    notifier: NotificationService = Depends(get_notifier),
) -> CheckoutService:
    return CheckoutService(db, catalog=catalog, pricing=pricing, notifier=notifier)


def get_fulfillment(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> FulfillmentService:
    return FulfillmentService(db, notifier=notifier)


def get_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


@router.post("", response_model=OrderPlacedOut, status_code=201)
def create_order(payload: OrderCreate, svc: CheckoutService = Depends(get_checkout)):
    """
    Tworzy zamówienie z podanej listy pozycji.
    Ceny zawsze z katalogu, koszyk zostaje do potwierdzenia zamowienia.
    """
    try:
        order = svc.place_order(
            user_id=payload.user_id,
            restaurant_id=payload.restaurant_id,
            lines=[
                LineRequest(item_id=i.id, quantity=i.quantity, instructions=i.instructions)
                for i in payload.items
            ],
            delivery_address=payload.delivery_address,
            phone=payload.phone,
            payment_method=payload.payment_method.value,
            notes=payload.notes,
        )
    except OrderingError as e:
        raise to_http(e)
    return {"order": order, "order_number": order.order_number}


@router.post("/checkout", response_model=OrderPlacedOut, status_code=201)
def checkout_cart(payload: CheckoutIn, svc: CheckoutService = Depends(get_checkout)):
    try:
        order = svc.place_order_from_cart(
            user_id=payload.user_id,
            restaurant_id=payload.restaurant_id,
            delivery_address=payload.delivery_address,
            phone=payload.phone,
            payment_method=payload.payment_method.value,
            notes=payload.notes,
        )
    except OrderingError as e:
        raise to_http(e)
    return {"order": order, "order_number": order.order_number}


@router.get("/mine", response_model=list[OrderOut])
def my_orders(user_id: int = Query(...), svc: OrderService = Depends(get_service)):
    return svc.get_by_user(user_id)


@router.get("/stats", response_model=OrderStatsOut)
def order_stats(svc: OrderService = Depends(get_service)):
    return svc.get_stats()


@router.get("", response_model=OrderPageOut)
def list_orders(
    status: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(50),
    svc: OrderService = Depends(get_service),
):
    """Lista zamowien dla admina, stronicowana, opcjonalny filtr po statusie."""
    try:
        if status:
            orders = svc.get_by_status(status, page=page, limit=limit)
        else:
            orders = svc.get_all(page=page, limit=limit)
    except OrderingError as e:
        raise to_http(e)
    return {"count": len(orders), "page": page, "limit": limit, "data": orders}


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int | None = Query(None),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_by_id(order_id, user_id)
    except OrderingError as e:
        raise to_http(e)


@router.get("/{order_id}/status", response_model=OrderStatusOut)
def track_order(
    order_id: int,
    user_id: int = Query(...),
    svc: OrderService = Depends(get_service),
):
    try:
        return svc.get_by_id(order_id, user_id)
    except OrderingError as e:
        raise to_http(e)


@router.put("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    payload: CancelIn | None = None,
    user_id: int = Query(...),
    svc: FulfillmentService = Depends(get_fulfillment),
):
    """Anulowanie przez klienta - tylko wlasne i tylko pending."""
    try:
        return svc.cancel_order(order_id, user_id, reason=payload.reason if payload else None)
    except OrderingError as e:
        raise to_http(e)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    svc: FulfillmentService = Depends(get_fulfillment),
):
    try:
        return svc.set_status(order_id, payload.status, payload.cancellation_reason)
    except OrderingError as e:
        raise to_http(e)


@router.put("/{order_id}/driver", response_model=OrderOut)
def assign_driver(
    order_id: int,
    payload: DriverIn,
    svc: FulfillmentService = Depends(get_fulfillment),
):
    try:
        return svc.assign_driver(order_id, payload.driver_id)
    except OrderingError as e:
        raise to_http(e)
