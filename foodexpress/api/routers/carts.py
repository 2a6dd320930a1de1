#foodexpress/api/routers/carts.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from foodexpress.api.deps import get_catalog, to_http
from foodexpress.data.database import get_db
from foodexpress.domain.errors import OrderingError
from foodexpress.domain.schemas import (
    CartItemIn,
    CartQuantityIn,
    CartOut,
    CartLineChangeOut,
)
from foodexpress.services.cart_service import CartService
from foodexpress.services.catalog_client import CatalogReader

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(
    db: Session = Depends(get_db),
    catalog: CatalogReader = Depends(get_catalog),
) -> CartService:
    return CartService(db=db, catalog=catalog)


@router.get("", response_model=CartOut)
def get_cart(user_id: int = Query(...), svc: CartService = Depends(get_service)):
    try:
        return svc.get_cart(user_id)
    except OrderingError as e:
        raise to_http(e)


@router.get("/count")
def get_cart_count(user_id: int = Query(...), svc: CartService = Depends(get_service)):
    return {"count": svc.get_count(user_id)}


@router.get("/total")
def get_cart_total(user_id: int = Query(...), svc: CartService = Depends(get_service)):
    try:
        return {"total": svc.get_total(user_id)}
    except OrderingError as e:
        raise to_http(e)


@router.post("/items", response_model=CartLineChangeOut, status_code=201)
def add_item(
    payload: CartItemIn,
    user_id: int = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.add_item(
            user_id=user_id,
            item_id=payload.item_id,
            quantity=payload.quantity,
            instructions=payload.instructions,
        )
    except OrderingError as e:
        raise to_http(e)


@router.put("/items/{line_id}", response_model=CartLineChangeOut)
def update_item(
    line_id: int,
    payload: CartQuantityIn,
    user_id: int = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        return svc.update_quantity(user_id, line_id, payload.quantity)
    except OrderingError as e:
        raise to_http(e)


@router.delete("/items/{line_id}", status_code=204)
def remove_item(
    line_id: int,
    user_id: int = Query(...),
    svc: CartService = Depends(get_service),
):
    try:
        svc.remove_item(user_id, line_id)
    except OrderingError as e:
        raise to_http(e)


@router.delete("")
def clear_cart(user_id: int = Query(...), svc: CartService = Depends(get_service)):
    try:
        return {"items_removed": svc.clear(user_id)}
    except OrderingError as e:
        raise to_http(e)
