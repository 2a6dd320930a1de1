from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.orm import Session

from foodexpress.data.database import transaction
from foodexpress.data.models.cart_item import CartItemModel
from foodexpress.domain.errors import InvalidQuantity, ItemNotFound, NotFound
from foodexpress.domain.pricing import ZERO, line_subtotal
from foodexpress.repos.cart_repo import CartRepo
from foodexpress.services.catalog_client import CatalogReader
from foodexpress.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk uzytkownika przed checkoutem.
    commands (add, update, remove, clear) - kazda komenda to osobny commit
    query (get_cart, get_total, get_count) - ceny zawsze aktualne z katalogu
    """

    def __init__(self, db: Session, catalog: CatalogReader):
        self.db = db
        self.repo = CartRepo(db)
        self.catalog = catalog

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        lines = self.repo.get_lines(user_id)

        items = []
        total = ZERO
        for line in lines:
            try:
                item = self.catalog.resolve_item(line.item_id)
            except ItemNotFound:
                logger.warning(f"Cart line {line.id}: item {line.item_id} no longer in catalog")
                item = None

            entry = {
                "id": line.id,
                "item_id": line.item_id,
                "restaurant_id": line.restaurant_id,
                "quantity": line.quantity,
                "instructions": line.instructions,
                "name": item.name if item else None,
                "price": item.price if item else None,
                "available": bool(item and item.available),
                "subtotal": ZERO,
            }
            if item and item.available:
                entry["subtotal"] = line_subtotal(item.price, line.quantity)
                total += entry["subtotal"]
            items.append(entry)

        return {
            "user_id": user_id,
            "items": items,
            "total": total,
            "count": sum(line.quantity for line in lines),
        }

    def get_total(self, user_id: int) -> Decimal:
        return self.get_cart(user_id)["total"]

    def get_count(self, user_id: int) -> int:
        return self.repo.count_quantity(user_id)

    #commands
    def add_item(
        self,
        user_id: int,
        item_id: int,
        quantity: int = 1,
        instructions: str | None = None,
    ) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidQuantity("Quantity must be at least 1")

        # katalog zwraca ItemNotFound dla nieznanego id
        item = self.catalog.resolve_item(item_id)

        with transaction(self.db):
            existing = self.repo.get_line_by_item(user_id, item_id)

            if existing:
                logger.info(
                    f"Item {item_id} already in cart of user {user_id}, quantity "
                    f"{existing.quantity} -> {existing.quantity + quantity}"
                )
                existing.quantity += quantity
                if instructions:
                    existing.instructions = instructions
                line = existing
            else:
                logger.info(f"Adding item {item_id} to cart of user {user_id}")
                line = self.repo.add_line(
                    CartItemModel(
                        user_id=user_id,
                        item_id=item_id,
                        restaurant_id=item.restaurant_id,
                        quantity=quantity,
                        instructions=instructions,
                    )
                )

        return {"id": line.id, "item_id": item_id, "quantity": line.quantity}

    def update_quantity(self, user_id: int, line_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise InvalidQuantity("Quantity must be at least 1, remove the item instead")

        with transaction(self.db):
            line = self._owned_line(user_id, line_id)
            line.quantity = quantity

        logger.info(f"Cart line {line_id} quantity set to {quantity}")
        return {"id": line.id, "item_id": line.item_id, "quantity": line.quantity}

    def remove_item(self, user_id: int, line_id: int) -> None:
        with transaction(self.db):
            line = self._owned_line(user_id, line_id)
            self.repo.delete_line(line)

        logger.info(f"Cart line {line_id} removed for user {user_id}")

    def clear(self, user_id: int, restaurant_id: int | None = None) -> int:
        with transaction(self.db):
            removed = self.repo.delete_lines(user_id, restaurant_id)

        logger.info(f"Cart of user {user_id} cleared, {removed} lines removed")
        return removed

    def _owned_line(self, user_id: int, line_id: int) -> CartItemModel:
        line = self.repo.get_line(line_id)
        # cudzy koszyk raportujemy tak samo jak brak linii
        if not line or line.user_id != user_id:
            raise NotFound("Cart item not found")
        return line
