# foodexpress/domain/errors.py


class OrderingError(Exception):
    """Base for every error raised by the ordering core.

    `code` is stable and is what the HTTP layer reports to clients.
    """

    code = "ordering_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(OrderingError):
    code = "validation_error"


class InvalidQuantity(ValidationError):
    code = "invalid_quantity"


class NotFound(OrderingError):
    code = "not_found"


class ItemNotFound(OrderingError):
    code = "item_not_found"

    def __init__(self, item_id: int):
        super().__init__(f"Menu item with ID {item_id} not found")
        self.item_id = item_id


class ItemUnavailable(OrderingError):
    code = "item_unavailable"

    def __init__(self, item_id: int, name: str):
        super().__init__(f'Menu item "{name}" is not available')
        self.item_id = item_id


class CatalogUnavailable(OrderingError):
    code = "catalog_unavailable"


class InvalidStatus(OrderingError):
    code = "invalid_status"


class TerminalStateViolation(OrderingError):
    code = "terminal_state_violation"


class PersistenceFailure(OrderingError):
    code = "persistence_failure"


class OrderNumberConflict(PersistenceFailure):
    """Two checkouts raced for the same day sequence; the unit is retried."""

    code = "order_number_conflict"
