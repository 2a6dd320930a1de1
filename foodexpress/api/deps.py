# foodexpress/api/deps.py
from fastapi import HTTPException

from foodexpress.domain.errors import (
    OrderingError,
    NotFound,
    ItemNotFound,
    ValidationError,
    ItemUnavailable,
    InvalidStatus,
    TerminalStateViolation,
    PersistenceFailure,
    CatalogUnavailable,
)
from foodexpress.domain.pricing import FlatPricing, PricingPolicy
from foodexpress.services.catalog_client import CatalogClient, CatalogReader
from foodexpress.services.notification_service import NotificationService

# kolejnosc ma znaczenie - pierwsze dopasowanie wygrywa
_STATUS_CODES = (
    (NotFound, 404),
    (ItemNotFound, 404),
    (ValidationError, 400),
    (ItemUnavailable, 400),
    (InvalidStatus, 409),
    (TerminalStateViolation, 409),
    (PersistenceFailure, 503),
    (CatalogUnavailable, 503),
)


def to_http(error: OrderingError) -> HTTPException:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.to_dict())
    return HTTPException(status_code=400, detail=error.to_dict())


def get_catalog() -> CatalogReader:
    return CatalogClient()


def get_pricing() -> PricingPolicy:
    return FlatPricing()


def get_notifier() -> NotificationService:
    return NotificationService()
