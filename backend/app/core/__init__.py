from .config import settings
from .exceptions import (
    DeliveryError,
    Forbidden,
    HelpdeskError,
    Internal,
    InvalidInput,
    NotFound,
    StorageError,
    Unauthenticated,
)
from .security import Identity, resolve_identity, verify_token

__all__ = [
    "settings",
    "DeliveryError",
    "Forbidden",
    "HelpdeskError",
    "Identity",
    "Internal",
    "InvalidInput",
    "NotFound",
    "StorageError",
    "Unauthenticated",
    "resolve_identity",
    "verify_token",
]
