"""Accounts domain - accounts, labels and the management API."""

from .models import Account, Label, generate_uid
from .router import router
from .schemas import (
    AccountCreate,
    AccountRead,
    AccountWithLabels,
    LabelCreate,
    LabelRead,
    LabelUpdate,
)
from .service import AccountError, AccountService, LabelService, LabelSnapshot
from .validation import (
    LabelScope,
    LabelValidationError,
    normalize_field,
    validate_fields,
)

__all__ = [
    # Router
    "router",
    # Models
    "Account",
    "Label",
    "generate_uid",
    # API Schemas
    "AccountCreate",
    "AccountRead",
    "AccountWithLabels",
    "LabelCreate",
    "LabelRead",
    "LabelUpdate",
    # Services
    "AccountService",
    "LabelService",
    "LabelSnapshot",
    "AccountError",
    # Validation
    "LabelScope",
    "LabelValidationError",
    "normalize_field",
    "validate_fields",
]
