"""
Custom HTTP exceptions for the API.

Generic CRUD errors plus the inventory ledger taxonomy. Ledger errors carry a
machine-readable ``code`` and are rendered by the handler in ``vaxsync.main``
as ``{"success": false, "error": {...}}``.
"""

from fastapi import HTTPException, status


class CredentialsException(HTTPException):
    """Invalid credentials (401)."""

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(HTTPException):
    """Insufficient permissions (403)."""

    def __init__(self, detail: str = "You are not allowed to perform this action"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class NotFoundException(HTTPException):
    """Resource not found (404)."""

    def __init__(self, resource: str = "Resource", detail: str | None = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail or f"{resource} not found",
        )


class ConflictException(HTTPException):
    """Data conflict (409), e.g. duplicated name."""

    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class ValidationException(HTTPException):
    """Business validation error (422)."""

    def __init__(self, detail: str = "Validation error"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


# ── Inventory ledger ─────────────────────────────────


class LedgerError(HTTPException):
    """Base class for failures raised by ledger operations."""

    code = "ledger_error"
    retryable = False

    def __init__(self, status_code: int, detail: str, **extra):
        super().__init__(status_code=status_code, detail=detail)
        self.extra = extra

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.detail, **self.extra}


class InvalidQuantity(LedgerError):
    """Non-positive or non-integer quantity (400)."""

    code = "invalid_quantity"

    def __init__(self, quantity):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            f"Quantity must be a positive integer, got {quantity!r}",
        )


class LotNotFound(LedgerError):
    """No inventory lot for the barangay/vaccine pair (404)."""

    code = "lot_not_found"

    def __init__(self, barangay_id, vaccine_id):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            f"No inventory for vaccine {vaccine_id} in barangay {barangay_id}",
            barangay_id=str(barangay_id),
            vaccine_id=str(vaccine_id),
        )


class InsufficientStock(LedgerError):
    """Requested doses exceed the doses on hand (409)."""

    code = "insufficient_stock"

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        self.shortfall = requested - available
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"Insufficient stock: requested {requested}, available {available}",
            requested=requested,
            available=available,
            shortfall=self.shortfall,
        )


class WriteConflict(LedgerError):
    """Concurrent modification kept winning after every retry (409)."""

    code = "write_conflict"
    retryable = True

    def __init__(self, attempts: int):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"Inventory row changed concurrently, gave up after {attempts} attempts",
            attempts=attempts,
        )


class StorageError(LedgerError):
    """Underlying database failure (500)."""

    code = "storage_error"
    retryable = True

    def __init__(self, detail: str = "Inventory storage failure"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
