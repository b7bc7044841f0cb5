# clothing_inventory/core/errors.py
from typing import Any, List, Optional


class InventoryAppError(Exception):
    """Base class for every error the service reports to its callers.

    Each error carries a stable machine code, a human readable message that
    the UI shows as a notification, and optional structured details.
    """

    code = "error"
    status_code = 400

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(InventoryAppError):
    code = "validation_error"
    status_code = 422


class NotFoundError(InventoryAppError):
    code = "not_found"
    status_code = 404


class InsufficientStockError(InventoryAppError):
    code = "insufficient_stock"
    status_code = 409

    def __init__(self, clothing_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for clothing {clothing_id}: "
            f"requested {requested}, available {available}",
            details={"clothingId": clothing_id, "requested": requested, "available": available},
        )
        self.clothing_id = clothing_id
        self.requested = requested
        self.available = available


class PartialWriteError(InventoryAppError):
    """A multi-line submission stopped partway; earlier lines stay written."""

    code = "partial_write"
    status_code = 409

    def __init__(self, line_index: int, completed_ids: List[int], cause: InventoryAppError):
        super().__init__(
            f"Line {line_index + 1} failed after {len(completed_ids)} line(s) were saved: {cause.message}",
            details={
                "lineIndex": line_index,
                "completedIds": list(completed_ids),
                "cause": {"code": cause.code, "message": cause.message, "details": cause.details},
            },
        )
        self.line_index = line_index
        self.completed_ids = list(completed_ids)
        self.cause = cause


class StoreInitError(InventoryAppError):
    code = "store_unavailable"
    status_code = 503


class SyncError(InventoryAppError):
    code = "sync_failed"
    status_code = 502


class InvalidBackupFormatError(InventoryAppError):
    code = "invalid_backup"
    status_code = 400


AUTH_ERROR_KINDS = (
    "invalid-email",
    "user-disabled",
    "user-not-found",
    "wrong-password",
    "network-request-failed",
    "too-many-requests",
    "invalid-credentials",
    "timeout",
    "unknown",
)

_AUTH_MESSAGES = {
    "invalid-email": "Invalid email address",
    "user-disabled": "This account has been disabled",
    "user-not-found": "Wrong email or password",
    "wrong-password": "Wrong email or password",
    "invalid-credentials": "Wrong email or password",
    "network-request-failed": "Network error, check the connection and try again",
    "too-many-requests": "Too many attempts, try again later",
    "timeout": "Sign-in timed out, try again",
    "unknown": "Sign-in failed, try again later",
}


class AuthError(InventoryAppError):
    status_code = 401

    def __init__(self, kind: str, message: Optional[str] = None):
        if kind not in AUTH_ERROR_KINDS:
            kind = "unknown"
        super().__init__(message or _AUTH_MESSAGES[kind], details={"kind": kind})
        self.kind = kind
        self.code = f"auth_{kind.replace('-', '_')}"
        if kind in ("network-request-failed", "timeout"):
            self.status_code = 503
