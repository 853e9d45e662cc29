"""Custom exceptions for cut-lens."""


class CutLensError(Exception):
    """Base exception for cut-lens."""

    pass


class ValidationError(CutLensError):
    """Raised when a request is missing a field the operation requires."""

    pass


class NotFoundError(CutLensError):
    """Raised when a referenced cut or variation does not exist."""

    pass


class ConflictError(CutLensError):
    """Raised on a uniqueness violation or a delete blocked by references."""

    pass


class StoreTimeoutError(CutLensError, TimeoutError):
    """Raised when a store call exceeds its timeout. Safe to retry."""

    pass
