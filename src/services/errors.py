"""Typed domain errors raised by the inventory and sharing services.

Every error carries a machine-readable ``code``; the API layer maps the
base classes to HTTP status codes in ``src.main``.

    FoodShareError
    +-- ValidationError          invalid caller input
    +-- NotFoundError            missing, soft-deleted, or not the caller's
    +-- ForbiddenError           caller lacks the role for the operation
    +-- ConflictError            cross-entity invariant violated right now
    |   +-- InsufficientQuantityError
    +-- InternalError            unexpected persistence failure
"""


class FoodShareError(Exception):
    """Base exception for all domain errors."""

    code: str = "FOODSHARE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(FoodShareError):
    """Caller input violates a precondition."""

    code: str = "VALIDATION_ERROR"


class NotFoundError(FoodShareError):
    """Referenced entity does not exist or is not visible to the caller."""

    code: str = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: object | None = None, message: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} not found")


class ForbiddenError(FoodShareError):
    """Caller is identified but lacks the role required."""

    code: str = "FORBIDDEN"


class ConflictError(FoodShareError):
    """Operation is valid on its own but conflicts with current state."""

    code: str = "CONFLICT"


class InsufficientQuantityError(ConflictError):
    """Consumption would drive an item's quantity below zero."""

    code: str = "INSUFFICIENT_QUANTITY"

    def __init__(self, item_id: int, requested: float, available: float | None = None):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient quantity in inventory item {item_id} "
            f"(requested {requested:g}"
            + (f", available {available:g})" if available is not None else ")")
        )


class InternalError(FoodShareError):
    """Unexpected persistence or collaborator failure."""

    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
