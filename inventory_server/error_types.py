"""
Centralized error types and constants for the inventory server.

Every failure a remote call can report carries one of these types, so clients
can branch on a stable string instead of parsing messages.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorType(Enum):
    """Standardized error types for consistent categorization."""

    # Catalog
    UNKNOWN_ITEM = "unknown_item"
    ITEM_NOT_EXCHANGEABLE = "item_not_exchangeable"
    ITEM_NOT_USABLE = "item_not_usable"
    ITEM_NOT_DROPPABLE = "item_not_droppable"

    # Inventory
    INSUFFICIENT_QUANTITY = "insufficient_quantity"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_NOT_FOUND = "item_not_found"
    ITEM_USE_FAILED = "item_use_failed"

    # World drops
    DROP_NOT_FOUND = "drop_not_found"
    TOO_FAR_AWAY = "too_far_away"
    INVALID_POSITION = "invalid_position"

    # Delivery and system
    NOTIFICATION_DELIVERY = "notification_delivery"
    CONFIGURATION_ERROR = "configuration_error"
    PERSISTENCE_ERROR = "persistence_error"
    INTERNAL_ERROR = "internal_error"


class ErrorSeverity(Enum):
    """Error severity levels for logging and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def create_standard_error_response(
    error_type: ErrorType,
    message: str,
    user_friendly: str | None = None,
    details: dict[str, Any] | None = None,
    severity: ErrorSeverity = ErrorSeverity.LOW,
) -> dict[str, Any]:
    """
    Create the failed-result payload returned by remote calls.

    Args:
        error_type: The type of error
        message: Technical error message
        user_friendly: Message safe to show to the player (defaults to message)
        details: Additional error details
        severity: Error severity level

    Returns:
        Result dictionary with ``success`` set to False
    """
    return {
        "success": False,
        "error_type": error_type.value,
        "result": user_friendly or message,
        "message": message,
        "details": details or {},
        "severity": severity.value,
        "timestamp": datetime.now(UTC).isoformat(),
    }


class ErrorMessages:
    """Player-facing messages for consistent user experience."""

    UNKNOWN_ITEM = "That item does not exist."
    ITEM_NOT_EXCHANGEABLE = "That item cannot be given to other players."
    ITEM_NOT_USABLE = "That item cannot be used."
    ITEM_NOT_DROPPABLE = "That item cannot be dropped."
    INSUFFICIENT_QUANTITY = "You do not have enough of that item."
    INVALID_QUANTITY = "Quantity must be a positive whole number."
    ITEM_NOT_FOUND = "You have no record of that item."
    ITEM_USE_FAILED = "That item could not be used right now."
    DROP_NOT_FOUND = "That item is no longer on the ground."
    TOO_FAR_AWAY = "You are too far away to pick that up."
    INVALID_POSITION = "That position is not on the map."
    INTERNAL_ERROR = "An internal error occurred"
