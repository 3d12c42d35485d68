"""
Exception hierarchy for the inventory server.

Business-rule violations (``ItemRuleViolation`` subclasses) are raised by the
stores before any state changes and are turned into failed results by the item
service. Configuration errors are fatal at startup. Notification delivery
errors are raised by notifiers and only ever logged.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .error_types import ErrorMessages, ErrorType
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """Contextual information attached to every error."""

    player_id: str | None = None
    operation: str | None = None
    item_name: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "player_id": self.player_id,
            "operation": self.operation,
            "item_name": self.item_name,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class ItemServiceError(Exception):
    """
    Base exception for all inventory server errors.

    Carries an ``ErrorType`` for clients, a technical message for logs and a
    user-friendly message for players.
    """

    error_type: ErrorType = ErrorType.INTERNAL_ERROR
    default_user_message: str = ErrorMessages.INTERNAL_ERROR
    log_level: str = "error"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
        user_friendly: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}
        self.user_friendly = user_friendly or self.default_user_message
        self.timestamp = datetime.now(UTC)

        self._log_error()

    def _log_error(self) -> None:
        log_method = getattr(logger, self.log_level, logger.error)
        log_method(
            "Inventory server error occurred",
            error_type=self.error_type.value,
            error_class=self.__class__.__name__,
            message=self.message,
            context=self.context.to_dict(),
            details=self.details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "user_friendly": self.user_friendly,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(ItemServiceError):
    """Configuration and setup errors. Fatal at startup."""

    error_type = ErrorType.CONFIGURATION_ERROR

    def __init__(self, message: str, context: ErrorContext | None = None, config_key: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class CatalogLoadError(ConfigurationError):
    """The item catalog could not be built from its configuration."""


class PersistenceError(ItemServiceError):
    """Stored data could not be read or written."""

    error_type = ErrorType.PERSISTENCE_ERROR


class NotificationDeliveryError(ItemServiceError):
    """A best-effort client notification could not be delivered."""

    error_type = ErrorType.NOTIFICATION_DELIVERY
    log_level = "debug"

    def __init__(self, message: str, context: ErrorContext | None = None, recipient_id: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.recipient_id = recipient_id
        if recipient_id:
            self.details["recipient_id"] = recipient_id


class ItemRuleViolation(ItemServiceError):
    """Base class for recoverable business-rule violations."""

    log_level = "info"

    def __init__(self, message: str, context: ErrorContext | None = None, item_name: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.item_name = item_name
        if item_name:
            self.details["item_name"] = item_name


class UnknownItemError(ItemRuleViolation):
    """The item name is not in the catalog."""

    error_type = ErrorType.UNKNOWN_ITEM
    default_user_message = ErrorMessages.UNKNOWN_ITEM


class ItemNotExchangeableError(ItemRuleViolation):
    """The item definition forbids giving it to another player."""

    error_type = ErrorType.ITEM_NOT_EXCHANGEABLE
    default_user_message = ErrorMessages.ITEM_NOT_EXCHANGEABLE


class ItemNotUsableError(ItemRuleViolation):
    """The item definition forbids using it."""

    error_type = ErrorType.ITEM_NOT_USABLE
    default_user_message = ErrorMessages.ITEM_NOT_USABLE


class ItemNotDroppableError(ItemRuleViolation):
    """The item definition forbids dropping it."""

    error_type = ErrorType.ITEM_NOT_DROPPABLE
    default_user_message = ErrorMessages.ITEM_NOT_DROPPABLE


class InsufficientQuantityError(ItemRuleViolation):
    """The player holds less than the requested amount."""

    error_type = ErrorType.INSUFFICIENT_QUANTITY
    default_user_message = ErrorMessages.INSUFFICIENT_QUANTITY

    def __init__(self, message: str, context: ErrorContext | None = None, requested: int = 0, held: int = 0, **kwargs):
        super().__init__(message, context, **kwargs)
        self.requested = requested
        self.held = held
        self.details["requested"] = requested
        self.details["held"] = held


class InvalidQuantityError(ItemRuleViolation):
    """The requested amount is not a positive integer."""

    error_type = ErrorType.INVALID_QUANTITY
    default_user_message = ErrorMessages.INVALID_QUANTITY


class ItemNotFoundError(ItemRuleViolation):
    """The player has no stack record for the item."""

    error_type = ErrorType.ITEM_NOT_FOUND
    default_user_message = ErrorMessages.ITEM_NOT_FOUND


class ItemUseFailedError(ItemRuleViolation):
    """The use-effect raised. The stack is left as it was before the call."""

    error_type = ErrorType.ITEM_USE_FAILED
    default_user_message = ErrorMessages.ITEM_USE_FAILED
    log_level = "error"


class DropNotFoundError(ItemRuleViolation):
    """The drop index is stale or was never issued."""

    error_type = ErrorType.DROP_NOT_FOUND
    default_user_message = ErrorMessages.DROP_NOT_FOUND

    def __init__(self, message: str, context: ErrorContext | None = None, drop_index: int | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.drop_index = drop_index
        if drop_index is not None:
            self.details["drop_index"] = drop_index


class TooFarAwayError(ItemRuleViolation):
    """The pickup position is not adjacent to the dropped item."""

    error_type = ErrorType.TOO_FAR_AWAY
    default_user_message = ErrorMessages.TOO_FAR_AWAY


class InvalidPositionError(ItemRuleViolation):
    """The position names an unknown map, lies outside it, or the facing is unknown."""

    error_type = ErrorType.INVALID_POSITION
    default_user_message = ErrorMessages.INVALID_POSITION


__all__ = [
    "CatalogLoadError",
    "ConfigurationError",
    "DropNotFoundError",
    "ErrorContext",
    "InsufficientQuantityError",
    "InvalidPositionError",
    "InvalidQuantityError",
    "ItemNotDroppableError",
    "ItemNotExchangeableError",
    "ItemNotFoundError",
    "ItemNotUsableError",
    "ItemRuleViolation",
    "ItemServiceError",
    "ItemUseFailedError",
    "NotificationDeliveryError",
    "PersistenceError",
    "TooFarAwayError",
    "UnknownItemError",
]
