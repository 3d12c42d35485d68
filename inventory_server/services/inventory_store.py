"""
Per-player item stacks.

Every quantity change goes through this store. Each mutating operation runs
all of its checks before touching any stack, so a rejected call leaves the
store exactly as it was. Successful mutations report through ``on_change``,
which the item service wires to the persistence scheduler.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from inventory_server.exceptions import (
    InsufficientQuantityError,
    InvalidQuantityError,
    ItemNotExchangeableError,
    ItemNotFoundError,
    ItemNotUsableError,
    ItemUseFailedError,
)
from inventory_server.game.items.catalog import ItemCatalog
from inventory_server.game.items.item_classes import Usable
from inventory_server.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ItemStack:
    """Quantity of one item held by one player. Never negative; zero stacks are kept."""

    amount: int = 0


def _validate_amount(amount: Any, item_name: str) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidQuantityError(
            f"Amount must be a positive integer, got {amount!r}",
            item_name=item_name,
            details={"amount": repr(amount)},
        )
    return amount


class InventoryStore:
    """Mapping of player identity to that player's item stacks."""

    def __init__(self, catalog: ItemCatalog, on_change: Callable[[], None]) -> None:
        self._catalog = catalog
        self._on_change = on_change
        self._inventories: dict[str, dict[str, ItemStack]] = {}

    def _get_or_create(self, player_id: str) -> dict[str, ItemStack]:
        inventory = self._inventories.get(player_id)
        if inventory is None:
            inventory = {}
            self._inventories[player_id] = inventory
            logger.info("Player inventory created", player_id=player_id)
        return inventory

    def ensure_player(self, player_id: str) -> dict[str, ItemStack]:
        """Get-or-create the player's inventory. Always schedules a flush, even when nothing changed."""
        inventory = self._get_or_create(player_id)
        self._on_change()
        return inventory

    def has_player(self, player_id: str) -> bool:
        return player_id in self._inventories

    def get_all(self, player_id: str) -> dict[str, int]:
        inventory = self.ensure_player(player_id)
        return {item_name: stack.amount for item_name, stack in inventory.items()}

    def get(self, player_id: str, item_name: str) -> int:
        """Amount held. A zero-amount record counts as found."""
        stack = self._inventories.get(player_id, {}).get(item_name)
        if stack is None:
            raise ItemNotFoundError(
                f"Player {player_id} has no record of {item_name}",
                item_name=item_name,
                details={"player_id": player_id},
            )
        return stack.amount

    def held(self, player_id: str, item_name: str) -> int:
        stack = self._inventories.get(player_id, {}).get(item_name)
        return 0 if stack is None else stack.amount

    def require_quantity(self, player_id: str, item_name: str, amount: int) -> None:
        held = self.held(player_id, item_name)
        if held < amount:
            raise InsufficientQuantityError(
                f"Player {player_id} holds {held} {item_name}, needs {amount}",
                item_name=item_name,
                requested=amount,
                held=held,
            )

    def transfer(self, from_id: str, to_id: str, item_name: str, amount: int) -> tuple[int, int]:
        """
        Move ``amount`` of an exchangeable item between players.

        Returns:
            (sender amount after, recipient amount after)

        Raises:
            InvalidQuantityError, UnknownItemError, ItemNotExchangeableError,
            InsufficientQuantityError. None of them change any stack.
        """
        _validate_amount(amount, item_name)
        definition = self._catalog.require(item_name)
        if not definition.exchangeable:
            raise ItemNotExchangeableError(f"{item_name} is not exchangeable", item_name=item_name)
        self.require_quantity(from_id, item_name, amount)

        source = self._get_or_create(from_id)[item_name]
        destination = self._get_or_create(to_id).setdefault(item_name, ItemStack())
        source.amount -= amount
        destination.amount += amount
        self._on_change()

        logger.info(
            "Items transferred",
            from_player_id=from_id,
            to_player_id=to_id,
            item_name=item_name,
            amount=amount,
        )
        return source.amount, destination.amount

    def consume(self, player_id: str, item_name: str, amount: int) -> dict[str, Any]:
        """
        Use up ``amount`` of a usable item and run its use-effect.

        Returns:
            The use-effect result.

        Raises:
            ItemUseFailedError: The use-effect raised; the decrement is rolled back.
        """
        _validate_amount(amount, item_name)
        definition = self._catalog.require(item_name)
        handler = definition.handler
        if not definition.usable or not isinstance(handler, Usable):
            raise ItemNotUsableError(f"{item_name} is not usable", item_name=item_name)
        self.require_quantity(player_id, item_name, amount)

        stack = self._inventories[player_id][item_name]
        stack.amount -= amount
        try:
            effect = handler.apply(player_id, amount)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            stack.amount += amount
            raise ItemUseFailedError(
                f"Use-effect of {item_name} failed: {exc}",
                item_name=item_name,
                details={"player_id": player_id, "amount": amount, "error_type": type(exc).__name__},
            ) from exc
        self._on_change()
        return effect

    def withdraw(self, player_id: str, item_name: str, amount: int = 1) -> int:
        """Remove ``amount`` from a stack the player holds. Returns the amount left."""
        _validate_amount(amount, item_name)
        self.require_quantity(player_id, item_name, amount)
        stack = self._inventories[player_id][item_name]
        stack.amount -= amount
        self._on_change()
        return stack.amount

    def deposit(self, player_id: str, item_name: str, amount: int = 1) -> int:
        """Add ``amount`` to the player's stack, creating it if needed. Returns the new amount."""
        _validate_amount(amount, item_name)
        stack = self._get_or_create(player_id).setdefault(item_name, ItemStack())
        stack.amount += amount
        self._on_change()
        return stack.amount

    def snapshot(self) -> dict[str, dict[str, dict[str, int]]]:
        return {
            player_id: {item_name: {"amount": stack.amount} for item_name, stack in inventory.items()}
            for player_id, inventory in self._inventories.items()
        }

    def restore(self, items: Mapping[str, Mapping[str, int]]) -> None:
        """Replace all inventories with ``{player_id: {item_name: amount}}``."""
        self._inventories = {
            player_id: {item_name: ItemStack(amount=amount) for item_name, amount in inventory.items()}
            for player_id, inventory in items.items()
        }
        logger.info("Inventories restored", player_count=len(self._inventories))
