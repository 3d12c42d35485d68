"""Item base classes.

Each catalog entry names a base class. The class decides the capability flags
every item of that kind shares, and implements the use-effect for usable kinds.
Instances are created once per catalog entry at load time and kept on the
definition, so lookups by base-class name only happen during loading.
"""

from __future__ import annotations

from typing import Any, ClassVar, Protocol, runtime_checkable

from inventory_server.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Usable(Protocol):
    """Capability implemented by item handlers with a use-effect."""

    def apply(self, player_id: str, amount: int) -> dict[str, Any]: ...


class ItemClass:
    """
    Shared behaviour for one base class of items.

    Usable classes also implement ``apply``, which makes them ``Usable``.
    """

    base_class: ClassVar[str] = ""
    show: ClassVar[bool] = True
    exchangeable: ClassVar[bool] = True
    droppable: ClassVar[bool] = True
    usable: ClassVar[bool] = False

    def __init__(self, item_name: str, image_path: str, properties: dict[str, Any] | None = None):
        self.item_name = item_name
        self.image_path = image_path
        self.properties = dict(properties or {})

    def flags(self) -> dict[str, bool]:
        return {
            "show": self.show,
            "exchangeable": self.exchangeable,
            "droppable": self.droppable,
            "usable": self.usable,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(item_name={self.item_name!r})"


ITEM_CLASSES: dict[str, type[ItemClass]] = {}


def register_item_class(cls: type[ItemClass]) -> type[ItemClass]:
    """Class decorator adding an item class to the base-class registry."""
    if not cls.base_class:
        raise ValueError(f"{cls.__name__} must define base_class")
    if cls.usable and not issubclass(cls, Usable):
        raise ValueError(f"{cls.__name__} is usable but has no apply() use-effect")
    ITEM_CLASSES[cls.base_class] = cls
    return cls


def resolve_item_class(base_class: str) -> type[ItemClass] | None:
    return ITEM_CLASSES.get(base_class)


@register_item_class
class Consumable(ItemClass):
    """Potions, food and other items used up on use."""

    base_class = "Consumable"
    usable = True

    def apply(self, player_id: str, amount: int) -> dict[str, Any]:
        effect = self.properties.get("effect")
        logger.info(
            "Consumable used",
            player_id=player_id,
            item_name=self.item_name,
            amount=amount,
            effect=effect,
        )
        return {"item_name": self.item_name, "amount": amount, "effect": effect}


@register_item_class
class Equipment(ItemClass):
    """Weapons, armour and tools. Traded and dropped, never consumed."""

    base_class = "Equipment"


@register_item_class
class Currency(ItemClass):
    """Coins and tokens. Traded between players but never left on the ground."""

    base_class = "Currency"
    droppable = False


@register_item_class
class KeyItem(ItemClass):
    """Quest keys bound to their holder."""

    base_class = "KeyItem"
    exchangeable = False
    droppable = False
    usable = True

    def apply(self, player_id: str, amount: int) -> dict[str, Any]:
        unlocks = self.properties.get("unlocks")
        logger.info("Key item used", player_id=player_id, item_name=self.item_name, unlocks=unlocks)
        return {"item_name": self.item_name, "amount": amount, "unlocks": unlocks}


@register_item_class
class Badge(ItemClass):
    """Hidden progress counters, never shown in the client inventory."""

    base_class = "Badge"
    show = False
    exchangeable = False
    droppable = False


__all__ = [
    "Badge",
    "Consumable",
    "Currency",
    "Equipment",
    "ITEM_CLASSES",
    "ItemClass",
    "KeyItem",
    "Usable",
    "register_item_class",
    "resolve_item_class",
]
