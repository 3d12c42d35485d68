"""Item system package.

Exposes the catalog, its definition models and the item base classes.
"""

from .catalog import ItemCatalog
from .item_classes import ITEM_CLASSES, ItemClass, Usable, register_item_class
from .models import ItemConfigModel, ItemDefinition

__all__ = [
    "ITEM_CLASSES",
    "ItemCatalog",
    "ItemClass",
    "ItemConfigModel",
    "ItemDefinition",
    "Usable",
    "register_item_class",
]
