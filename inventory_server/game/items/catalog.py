from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from inventory_server.exceptions import CatalogLoadError, UnknownItemError
from inventory_server.game.items.item_classes import resolve_item_class
from inventory_server.game.items.models import ItemCatalogFileModel, ItemDefinition
from inventory_server.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class ItemCatalog:
    """Read-only registry of item definitions, in configuration order."""

    def __init__(self, definitions: Mapping[str, ItemDefinition]):
        self._definitions: Mapping[str, ItemDefinition] = MappingProxyType(dict(definitions))

    @classmethod
    def load(cls, config: Mapping[str, Any]) -> ItemCatalog:
        """Build the catalog from an already-parsed configuration mapping.

        Raises:
            CatalogLoadError: The mapping is malformed or names an unregistered base class.
        """
        try:
            parsed = ItemCatalogFileModel.model_validate(config)
        except ValidationError as exc:
            raise CatalogLoadError(
                "Item configuration failed validation",
                config_key="items",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

        definitions: dict[str, ItemDefinition] = {}
        for index, (item_name, entry) in enumerate(parsed.items.items()):
            item_class = resolve_item_class(entry.base_class)
            if item_class is None:
                raise CatalogLoadError(
                    f"Item '{item_name}' references unknown base class '{entry.base_class}'",
                    config_key=f"items.{item_name}.baseClass",
                    details={"item_name": item_name, "base_class": entry.base_class},
                )

            handler = item_class(item_name, entry.image_path, entry.properties)
            definitions[item_name] = ItemDefinition(
                name=item_name,
                index=index,
                image_path=entry.image_path,
                base_class=entry.base_class,
                layer=entry.layer,
                properties=entry.properties,
                handler=handler,
                **handler.flags(),
            )

        logger.info("Item catalog loaded", item_count=len(definitions), items=list(definitions))
        return cls(definitions)

    @classmethod
    def load_from_path(cls, path: Path | str) -> ItemCatalog:
        """Read a JSON configuration file and build the catalog from it."""
        config_path = Path(path)
        if not config_path.exists():
            raise CatalogLoadError(f"Item configuration not found: {config_path}", config_key="catalog.config_path")

        try:
            payload = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise CatalogLoadError(
                f"Item configuration is not valid JSON: {config_path}",
                config_key="catalog.config_path",
                details={"error": str(exc)},
            ) from exc

        if not isinstance(payload, dict):
            raise CatalogLoadError(f"Item configuration must be a JSON object: {config_path}")

        return cls.load(payload)

    def get(self, item_name: str) -> ItemDefinition | None:
        return self._definitions.get(item_name)

    def require(self, item_name: str) -> ItemDefinition:
        definition = self._definitions.get(item_name)
        if definition is None:
            raise UnknownItemError(f"Item not in catalog: {item_name}", item_name=item_name)
        return definition

    def list_items(self) -> list[tuple[str, ItemDefinition]]:
        """Every (name, definition) pair in catalog order. Clients rely on this order."""
        return list(self._definitions.items())

    def __contains__(self, item_name: object) -> bool:
        return item_name in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)
