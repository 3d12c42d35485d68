"""Persistence layer: snapshot model, collaborator protocols and data stores."""

from .data_store import InMemoryDataStore, JsonFileDataStore, create_data_store
from .protocols import ClientNotifierProtocol, DataStoreProtocol, GameMapProtocol
from .snapshot import DropCellModel, PersistedSnapshot

__all__ = [
    "ClientNotifierProtocol",
    "DataStoreProtocol",
    "DropCellModel",
    "GameMapProtocol",
    "InMemoryDataStore",
    "JsonFileDataStore",
    "PersistedSnapshot",
    "create_data_store",
]
