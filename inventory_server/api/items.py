"""
Item API endpoints.

Each route forwards to one ``ItemService`` remote call and returns its result
dict unchanged. Rule violations come back as HTTP 200 with ``success`` false,
except lookups of a missing stack or drop, which are 404.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from ..error_types import ErrorType
from ..game.world_geometry import Facing
from ..services.item_service import ItemService
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

items_router = APIRouter(prefix="/api/items", tags=["items"])

_NOT_FOUND_ERRORS = {ErrorType.ITEM_NOT_FOUND.value, ErrorType.DROP_NOT_FOUND.value}


class PositionModel(BaseModel):
    """A cell on a named map."""

    map_name: str = Field(..., min_length=1)
    x: int
    y: int


class GiveItemRequest(BaseModel):
    to_player_id: str = Field(..., min_length=1)
    item_name: str = Field(..., min_length=1)
    amount: int = Field(default=1)


class UseItemRequest(BaseModel):
    item_name: str = Field(..., min_length=1)
    amount: int = Field(default=1)


class DropItemRequest(BaseModel):
    item_name: str = Field(..., min_length=1)
    position: PositionModel
    facing: Facing


class PickupItemRequest(BaseModel):
    drop_index: int
    position: PositionModel


def get_item_service(request: Request) -> ItemService:
    """Resolve the item service attached to the application by the lifespan."""
    service = getattr(request.app.state, "item_service", None)
    if service is None:
        raise RuntimeError("Item service is not configured")
    return service


def _raise_for_not_found(result: dict[str, Any]) -> dict[str, Any]:
    if not result["success"] and result.get("error_type") in _NOT_FOUND_ERRORS:
        logger.info("Item lookup failed", error_type=result["error_type"], details=result.get("details"))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result)
    return result


@items_router.get("/info")
async def get_item_info(service: ItemService = Depends(get_item_service)) -> dict[str, Any]:
    """Every item definition, in catalog order."""
    return await service.get_item_info()


@items_router.get("/dropped")
async def get_all_dropped_items(service: ItemService = Depends(get_item_service)) -> dict[str, Any]:
    """Every item currently lying on any map."""
    return await service.get_all_dropped_items()


@items_router.get("/players/{player_id}")
async def get_all_items(player_id: str, service: ItemService = Depends(get_item_service)) -> dict[str, Any]:
    return await service.get_all_items(player_id)


@items_router.get("/players/{player_id}/{item_name}")
async def get_item(player_id: str, item_name: str, service: ItemService = Depends(get_item_service)) -> dict[str, Any]:
    return _raise_for_not_found(await service.get_item(player_id, item_name))


@items_router.post("/players/{player_id}/give")
async def give_item(
    player_id: str,
    body: GiveItemRequest,
    service: ItemService = Depends(get_item_service),
) -> dict[str, Any]:
    return await service.give_item(player_id, body.to_player_id, body.item_name, body.amount)


@items_router.post("/players/{player_id}/use")
async def use_item(
    player_id: str,
    body: UseItemRequest,
    service: ItemService = Depends(get_item_service),
) -> dict[str, Any]:
    return await service.use_item(player_id, body.item_name, body.amount)


@items_router.post("/players/{player_id}/drop")
async def drop_item(
    player_id: str,
    body: DropItemRequest,
    service: ItemService = Depends(get_item_service),
) -> dict[str, Any]:
    return await service.drop_item(player_id, body.position.model_dump(), body.facing, body.item_name)


@items_router.post("/players/{player_id}/pickup")
async def pickup_item(
    player_id: str,
    body: PickupItemRequest,
    service: ItemService = Depends(get_item_service),
) -> dict[str, Any]:
    return _raise_for_not_found(await service.pickup_item(player_id, body.position.model_dump(), body.drop_index))
