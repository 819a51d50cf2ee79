from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.rbac import check_permission
from playgroup.db.session import get_db

from .schemas import InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
from . import service

router = APIRouter(prefix="/api/v1/inventory", tags=["inventory"])


@router.get(
    "",
    response_model=List[InventoryItemResponse],
    dependencies=[Depends(check_permission("inventory", "read"))],
)
async def list_items(
    category: Optional[str] = Query(None),
    low_stock: bool = Query(False, alias="lowStock"),
    db: AsyncSession = Depends(get_db),
) -> List[InventoryItemResponse]:
    return await service.list_items(db, category=category, low_stock_only=low_stock)


@router.post(
    "",
    response_model=InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("inventory", "create"))],
)
async def create_item(payload: InventoryItemCreate, db: AsyncSession = Depends(get_db)) -> InventoryItemResponse:
    return await service.create_item(db, payload)


@router.get(
    "/{item_id}",
    response_model=InventoryItemResponse,
    dependencies=[Depends(check_permission("inventory", "read"))],
)
async def get_item(item_id: int, db: AsyncSession = Depends(get_db)) -> InventoryItemResponse:
    item = await service.get_item(db, item_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inventory item not found")
    return item


@router.patch(
    "/{item_id}",
    response_model=InventoryItemResponse,
    dependencies=[Depends(check_permission("inventory", "update"))],
)
async def update_item(
    item_id: int,
    payload: InventoryItemUpdate,
    db: AsyncSession = Depends(get_db),
) -> InventoryItemResponse:
    item = await service.update_item(db, item_id, payload)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inventory item not found")
    return item


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(check_permission("inventory", "delete"))],
)
async def delete_item(item_id: int, db: AsyncSession = Depends(get_db)) -> None:
    deleted = await service.delete_item(db, item_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inventory item not found")
