from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.core.activity import log_activity
from playgroup.core.models import InventoryItem

from .schemas import InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate


def is_low_stock(item: InventoryItem) -> bool:
    return item.quantity < item.min_quantity


def _to_response(item: InventoryItem) -> InventoryItemResponse:
    response = InventoryItemResponse.model_validate(item)
    response.low_stock = is_low_stock(item)
    return response


async def list_items(
    db: AsyncSession,
    category: Optional[str] = None,
    low_stock_only: bool = False,
) -> List[InventoryItemResponse]:
    stmt = select(InventoryItem)
    if category:
        stmt = stmt.where(InventoryItem.category == category)
    if low_stock_only:
        stmt = stmt.where(InventoryItem.quantity < InventoryItem.min_quantity)
    result = await db.execute(stmt.order_by(InventoryItem.name))
    return [_to_response(item) for item in result.scalars().all()]


async def get_item(db: AsyncSession, item_id: int) -> Optional[InventoryItemResponse]:
    item = await db.get(InventoryItem, item_id)
    return _to_response(item) if item else None


async def create_item(db: AsyncSession, payload: InventoryItemCreate) -> InventoryItemResponse:
    item = InventoryItem(**payload.model_dump())
    item.name = item.name.strip()
    db.add(item)
    await db.flush()
    log_activity(db, "inventory", "create", {"itemId": item.id, "name": item.name, "quantity": item.quantity})
    await db.commit()
    await db.refresh(item)
    return _to_response(item)


async def update_item(
    db: AsyncSession,
    item_id: int,
    payload: InventoryItemUpdate,
) -> Optional[InventoryItemResponse]:
    item = await db.get(InventoryItem, item_id)
    if not item:
        return None
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None or key == "notes":
            setattr(item, key, value)
    log_activity(db, "inventory", "update", {"itemId": item_id, "name": item.name, "quantity": item.quantity})
    await db.commit()
    await db.refresh(item)
    return _to_response(item)


async def delete_item(db: AsyncSession, item_id: int) -> bool:
    item = await db.get(InventoryItem, item_id)
    if not item:
        return False
    await db.delete(item)
    log_activity(db, "inventory", "delete", {"itemId": item_id, "name": item.name})
    await db.commit()
    return True
