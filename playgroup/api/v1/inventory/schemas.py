from datetime import datetime
from typing import Optional

from pydantic import Field

from playgroup.core.schemas import CamelModel


class InventoryItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(0, ge=0)
    unit: str = Field(..., min_length=1, max_length=50)
    min_quantity: int = Field(0, ge=0)
    notes: Optional[str] = None


class InventoryItemUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    min_quantity: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class InventoryItemResponse(CamelModel):
    id: int
    name: str
    category: str
    quantity: int
    unit: str
    min_quantity: int
    notes: Optional[str] = None
    last_updated: datetime
    low_stock: bool = False
