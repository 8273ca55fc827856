# inventory_api/models/inventory.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InventoryItemCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=3, max_length=50)
    category: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    stock: int = Field(..., ge=0)
    description: Optional[str] = Field(default=None, max_length=255)
    supplier: Optional[str] = None


class InventoryItemDB(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    category: str
    price: float
    stock: int
    description: Optional[str] = None
    supplier: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
