"""
Pydantic schemas for stock record request/response validation.

Field names travel as camelCase on the wire (``itemName``, ``quantitySold``)
and as snake_case inside the application.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_WEEK = 54

camel_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class StockCreate(BaseModel):
    """
    Body of the add operation.

    ``quantitySold`` is deliberately absent: a new record always starts with
    nothing sold and any such key in the request is ignored.
    """

    model_config = camel_config

    item_name: str = Field(..., min_length=1, max_length=200)
    quantity_received: int = Field(..., ge=0)
    unit_price: float = Field(..., ge=0)
    selling_price: Optional[float] = Field(None, ge=0)
    week: int = Field(..., ge=1, le=MAX_WEEK)
    year: int = Field(..., ge=1)

    @field_validator("item_name")
    @classmethod
    def strip_item_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Item name must not be blank")
        return v


class StockSalesUpdate(BaseModel):
    model_config = camel_config

    quantity_sold: int = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class StockResponse(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    owner_id: int
    item_name: str
    quantity_received: int
    quantity_sold: int
    unit_price: float
    selling_price: Optional[float]
    week: int
    year: int
    created_at: datetime
    updated_at: datetime
