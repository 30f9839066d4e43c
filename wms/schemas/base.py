"""
Shared Pydantic bases.

Response schemas read ORM rows and must inherit from BaseResponseSchema;
request bodies inherit from BaseCreateSchema.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class BaseResponseSchema(BaseModel):
    """
    Response built from an ORM row.

    UUIDs serialize as strings and quantities (Decimal) as JSON numbers.
    """
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            UUID: str,
            Decimal: float,
            datetime: lambda v: v.isoformat() if v else None,
        },
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """Request body. Unknown fields are ignored."""
    model_config = ConfigDict(extra='ignore')
