"""Unit-of-measure conversion endpoints."""
from uuid import UUID

from fastapi import APIRouter

from wms.api.deps import DB, Context
from wms.schemas.uom import UOMConvertRequest, UOMConversionResult, UOMConversionListResponse
from wms.services.uom_service import UOMService

router = APIRouter()


@router.get("/products/{product_id}/conversions", response_model=UOMConversionListResponse)
async def get_uom_conversions(product_id: UUID, db: DB, context: Context):
    conversions = await UOMService(db, context).get_uom_conversions(product_id)
    return UOMConversionListResponse(product_id=product_id, conversions=conversions)


@router.post("/convert", response_model=UOMConversionResult)
async def convert_quantity(data: UOMConvertRequest, db: DB, context: Context):
    """
    Convert a quantity using the product's units.

    When no conversion exists the quantity comes back unchanged with
    ``is_converted`` false.
    """
    return await UOMService(db, context).convert(
        data.product_id, data.quantity, data.from_uom_id, data.to_uom_id
    )
