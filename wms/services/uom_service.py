"""
Unit-of-measure conversion.

Conversions are derived per product from its configured units:
- base -> primary:   factor = 1 / primary_to_secondary_factor
- base -> secondary: factor = 1 / secondary_to_base_factor

Each rule is emitted only when the target unit differs from the base unit.
A missing factor is treated as 1.
"""
import logging
import uuid
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wms.core.tenant_context import RequestContext
from wms.models.product import Product
from wms.schemas.uom import UOMConversion, UOMConversionResult

logger = logging.getLogger(__name__)

ONE = Decimal("1")


def _factor_or_one(value: Optional[Decimal]) -> Decimal:
    if not value:
        return ONE
    return Decimal(value)


def build_uom_conversions(product: Product) -> List[UOMConversion]:
    """Derive the conversion table from a product's UOM configuration."""
    conversions: List[UOMConversion] = []
    if not product.base_uom_id:
        return conversions

    if product.primary_uom_id and product.primary_uom_id != product.base_uom_id:
        conversions.append(UOMConversion(
            from_uom_id=product.base_uom_id,
            to_uom_id=product.primary_uom_id,
            conversion_factor=ONE / _factor_or_one(product.primary_to_secondary_factor),
            product_id=product.id,
        ))

    if product.secondary_uom_id and product.secondary_uom_id != product.base_uom_id:
        conversions.append(UOMConversion(
            from_uom_id=product.base_uom_id,
            to_uom_id=product.secondary_uom_id,
            conversion_factor=ONE / _factor_or_one(product.secondary_to_base_factor),
            product_id=product.id,
        ))

    return conversions


def try_convert_quantity(
    quantity: Decimal,
    from_uom_id: uuid.UUID,
    to_uom_id: uuid.UUID,
    conversions: Sequence[UOMConversion],
) -> UOMConversionResult:
    """
    Convert ``quantity`` between two units.

    Looks for a direct conversion first (multiply), then the reverse one
    (divide). When neither exists the quantity is returned unchanged with
    ``is_converted=False``.
    """
    if from_uom_id == to_uom_id:
        return UOMConversionResult(
            quantity=quantity, from_uom_id=from_uom_id, to_uom_id=to_uom_id, is_converted=True
        )

    for conversion in conversions:
        if conversion.from_uom_id == from_uom_id and conversion.to_uom_id == to_uom_id:
            return UOMConversionResult(
                quantity=quantity * conversion.conversion_factor,
                from_uom_id=from_uom_id,
                to_uom_id=to_uom_id,
                is_converted=True,
            )

    for conversion in conversions:
        if conversion.from_uom_id == to_uom_id and conversion.to_uom_id == from_uom_id:
            return UOMConversionResult(
                quantity=quantity / conversion.conversion_factor,
                from_uom_id=from_uom_id,
                to_uom_id=to_uom_id,
                is_converted=True,
            )

    logger.warning(f"No conversion found from UOM {from_uom_id} to {to_uom_id}")
    return UOMConversionResult(
        quantity=quantity, from_uom_id=from_uom_id, to_uom_id=to_uom_id, is_converted=False
    )


def convert_quantity(
    quantity: Decimal,
    from_uom_id: uuid.UUID,
    to_uom_id: uuid.UUID,
    conversions: Sequence[UOMConversion],
) -> Decimal:
    """Convert a quantity, falling back to the input quantity when no conversion exists."""
    return try_convert_quantity(quantity, from_uom_id, to_uom_id, conversions).quantity


class UOMService:
    """Loads product UOM configuration for the current tenant."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def get_uom_conversions(self, product_id: uuid.UUID) -> List[UOMConversion]:
        """Get conversions for a product. Empty list when unknown or on store failure."""
        try:
            result = await self.db.execute(
                select(Product).where(
                    Product.id == product_id,
                    Product.tenant_id == self.context.tenant_id,
                )
            )
            product = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching UOM conversions for product {product_id}: {e}")
            return []

        if not product:
            logger.warning(f"Product {product_id} not found for tenant {self.context.tenant_id}")
            return []

        return build_uom_conversions(product)

    async def convert(
        self,
        product_id: uuid.UUID,
        quantity: Decimal,
        from_uom_id: uuid.UUID,
        to_uom_id: uuid.UUID,
    ) -> UOMConversionResult:
        """Convert using the product's configured units."""
        conversions = await self.get_uom_conversions(product_id)
        return try_convert_quantity(quantity, from_uom_id, to_uom_id, conversions)
