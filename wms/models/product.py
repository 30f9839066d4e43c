"""Product and unit-of-measure models."""
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wms.database import Base, AuditMixin
from wms.db_types import UUIDType, QuantityType


class UnitOfMeasure(AuditMixin, Base):
    """Quantity unit such as PCS, BOX or KG."""
    __tablename__ = "units_of_measure"
    __table_args__ = (
        UniqueConstraint("tenant_id", "uom_code", name="uq_uom_tenant_code"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    uom_code: Mapped[str] = mapped_column(String(20), nullable=False)
    uom_name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self):
        return f"<UnitOfMeasure {self.uom_code}>"


class Product(AuditMixin, Base):
    """
    Product master, limited to the fields stock logic reads.

    UOM configuration:
    - base_uom_id: unit stock is counted in
    - primary_uom_id / secondary_uom_id: alternative trading units
    - primary_to_secondary_factor / secondary_to_base_factor: stored factors
      the conversion table is derived from
    """
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("tenant_id", "product_code", name="uq_product_tenant_code"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    product_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    base_uom_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType, ForeignKey("units_of_measure.id", ondelete="SET NULL"), nullable=True
    )
    primary_uom_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType, ForeignKey("units_of_measure.id", ondelete="SET NULL"), nullable=True
    )
    secondary_uom_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType, ForeignKey("units_of_measure.id", ondelete="SET NULL"), nullable=True
    )
    primary_to_secondary_factor: Mapped[Optional[Decimal]] = mapped_column(QuantityType, nullable=True)
    secondary_to_base_factor: Mapped[Optional[Decimal]] = mapped_column(QuantityType, nullable=True)

    is_serialized: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self):
        return f"<Product {self.product_code}>"
