"""Stock reservation models: soft holds against future availability."""
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from wms.database import Base, AuditMixin
from wms.db_types import UUIDType, QuantityType


class ReservationStatus(str, Enum):
    """Stock reservation status enum."""
    ACTIVE = "ACTIVE"  # Holding stock for the reference document
    RELEASED = "RELEASED"  # Cancelled, stock freed
    FULFILLED = "FULFILLED"  # Consumed by the outbound movement
    EXPIRED = "EXPIRED"  # Passed expiry_date without being consumed


class StockReservation(AuditMixin, Base):
    """Quantity claimed by an order, transfer or other reference document."""
    __tablename__ = "stock_reservations"
    __table_args__ = (
        Index("ix_reservations_lookup", "tenant_id", "product_id", "warehouse_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    warehouse_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)
    bin_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    reserved_quantity: Mapped[Decimal] = mapped_column(QuantityType, nullable=False)

    # Reference document
    reference_type: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="SALES_ORDER, TRANSFER, PICK_LIST, ..."
    )
    reference_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    reference_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    reserved_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    reservation_date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ReservationStatus.ACTIVE.value,
        nullable=False,
        index=True,
        comment="ACTIVE, RELEASED, FULFILLED, EXPIRED"
    )
    released_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self):
        return f"<StockReservation {self.id} {self.status} qty={self.reserved_quantity}>"
