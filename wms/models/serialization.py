"""Serial number tracking for serialized products."""
import enum
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wms.database import Base, AuditMixin
from wms.db_types import UUIDType, MoneyType


class SerialStatus(str, enum.Enum):
    """Status of one physical unit"""
    AVAILABLE = "AVAILABLE"      # In stock, free to sell
    RESERVED = "RESERVED"        # Held for an order
    SOLD = "SOLD"                # Shipped to customer
    DAMAGED = "DAMAGED"          # Written off / scrapped
    RETURNED = "RETURNED"        # Came back from customer


# Allowed status moves for a single unit. DAMAGED is terminal.
SERIAL_STATUS_TRANSITIONS = {
    SerialStatus.AVAILABLE.value: {
        SerialStatus.RESERVED.value, SerialStatus.SOLD.value, SerialStatus.DAMAGED.value,
    },
    SerialStatus.RESERVED.value: {
        SerialStatus.AVAILABLE.value, SerialStatus.SOLD.value, SerialStatus.DAMAGED.value,
    },
    SerialStatus.SOLD.value: {SerialStatus.RETURNED.value},
    SerialStatus.RETURNED.value: {SerialStatus.AVAILABLE.value, SerialStatus.DAMAGED.value},
    SerialStatus.DAMAGED.value: set(),
}


class ProductSerialNumber(AuditMixin, Base):
    """
    One physical unit of a serialized product.
    The serial string is unique within a tenant.
    """
    __tablename__ = "product_serial_numbers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "serial_number", name="uq_serial_tenant_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    serial_number: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Location
    warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True, index=True)
    bin_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    current_location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=SerialStatus.AVAILABLE.value,
        nullable=False,
        index=True,
        comment="AVAILABLE, RESERVED, SOLD, DAMAGED, RETURNED"
    )

    # Batch / dates
    purchase_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    supplier_batch: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    internal_batch: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Pricing
    cost_price: Mapped[Optional[Decimal]] = mapped_column(MoneyType, nullable=True)
    selling_price: Mapped[Optional[Decimal]] = mapped_column(MoneyType, nullable=True)

    # Last inventory transaction that moved this unit
    last_transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    def __repr__(self):
        return f"<ProductSerialNumber {self.serial_number} {self.status}>"
