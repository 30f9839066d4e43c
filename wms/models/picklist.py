"""Pick list models for warehouse picking operations."""
import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import String, Date, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wms.database import Base, AuditMixin
from wms.db_types import UUIDType, QuantityType


class PickListStatus(str, Enum):
    """Pick list status enumeration."""
    DRAFT = "DRAFT"               # Generated, not yet assigned
    ASSIGNED = "ASSIGNED"         # Assigned to picker
    IN_PROGRESS = "IN_PROGRESS"   # Picking in progress
    COMPLETED = "COMPLETED"       # All lines picked
    CANCELLED = "CANCELLED"


class PickPriority(str, Enum):
    """Pick list priority enumeration."""
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class PickLineStatus(str, Enum):
    """Pick line status enumeration."""
    PENDING = "PENDING"       # Nothing picked yet
    PARTIAL = "PARTIAL"       # Some quantity picked
    COMPLETED = "COMPLETED"   # Required quantity picked
    SHORT = "SHORT"           # Closed with less than required


class PickList(AuditMixin, Base):
    """
    Pick list header.
    Instructs a warehouse worker which bins to pick from.
    """
    __tablename__ = "pick_lists"

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)

    # Identification
    pick_list_number: Mapped[str] = mapped_column(
        String(40),
        unique=True,
        nullable=False,
        index=True,
        comment="Time-based number e.g., PL-20240101120000123456"
    )
    pick_list_date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)

    warehouse_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False, index=True)
    picker_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType,
        nullable=True,
        comment="Assigned picker"
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=PickListStatus.DRAFT.value,
        nullable=False,
        index=True,
        comment="DRAFT, ASSIGNED, IN_PROGRESS, COMPLETED, CANCELLED"
    )
    priority_level: Mapped[str] = mapped_column(
        String(20),
        default=PickPriority.NORMAL.value,
        nullable=False,
        comment="LOW, NORMAL, HIGH, URGENT"
    )
    special_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    details: Mapped[List["PickListDetail"]] = relationship(
        "PickListDetail",
        back_populates="pick_list",
        cascade="all, delete-orphan",
        order_by="PickListDetail.pick_sequence"
    )

    def __repr__(self) -> str:
        return f"<PickList(number='{self.pick_list_number}', status='{self.status}')>"


class PickListDetail(AuditMixin, Base):
    """
    Pick list line.
    Sequence is assigned at creation and never renumbered.
    """
    __tablename__ = "pick_list_details"

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)

    pick_list_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("pick_lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Product reference
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False
    )
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    # Location
    warehouse_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)
    bin_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    # Quantities
    required_quantity: Mapped[Decimal] = mapped_column(QuantityType, nullable=False)
    picked_quantity: Mapped[Decimal] = mapped_column(QuantityType, default=Decimal("0"))
    uom_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    # Pick sequence: 1-based input order
    pick_sequence: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Order in picking route"
    )
    pick_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=PickLineStatus.PENDING.value,
        nullable=False,
        comment="PENDING, PARTIAL, COMPLETED, SHORT"
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    pick_list: Mapped["PickList"] = relationship(
        "PickList",
        back_populates="details"
    )

    @property
    def pending_quantity(self) -> Decimal:
        """Get remaining quantity to pick."""
        return max(Decimal("0"), self.required_quantity - (self.picked_quantity or Decimal("0")))

    def __repr__(self) -> str:
        return f"<PickListDetail(seq={self.pick_sequence}, qty={self.required_quantity}, picked={self.picked_quantity})>"
