"""
Quality Control Models.

Holds remove quantity from sellable stock until inspection resolves them;
damage assessments record write-off decisions for damaged stock.
"""
import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import String, Text, Date, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from wms.database import Base, AuditMixin
from wms.db_types import UUIDType, QuantityType, MoneyType


# ============================================================================
# ENUMS
# ============================================================================

class HoldStatus(str, Enum):
    """Status of QC hold."""
    ON_HOLD = "ON_HOLD"
    RELEASED = "RELEASED"
    REJECTED = "REJECTED"


TERMINAL_HOLD_STATUSES = frozenset({HoldStatus.RELEASED.value, HoldStatus.REJECTED.value})


class DamageSeverity(str, Enum):
    """Severity of assessed damage."""
    MINOR = "MINOR"
    MAJOR = "MAJOR"
    TOTAL_LOSS = "TOTAL_LOSS"


class DamageAction(str, Enum):
    """Action taken on damaged stock."""
    WRITE_OFF = "WRITE_OFF"
    REPAIR = "REPAIR"
    RETURN_TO_VENDOR = "RETURN_TO_VENDOR"
    DISPOSE = "DISPOSE"


# ============================================================================
# MODELS
# ============================================================================

class QualityControlHold(AuditMixin, Base):
    """
    QC hold on a quantity of a product at a warehouse/bin.

    ON_HOLD -> RELEASED | REJECTED. Both outcomes are terminal; reopening
    requires a new hold.
    """
    __tablename__ = "quality_control_holds"
    __table_args__ = (
        Index("ix_qc_holds_lookup", "tenant_id", "product_id", "warehouse_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    warehouse_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)
    bin_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    hold_quantity: Mapped[Decimal] = mapped_column(QuantityType, nullable=False)
    hold_reason: Mapped[str] = mapped_column(String(255), nullable=False)
    hold_date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)

    # Inspection
    inspector_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    inspection_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=HoldStatus.ON_HOLD.value,
        nullable=False,
        index=True,
        comment="ON_HOLD, RELEASED, REJECTED"
    )

    # Resolution
    release_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    released_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    release_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    related_transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    def __repr__(self):
        return f"<QualityControlHold {self.id} {self.status}>"


class DamageAssessment(AuditMixin, Base):
    """Assessment of damaged stock found at a warehouse."""
    __tablename__ = "damage_assessments"

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)

    warehouse_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False, index=True)
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    damaged_quantity: Mapped[Decimal] = mapped_column(QuantityType, nullable=False)
    damage_type: Mapped[str] = mapped_column(String(50), nullable=False)
    damage_severity: Mapped[str] = mapped_column(
        String(20), nullable=False, comment="MINOR, MAJOR, TOTAL_LOSS"
    )
    damage_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    assessed_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    assessment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    estimated_loss_value: Mapped[Optional[Decimal]] = mapped_column(MoneyType, nullable=True)
    action_taken: Mapped[Optional[str]] = mapped_column(
        String(30), nullable=True, comment="WRITE_OFF, REPAIR, RETURN_TO_VENDOR, DISPOSE"
    )
    insurance_claim_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    related_transaction_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    def __repr__(self):
        return f"<DamageAssessment {self.id} {self.damage_severity}>"
