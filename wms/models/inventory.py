"""Inventory transaction models: the append-only stock movement log."""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wms.database import Base, AuditMixin
from wms.db_types import UUIDType, QuantityType, MoneyType


class TransactionType(str, Enum):
    """Inventory transaction type enum."""
    PURCHASE_IN = "PURCHASE_IN"  # GRN - goods received from vendor
    PURCHASE_RETURN_IN = "PURCHASE_RETURN_IN"
    TRANSFER_IN = "TRANSFER_IN"
    ADJUSTMENT_IN = "ADJUSTMENT_IN"  # Count gain / manual plus
    SALE_OUT = "SALE_OUT"
    SALE_RETURN_OUT = "SALE_RETURN_OUT"
    TRANSFER_OUT = "TRANSFER_OUT"
    ADJUSTMENT_OUT = "ADJUSTMENT_OUT"  # Count loss / manual minus


INBOUND_TRANSACTION_TYPES = frozenset({
    TransactionType.PURCHASE_IN.value,
    TransactionType.PURCHASE_RETURN_IN.value,
    TransactionType.TRANSFER_IN.value,
    TransactionType.ADJUSTMENT_IN.value,
})

OUTBOUND_TRANSACTION_TYPES = frozenset({
    TransactionType.SALE_OUT.value,
    TransactionType.SALE_RETURN_OUT.value,
    TransactionType.TRANSFER_OUT.value,
    TransactionType.ADJUSTMENT_OUT.value,
})


class InventoryTransaction(AuditMixin, Base):
    """Header of one stock-affecting document (receipt, sale, transfer, adjustment, count)."""
    __tablename__ = "inventory_transactions"

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    txn_number: Mapped[str] = mapped_column(String(40), nullable=False, unique=True, index=True)
    txn_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        index=True,
        comment="PURCHASE_IN, PURCHASE_RETURN_IN, TRANSFER_IN, ADJUSTMENT_IN, SALE_OUT, SALE_RETURN_OUT, TRANSFER_OUT, ADJUSTMENT_OUT"
    )
    txn_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Source document
    reference_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    reference_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    details: Mapped[List["InventoryTransactionDetail"]] = relationship(
        "InventoryTransactionDetail",
        back_populates="transaction",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<InventoryTransaction {self.txn_number} {self.txn_type}>"


class InventoryTransactionDetail(AuditMixin, Base):
    """
    One line of a stock movement. Never updated after creation.

    ``to_warehouse_id`` is the warehouse whose stock the line affects, for
    inbound and outbound types alike; ``from_warehouse_id`` records the
    counterpart warehouse of a transfer.
    """
    __tablename__ = "inventory_transaction_details"
    __table_args__ = (
        Index(
            "ix_txn_details_position",
            "tenant_id", "product_id", "to_warehouse_id", "variant_id", "bin_id"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    txn_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("inventory_transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    bin_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    from_warehouse_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    to_warehouse_id: Mapped[uuid.UUID] = mapped_column(UUIDType, nullable=False)

    quantity: Mapped[Decimal] = mapped_column(QuantityType, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    uom_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)

    transaction: Mapped["InventoryTransaction"] = relationship(
        "InventoryTransaction", back_populates="details"
    )

    def __repr__(self):
        return f"<InventoryTransactionDetail {self.product_id} qty={self.quantity}>"
