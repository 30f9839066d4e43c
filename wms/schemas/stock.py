"""Stock position, validation and movement schemas."""
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from wms.models.inventory import TransactionType, INBOUND_TRANSACTION_TYPES
from wms.schemas.base import BaseCreateSchema


class StockPosition(BaseModel):
    """Derived stock figures for product x warehouse x variant x bin."""
    product_id: UUID
    warehouse_id: UUID
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    current_stock: Decimal = Decimal("0")
    reserved_stock: Decimal = Decimal("0")
    held_stock: Decimal = Decimal("0")
    available_stock: Decimal = Decimal("0")


class StockValidationRequest(BaseCreateSchema):
    """
    Movement to check. ``transaction_type`` is matched case-insensitively
    (``purchase_in`` == ``PURCHASE_IN``); unknown types are checked as outbound.
    """
    product_id: UUID
    warehouse_id: UUID
    quantity: Decimal
    transaction_type: str = Field(..., min_length=1, max_length=30)
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None


class StockValidationResult(BaseModel):
    """Point-in-time answer to "may this movement happen?"."""
    is_valid: bool
    current_stock: Decimal = Decimal("0")
    available_stock: Decimal = Decimal("0")
    message: str = ""


class MovementLine(BaseModel):
    """One product line of a stock movement."""
    product_id: UUID
    quantity: Decimal = Field(..., gt=0)
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    unit_cost: Decimal = Decimal("0")
    uom_id: Optional[UUID] = None
    # Receiving bin at the counterpart warehouse of a transfer
    counterpart_bin_id: Optional[UUID] = None


class MovementRequest(BaseCreateSchema):
    """
    Stock movement against one warehouse.

    ``counterpart_warehouse_id`` is the other side of a transfer. A
    TRANSFER_OUT with a counterpart also writes the matching TRANSFER_IN at
    the counterpart warehouse in the same database transaction.

    ``reservation_ids`` are reservations this (outbound) movement consumes:
    they do not count against availability for the movement and are marked
    FULFILLED together with it.
    """
    transaction_type: TransactionType
    warehouse_id: UUID
    lines: List[MovementLine] = Field(..., min_length=1)
    counterpart_warehouse_id: Optional[UUID] = None
    reservation_ids: List[UUID] = Field(default_factory=list)
    reference_type: Optional[str] = Field(None, max_length=50)
    reference_id: Optional[UUID] = None
    reference_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_counterpart_and_reservations(self):
        if self.counterpart_warehouse_id is not None and self.counterpart_warehouse_id == self.warehouse_id:
            raise ValueError("counterpart_warehouse_id must differ from warehouse_id")
        if self.reservation_ids and self.transaction_type.value in INBOUND_TRANSACTION_TYPES:
            raise ValueError("reservation_ids only apply to outbound movements")
        return self


class MovementLineFailure(BaseModel):
    line_number: int
    product_id: UUID
    available_stock: Decimal
    required_quantity: Decimal
    message: str


class MovementResult(BaseModel):
    success: bool
    transaction_id: Optional[UUID] = None
    txn_number: Optional[str] = None
    # TRANSFER_IN written at the counterpart warehouse
    counterpart_transaction_id: Optional[UUID] = None
    counterpart_txn_number: Optional[str] = None
    fulfilled_reservation_ids: List[UUID] = Field(default_factory=list)
    message: str = ""
    failed_lines: List[MovementLineFailure] = Field(default_factory=list)
    # INSUFFICIENT_STOCK, UNKNOWN_PRODUCT, INVALID_RESERVATION or STORE_ERROR when success is False
    error_code: Optional[str] = None
