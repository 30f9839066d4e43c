# Import all models to register them with Base.metadata
from wms.models.product import Product, UnitOfMeasure
from wms.models.inventory import (
    InventoryTransaction,
    InventoryTransactionDetail,
    TransactionType,
    INBOUND_TRANSACTION_TYPES,
    OUTBOUND_TRANSACTION_TYPES,
)
from wms.models.reservation import StockReservation, ReservationStatus
from wms.models.serialization import ProductSerialNumber, SerialStatus, SERIAL_STATUS_TRANSITIONS
from wms.models.quality_control import (
    QualityControlHold,
    HoldStatus,
    TERMINAL_HOLD_STATUSES,
    DamageAssessment,
    DamageSeverity,
    DamageAction,
)
from wms.models.picklist import PickList, PickListDetail, PickListStatus, PickPriority, PickLineStatus

__all__ = [
    "Product",
    "UnitOfMeasure",
    "InventoryTransaction",
    "InventoryTransactionDetail",
    "TransactionType",
    "INBOUND_TRANSACTION_TYPES",
    "OUTBOUND_TRANSACTION_TYPES",
    "StockReservation",
    "ReservationStatus",
    "ProductSerialNumber",
    "SerialStatus",
    "SERIAL_STATUS_TRANSITIONS",
    "QualityControlHold",
    "HoldStatus",
    "TERMINAL_HOLD_STATUSES",
    "DamageAssessment",
    "DamageSeverity",
    "DamageAction",
    "PickList",
    "PickListDetail",
    "PickListStatus",
    "PickPriority",
    "PickLineStatus",
]
