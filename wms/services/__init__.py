# Services module
from wms.services.uom_service import UOMService
from wms.services.inventory_service import InventoryService
from wms.services.stock_reservation_service import StockReservationService
from wms.services.serialization import SerialNumberService
from wms.services.quality_control_service import QualityControlService
from wms.services.picklist_service import PickListService
from wms.services.cycle_count_service import CycleCountService

__all__ = [
    "UOMService",
    "InventoryService",
    "StockReservationService",
    "SerialNumberService",
    "QualityControlService",
    "PickListService",
    "CycleCountService",
]
