from fastapi import APIRouter

from wms.api.v1.endpoints import (
    inventory,
    uom,
    reservations,
    serialization,
    quality_control,
    picklists,
    cycle_count,
)

api_router = APIRouter()

api_router.include_router(
    inventory.router,
    prefix="/inventory",
    tags=["Inventory"]
)

api_router.include_router(
    uom.router,
    prefix="/uom",
    tags=["Units of Measure"]
)

api_router.include_router(
    reservations.router,
    prefix="/reservations",
    tags=["Stock Reservations"]
)

api_router.include_router(
    serialization.router,
    prefix="/serial-numbers",
    tags=["Serial Numbers"]
)

api_router.include_router(
    quality_control.router,
    prefix="/quality-control",
    tags=["Quality Control"]
)

api_router.include_router(
    picklists.router,
    prefix="/picklists",
    tags=["Pick Lists"]
)

api_router.include_router(
    cycle_count.router,
    prefix="/physical-count",
    tags=["Physical Count"]
)
