from .location import Location, LocationDirectory, LOCATIONS
from .warehouse import Warehouse, WarehouseStatus
from .capacity import (
    has_free_warehouse_slot, projected_location_capacity,
    exceeds_location_capacity, remaining_capacity
)
from .fulfillment import Fulfillment, FulfillmentKey, FulfillmentLimits, FulfillmentStats

__all__ = [
    'Location',
    'LocationDirectory',
    'LOCATIONS',
    'Warehouse',
    'WarehouseStatus',
    'has_free_warehouse_slot',
    'projected_location_capacity',
    'exceeds_location_capacity',
    'remaining_capacity',
    'Fulfillment',
    'FulfillmentKey',
    'FulfillmentLimits',
    'FulfillmentStats'
]
