# fulfillment_network/core/capacity.py
from fulfillment_network.core.location import Location


def has_free_warehouse_slot(active_warehouses: int, location: Location) -> bool:
    """Check whether one more active warehouse fits the location.

    Args:
        active_warehouses: Number of non-archived warehouses at the location
        location: Location being checked

    Returns:
        True if the active count is below the location's maximum
    """
    return active_warehouses < location.max_number_of_warehouses


def projected_location_capacity(
    current_total: int,
    added_capacity: int,
    released_capacity: int = 0
) -> int:
    """Total active capacity at a location after a change.

    Args:
        current_total: Sum of capacity over the active warehouses there now
        added_capacity: Capacity of the warehouse being placed
        released_capacity: Capacity already counted in ``current_total`` that
            the change gives back, e.g. a warehouse replaced in place

    Returns:
        The resulting total capacity
    """
    return (current_total or 0) - (released_capacity or 0) + (added_capacity or 0)


def exceeds_location_capacity(total_capacity: int, location: Location) -> bool:
    # Exactly at the limit is allowed
    return total_capacity > location.max_capacity


def remaining_capacity(total_capacity: int, location: Location) -> int:
    return max(location.max_capacity - (total_capacity or 0), 0)
