# fulfillment_network/services/warehouse_service.py
from datetime import datetime
from typing import Dict, List, Optional

from fulfillment_network.core.capacity import (
    exceeds_location_capacity, has_free_warehouse_slot,
    projected_location_capacity, remaining_capacity
)
from fulfillment_network.core.location import Location, LocationDirectory
from fulfillment_network.core.warehouse import Warehouse
from fulfillment_network.exceptions import (
    CapacityExceededError, DuplicateResourceError, LocationNotFoundError,
    StockMismatchError, ValidationError, WarehouseNotFoundError
)
from fulfillment_network.logging_setup import get_logger

logger = get_logger(__name__)


class WarehouseService:
    """Warehouse lifecycle: create, archive and replace.

    Every operation runs all of its gates against the location directory and
    the warehouse store before the single mutation at the end, so a failed
    gate never leaves a partial write behind.
    """

    def __init__(self, warehouse_store, location_directory: Optional[LocationDirectory] = None):
        """Initialize the warehouse service.

        Args:
            warehouse_store: WarehouseStore implementation
            location_directory: Location lookup, defaults to the fixed directory
        """
        self.warehouse_store = warehouse_store
        self.location_directory = location_directory or LocationDirectory()

    def get_warehouse(self, business_unit_code: str) -> Warehouse:
        warehouse = self.warehouse_store.find_by_code(business_unit_code)
        if warehouse is None:
            raise WarehouseNotFoundError(business_unit_code)
        return warehouse

    def get_warehouse_by_id(self, warehouse_id: int) -> Warehouse:
        warehouse = self.warehouse_store.find_by_id(warehouse_id)
        if warehouse is None:
            raise WarehouseNotFoundError(warehouse_id=warehouse_id)
        return warehouse

    def list_warehouses(self, include_archived: bool = False) -> List[Warehouse]:
        return self.warehouse_store.get_all(include_archived=include_archived)

    def create_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Create a warehouse at a location.

        Gates, first failure wins:
            1. the business unit code is not taken
            2. the location resolves
            3. the location has a free warehouse slot
            4. the location's total capacity still fits
            5. stock fits the warehouse's own capacity

        Negative capacity or stock is rejected before any gate runs.

        Args:
            warehouse: Warehouse to create

        Returns:
            The stored warehouse, with id and creation time

        Raises:
            DuplicateResourceError: If the business unit code already exists
            LocationNotFoundError: If the location is not valid
            CapacityExceededError: If a location quota would be exceeded
            ValidationError: If a quantity is negative or stock exceeds capacity
        """
        code = warehouse.business_unit_code
        logger.info(f"Creating warehouse with business unit code: {code} at location: {warehouse.location}")
        warehouse.validate_quantities()

        if self.warehouse_store.find_by_code(code) is not None:
            logger.warning(f"Warehouse creation failed: Business unit code {code} already exists")
            raise DuplicateResourceError(f"Warehouse with business unit code {code} already exists")

        location = self._resolve_location(warehouse.location)

        active_count = self.warehouse_store.count_active(location.identification)
        if not has_free_warehouse_slot(active_count, location):
            logger.warning(f"Warehouse creation failed: location {location.identification} is full")
            raise CapacityExceededError(
                f"Maximum number of warehouses ({location.max_number_of_warehouses}) "
                f"reached for location {location.identification}"
            )

        current_total = self.warehouse_store.total_capacity_active(location.identification)
        new_total = projected_location_capacity(current_total, warehouse.capacity)
        if exceeds_location_capacity(new_total, location):
            logger.warning(f"Warehouse creation failed: capacity {new_total} over limit at {location.identification}")
            raise CapacityExceededError(
                f"Total capacity {new_total} would exceed location's maximum capacity of {location.max_capacity}"
            )

        warehouse.validate_stock()

        created = self.warehouse_store.create(Warehouse(
            business_unit_code=code,
            location=location.identification,
            capacity=warehouse.capacity,
            stock=warehouse.stock
        ))
        logger.info(f"Successfully created warehouse with business unit code: {code}")
        return created

    def archive_warehouse(self, business_unit_code: str, archived_at: Optional[datetime] = None) -> Warehouse:
        """Archive a warehouse, releasing its slot and capacity at its location.

        Archiving an already archived warehouse re-stamps the archive time.

        Raises:
            WarehouseNotFoundError: If no warehouse has this code
        """
        logger.info(f"Archiving warehouse with business unit code: {business_unit_code}")

        existing = self.warehouse_store.find_by_code(business_unit_code)
        if existing is None:
            logger.warning(f"Warehouse archival failed: Business unit code {business_unit_code} not found")
            raise WarehouseNotFoundError(business_unit_code)

        archived = self.warehouse_store.update(existing.archive(archived_at))
        logger.info(f"Successfully archived warehouse with business unit code: {business_unit_code}")
        return archived

    def archive_warehouse_by_id(self, warehouse_id: int) -> Warehouse:
        warehouse = self.get_warehouse_by_id(warehouse_id)
        return self.archive_warehouse(warehouse.business_unit_code)

    def replace_warehouse(self, new_warehouse: Warehouse) -> Warehouse:
        """Replace the location and capacity of a warehouse under the same code.

        Stock cannot change through a replacement. When the warehouse stays
        at its location, its old capacity is released before the new capacity
        is checked against the location's limit. An active warehouse moving to
        another location needs a free warehouse slot there.

        Args:
            new_warehouse: Desired state, keyed by business unit code

        Returns:
            The updated warehouse

        Raises:
            WarehouseNotFoundError: If no warehouse has this code
            LocationNotFoundError: If the new location is not valid
            StockMismatchError: If the stock differs from the current stock
            ValidationError: If a quantity is negative or the new capacity cannot hold the stock
            CapacityExceededError: If a quota at the new location would be exceeded
        """
        code = new_warehouse.business_unit_code
        logger.info(f"Replacing warehouse with business unit code: {code}")
        new_warehouse.validate_quantities()

        old_warehouse = self.warehouse_store.find_by_code(code)
        if old_warehouse is None:
            logger.warning(f"Warehouse replacement failed: Business unit code {code} not found")
            raise WarehouseNotFoundError(code)

        location = self._resolve_location(new_warehouse.location)

        if new_warehouse.stock != old_warehouse.stock:
            logger.warning(f"Warehouse replacement failed: stock mismatch for {code}")
            raise StockMismatchError(
                f"Warehouse stock must match on replacement: new stock ({new_warehouse.stock}) "
                f"differs from old stock ({old_warehouse.stock})"
            )

        if new_warehouse.capacity < new_warehouse.stock:
            logger.warning(f"Warehouse replacement failed: capacity below stock for {code}")
            raise ValidationError(
                f"New warehouse capacity ({new_warehouse.capacity}) "
                f"cannot accommodate stock ({new_warehouse.stock})"
            )

        moving = location.identification != old_warehouse.location
        if moving and old_warehouse.is_active:
            active_count = self.warehouse_store.count_active(location.identification)
            if not has_free_warehouse_slot(active_count, location):
                logger.warning(f"Warehouse replacement failed: location {location.identification} is full")
                raise CapacityExceededError(
                    f"Maximum number of warehouses ({location.max_number_of_warehouses}) "
                    f"reached for location {location.identification}"
                )

        current_total = self.warehouse_store.total_capacity_active(location.identification)
        released = 0
        if not moving and old_warehouse.is_active:
            released = old_warehouse.capacity
        new_total = projected_location_capacity(current_total, new_warehouse.capacity, released)
        if exceeds_location_capacity(new_total, location):
            logger.warning(f"Warehouse replacement failed: capacity {new_total} over limit at {location.identification}")
            raise CapacityExceededError(
                f"Total capacity {new_total} would exceed location's maximum capacity of {location.max_capacity}"
            )

        replaced = self.warehouse_store.update(old_warehouse.replace_with(
            location=location.identification,
            capacity=new_warehouse.capacity,
            stock=new_warehouse.stock
        ))
        logger.info(f"Successfully replaced warehouse with business unit code: {code}")
        return replaced

    def location_usage(self, identifier: str) -> Dict:
        """Current usage of a location against its quotas.

        Returns:
            Dictionary with counts, capacity and what is left of each quota
        """
        location = self.location_directory.resolve(identifier)
        active_count = self.warehouse_store.count_active(location.identification)
        used_capacity = self.warehouse_store.total_capacity_active(location.identification)

        return {
            'location': location.identification,
            'active_warehouses': active_count,
            'max_number_of_warehouses': location.max_number_of_warehouses,
            'free_warehouse_slots': max(location.max_number_of_warehouses - active_count, 0),
            'used_capacity': used_capacity,
            'max_capacity': location.max_capacity,
            'remaining_capacity': remaining_capacity(used_capacity, location)
        }

    def _resolve_location(self, identifier: str) -> Location:
        try:
            return self.location_directory.resolve(identifier)
        except LocationNotFoundError as e:
            logger.warning(f"Location {identifier} is not valid")
            raise LocationNotFoundError(identifier, f"Location {identifier} is not valid: {e.message}") from e
