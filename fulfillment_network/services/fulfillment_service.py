# fulfillment_network/services/fulfillment_service.py
from typing import List, Optional

from sqlalchemy.orm import Session

from fulfillment_network.core.fulfillment import Fulfillment, FulfillmentLimits, FulfillmentStats
from fulfillment_network.logging_setup import get_logger
from fulfillment_network.models import Store
from fulfillment_network.services.catalog_service import ProductService, StoreService
from fulfillment_network.services.fulfillment_store import FulfillmentStore
from fulfillment_network.services.fulfillment_validation import FulfillmentValidationService
from fulfillment_network.services.warehouse_store import SqlAlchemyWarehouseStore

logger = get_logger(__name__)


class FulfillmentService:
    """Creates, deletes and reports on fulfillment associations in one session."""

    def __init__(self, session: Session, limits: Optional[FulfillmentLimits] = None):
        """Initialize the fulfillment service.

        Args:
            session: Database session, normally from ``session_scope``
            limits: Cardinality limits, defaults to the configured business rules
        """
        self.session = session
        self.limits = limits or FulfillmentLimits.from_config()
        self.fulfillment_store = FulfillmentStore(session)
        self.warehouse_store = SqlAlchemyWarehouseStore(session)
        self.product_service = ProductService(session)
        self.store_service = StoreService(session)
        self.validator = FulfillmentValidationService(
            self.product_service,
            self.store_service,
            self.warehouse_store,
            self.fulfillment_store,
            self.limits
        )

    def create_fulfillment(self, product_id: int, warehouse_business_unit: str, store_id: int) -> Fulfillment:
        """Validate and insert an association.

        The store and warehouse rows are locked first so that concurrent
        writers touching the same store or warehouse validate one at a time.
        """
        logger.info(f"Creating fulfillment: Product {product_id}, Warehouse {warehouse_business_unit}, Store {store_id}")

        self._lock_allocation_scope(warehouse_business_unit, store_id)
        self.validator.validate_creation(product_id, warehouse_business_unit, store_id)
        fulfillment = self.fulfillment_store.insert(product_id, warehouse_business_unit, store_id)

        logger.info(f"Fulfillment created successfully: Product {product_id}, Warehouse {warehouse_business_unit}, Store {store_id}")
        return fulfillment

    def delete_fulfillment(self, product_id: int, warehouse_business_unit: str, store_id: int) -> None:
        logger.info(f"Deleting fulfillment: Product {product_id}, Warehouse {warehouse_business_unit}, Store {store_id}")

        self.validator.validate_deletion(product_id, warehouse_business_unit, store_id)
        self.fulfillment_store.delete_by_key(product_id, warehouse_business_unit, store_id)

        logger.info(f"Fulfillment deleted successfully: Product {product_id}, Warehouse {warehouse_business_unit}, Store {store_id}")

    def get_all_fulfillments(self) -> List[Fulfillment]:
        return self.fulfillment_store.list_all()

    def get_store_fulfillments(self, store_id: int) -> List[Fulfillment]:
        return self.fulfillment_store.list_by_store(store_id)

    def get_product_fulfillments(self, product_id: int) -> List[Fulfillment]:
        return self.fulfillment_store.list_by_product(product_id)

    def get_warehouse_fulfillments(self, warehouse_business_unit: str) -> List[Fulfillment]:
        return self.fulfillment_store.list_by_warehouse(warehouse_business_unit)

    def get_product_store_fulfillments(self, product_id: int, store_id: int) -> List[Fulfillment]:
        return self.fulfillment_store.list_by_product_and_store(product_id, store_id)

    def get_store_stats(self, store_id: int) -> FulfillmentStats:
        """Distinct warehouses fulfilling a store against the per-store limit."""
        distinct_warehouses = self.fulfillment_store.count_distinct_warehouses_for_store(store_id)
        total = len(self.fulfillment_store.list_by_store(store_id))
        limit = self.limits.max_warehouses_per_store

        return FulfillmentStats(
            entity_type='Store',
            entity_id=str(store_id),
            current_count=distinct_warehouses,
            max_allowed=limit,
            total_fulfillments=total,
            can_add_more=distinct_warehouses < limit
        )

    def get_product_stats(self, product_id: int) -> FulfillmentStats:
        """Warehouses and stores a product is fulfilled through.

        The warehouse limit applies per store, so there is no single maximum.
        """
        fulfillments = self.fulfillment_store.list_by_product(product_id)
        warehouses = {fulfillment.warehouse_business_unit for fulfillment in fulfillments}
        stores = {fulfillment.store_id for fulfillment in fulfillments}

        return FulfillmentStats(
            entity_type='Product',
            entity_id=str(product_id),
            current_count=len(warehouses),
            max_allowed=None,
            total_fulfillments=len(fulfillments),
            can_add_more=True,
            additional_count=len(stores)
        )

    def get_product_store_stats(self, product_id: int, store_id: int) -> FulfillmentStats:
        """Warehouses fulfilling a product for one store against the per-product limit."""
        warehouses = self.fulfillment_store.warehouses_for_product_in_store(product_id, store_id)
        limit = self.limits.max_warehouses_per_product_per_store

        return FulfillmentStats(
            entity_type='ProductInStore',
            entity_id=f"{product_id}/{store_id}",
            current_count=len(warehouses),
            max_allowed=limit,
            total_fulfillments=len(warehouses),
            can_add_more=len(warehouses) < limit
        )

    def get_warehouse_stats(self, warehouse_business_unit: str) -> FulfillmentStats:
        """Distinct products stored in a warehouse against the per-warehouse limit."""
        distinct_products = self.fulfillment_store.count_distinct_products_in_warehouse(warehouse_business_unit)
        total = len(self.fulfillment_store.list_by_warehouse(warehouse_business_unit))
        limit = self.limits.max_products_per_warehouse

        return FulfillmentStats(
            entity_type='Warehouse',
            entity_id=warehouse_business_unit,
            current_count=distinct_products,
            max_allowed=limit,
            total_fulfillments=total,
            can_add_more=distinct_products < limit
        )

    def _lock_allocation_scope(self, warehouse_business_unit: str, store_id: int) -> None:
        # Lock order is fixed (store, then warehouse) to avoid deadlocks
        self.session.query(Store).filter(Store.id == store_id).with_for_update().first()
        self.warehouse_store.lock_by_code(warehouse_business_unit)
