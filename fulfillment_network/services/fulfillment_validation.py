# fulfillment_network/services/fulfillment_validation.py
from typing import List, Optional

from fulfillment_network.core.fulfillment import FulfillmentKey, FulfillmentLimits
from fulfillment_network.exceptions import (
    DuplicateResourceError, FulfillmentNotFoundError, NotFoundError, ValidationError
)
from fulfillment_network.logging_setup import get_logger

logger = get_logger(__name__)


class FulfillmentValidationService:
    """Checks whether a fulfillment association may be created or deleted.

    Validation happens in three phases, each one short-circuiting the next:
    existence of the product, warehouse and store; duplicate association;
    then the three cardinality limits. Within a phase every violation is
    collected before raising. The validator never writes.
    """

    def __init__(
        self,
        product_service,
        store_service,
        warehouse_store,
        fulfillment_store,
        limits: Optional[FulfillmentLimits] = None
    ):
        """Initialize the validation service.

        Args:
            product_service: Anything with ``exists(product_id)``
            store_service: Anything with ``exists(store_id)``
            warehouse_store: Anything with ``exists_by_code(code)``
            fulfillment_store: FulfillmentStore
            limits: Cardinality limits, defaults to 2/3/5
        """
        self.product_service = product_service
        self.store_service = store_service
        self.warehouse_store = warehouse_store
        self.fulfillment_store = fulfillment_store
        self.limits = limits or FulfillmentLimits()

    def validate_creation(self, product_id: int, warehouse_business_unit: str, store_id: int) -> None:
        """Validate that an association may be created.

        Raises:
            NotFoundError: Naming every missing product, warehouse and store
            DuplicateResourceError: If the association already exists
            ValidationError: Listing every cardinality limit the association breaks
        """
        key = FulfillmentKey(product_id, warehouse_business_unit, store_id)

        missing = self._missing_entities(key)
        if missing:
            logger.warning(f"Fulfillment rejected, missing entities: {missing}")
            raise NotFoundError("; ".join(missing), details={'violations': missing})

        if self.fulfillment_store.exists(*key):
            logger.warning(f"Fulfillment rejected, already exists: {key.describe()}")
            raise DuplicateResourceError(f"Fulfillment association already exists for {key.describe()}")

        violations = self._limit_violations(key)
        if violations:
            logger.warning(f"Fulfillment rejected for {key.describe()}: {violations}")
            raise ValidationError(
                "Constraint violations: " + "; ".join(violations),
                violations=violations
            )

    def validate_deletion(self, product_id: int, warehouse_business_unit: str, store_id: int) -> None:
        """Validate that an association exists and may be deleted.

        Raises:
            FulfillmentNotFoundError: If the association does not exist
        """
        key = FulfillmentKey(product_id, warehouse_business_unit, store_id)
        if not self.fulfillment_store.exists(*key):
            raise FulfillmentNotFoundError(
                f"Fulfillment association does not exist for {key.describe()}",
                identifier=key
            )

    def _missing_entities(self, key: FulfillmentKey) -> List[str]:
        missing = []

        if not self.product_service.exists(key.product_id):
            missing.append(f"Product with ID {key.product_id} does not exist")

        if not self.warehouse_store.exists_by_code(key.warehouse_business_unit):
            missing.append(f"Warehouse with business unit {key.warehouse_business_unit} does not exist")

        if not self.store_service.exists(key.store_id):
            missing.append(f"Store with ID {key.store_id} does not exist")

        return missing

    def _limit_violations(self, key: FulfillmentKey) -> List[str]:
        limits = self.limits
        violations = []

        warehouses_for_product = self.fulfillment_store.count_warehouses_for_product_in_store(
            key.product_id, key.store_id
        )
        if warehouses_for_product >= limits.max_warehouses_per_product_per_store:
            violations.append(
                f"Product {key.product_id} already has {limits.max_warehouses_per_product_per_store} "
                f"warehouses fulfilling it for Store {key.store_id}. "
                f"Maximum allowed is {limits.max_warehouses_per_product_per_store}"
            )

        # Only a warehouse new to the store raises its distinct warehouse count
        store_warehouses = {
            fulfillment.warehouse_business_unit
            for fulfillment in self.fulfillment_store.list_by_store(key.store_id)
        }
        if key.warehouse_business_unit not in store_warehouses:
            distinct_warehouses = self.fulfillment_store.count_distinct_warehouses_for_store(key.store_id)
            if distinct_warehouses >= limits.max_warehouses_per_store:
                violations.append(
                    f"Store {key.store_id} already has {limits.max_warehouses_per_store} "
                    f"different warehouses fulfilling it. "
                    f"Maximum allowed is {limits.max_warehouses_per_store}"
                )

        # Only a product new to the warehouse raises its distinct product count
        warehouse_products = {
            fulfillment.product_id
            for fulfillment in self.fulfillment_store.list_by_warehouse(key.warehouse_business_unit)
        }
        if key.product_id not in warehouse_products:
            distinct_products = self.fulfillment_store.count_distinct_products_in_warehouse(
                key.warehouse_business_unit
            )
            if distinct_products >= limits.max_products_per_warehouse:
                violations.append(
                    f"Warehouse {key.warehouse_business_unit} already has {limits.max_products_per_warehouse} "
                    f"different products. Maximum allowed is {limits.max_products_per_warehouse}"
                )

        return violations
