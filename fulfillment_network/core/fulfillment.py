# fulfillment_network/core/fulfillment.py
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional


class FulfillmentKey(NamedTuple):
    """Composite identity of a fulfillment association."""
    product_id: int
    warehouse_business_unit: str
    store_id: int

    def describe(self) -> str:
        return (
            f"Product {self.product_id}, Warehouse {self.warehouse_business_unit}, "
            f"and Store {self.store_id}"
        )


@dataclass(frozen=True)
class Fulfillment:
    """A warehouse fulfilling a product for a store."""

    product_id: int
    warehouse_business_unit: str
    store_id: int
    created_at: Optional[datetime] = None
    product_name: Optional[str] = None
    store_name: Optional[str] = None

    @property
    def key(self) -> FulfillmentKey:
        return FulfillmentKey(self.product_id, self.warehouse_business_unit, self.store_id)

    def to_dict(self):
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'warehouse_business_unit': self.warehouse_business_unit,
            'store_id': self.store_id,
            'store_name': self.store_name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class FulfillmentLimits:
    """Cardinality limits on fulfillment associations."""

    max_warehouses_per_product_per_store: int = 2
    max_warehouses_per_store: int = 3
    max_products_per_warehouse: int = 5

    @classmethod
    def from_config(cls, business_rules=None) -> 'FulfillmentLimits':
        """Build limits from the BUSINESS_RULES config section.

        Args:
            business_rules: Optional dict shaped like ``config.business_rules``

        Returns:
            FulfillmentLimits instance
        """
        if business_rules is None:
            from fulfillment_network.config import config
            business_rules = config.business_rules

        defaults = cls()
        return cls(
            max_warehouses_per_product_per_store=business_rules.get(
                'max_warehouses_per_product_per_store', defaults.max_warehouses_per_product_per_store),
            max_warehouses_per_store=business_rules.get(
                'max_warehouses_per_store', defaults.max_warehouses_per_store),
            max_products_per_warehouse=business_rules.get(
                'max_products_per_warehouse', defaults.max_products_per_warehouse),
        )


@dataclass(frozen=True)
class FulfillmentStats:
    """Usage of one entity against its fulfillment limit."""

    entity_type: str
    entity_id: str
    current_count: int
    max_allowed: Optional[int]
    total_fulfillments: int
    can_add_more: bool
    additional_count: Optional[int] = None

    def to_dict(self):
        return {
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'current_count': self.current_count,
            'max_allowed': self.max_allowed,
            'total_fulfillments': self.total_fulfillments,
            'can_add_more': self.can_add_more,
            'additional_count': self.additional_count,
        }
