# fulfillment_network/services/fulfillment_store.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import distinct, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import FlushError

from fulfillment_network.core.fulfillment import Fulfillment, FulfillmentKey
from fulfillment_network.exceptions import DuplicateResourceError
from fulfillment_network.models import ProductWarehouseFulfillment


class FulfillmentStore:
    """Lookups, counts and writes over product/warehouse/store associations."""

    def __init__(self, session: Session):
        """Initialize the fulfillment store.

        Args:
            session: Database session
        """
        self.session = session

    def exists(self, product_id: int, warehouse_business_unit: str, store_id: int) -> bool:
        return self._get_record(FulfillmentKey(product_id, warehouse_business_unit, store_id)) is not None

    def get(self, product_id: int, warehouse_business_unit: str, store_id: int) -> Optional[Fulfillment]:
        record = self._get_record(FulfillmentKey(product_id, warehouse_business_unit, store_id))
        return self._to_domain(record) if record is not None else None

    def list_all(self) -> List[Fulfillment]:
        return self._list()

    def list_by_store(self, store_id: int) -> List[Fulfillment]:
        return self._list(ProductWarehouseFulfillment.store_id == store_id)

    def list_by_product(self, product_id: int) -> List[Fulfillment]:
        return self._list(ProductWarehouseFulfillment.product_id == product_id)

    def list_by_warehouse(self, warehouse_business_unit: str) -> List[Fulfillment]:
        return self._list(ProductWarehouseFulfillment.warehouse_business_unit == warehouse_business_unit)

    def list_by_product_and_store(self, product_id: int, store_id: int) -> List[Fulfillment]:
        return self._list(
            ProductWarehouseFulfillment.product_id == product_id,
            ProductWarehouseFulfillment.store_id == store_id
        )

    def warehouses_for_product_in_store(self, product_id: int, store_id: int) -> List[str]:
        rows = self.session.query(ProductWarehouseFulfillment.warehouse_business_unit).filter(
            ProductWarehouseFulfillment.product_id == product_id,
            ProductWarehouseFulfillment.store_id == store_id
        ).order_by(ProductWarehouseFulfillment.warehouse_business_unit).all()
        return [row[0] for row in rows]

    def count_warehouses_for_product_in_store(self, product_id: int, store_id: int) -> int:
        # The triple is unique, so each row is a distinct warehouse
        return self.session.query(func.count()).select_from(ProductWarehouseFulfillment).filter(
            ProductWarehouseFulfillment.product_id == product_id,
            ProductWarehouseFulfillment.store_id == store_id
        ).scalar() or 0

    def count_distinct_warehouses_for_store(self, store_id: int) -> int:
        return self.session.query(
            func.count(distinct(ProductWarehouseFulfillment.warehouse_business_unit))
        ).filter(ProductWarehouseFulfillment.store_id == store_id).scalar() or 0

    def count_distinct_products_in_warehouse(self, warehouse_business_unit: str) -> int:
        return self.session.query(
            func.count(distinct(ProductWarehouseFulfillment.product_id))
        ).filter(
            ProductWarehouseFulfillment.warehouse_business_unit == warehouse_business_unit
        ).scalar() or 0

    def insert(self, product_id: int, warehouse_business_unit: str, store_id: int) -> Fulfillment:
        """Insert an association.

        Raises:
            DuplicateResourceError: If the triple already exists
        """
        record = ProductWarehouseFulfillment(
            product_id=product_id,
            warehouse_business_unit=warehouse_business_unit,
            store_id=store_id,
            created_at=datetime.now()
        )
        try:
            self.session.add(record)
            self.session.flush()
        except (IntegrityError, FlushError) as e:
            # The enclosing transaction has to roll back after a failed flush
            key = FulfillmentKey(product_id, warehouse_business_unit, store_id)
            raise DuplicateResourceError(
                f"Fulfillment association already exists for {key.describe()}"
            ) from e
        return self._to_domain(record)

    def delete_by_key(self, product_id: int, warehouse_business_unit: str, store_id: int) -> bool:
        """Delete an association.

        Returns:
            True if a row was deleted
        """
        record = self._get_record(FulfillmentKey(product_id, warehouse_business_unit, store_id))
        if record is None:
            return False
        self.session.delete(record)
        self.session.flush()
        return True

    def _get_record(self, key: FulfillmentKey) -> Optional[ProductWarehouseFulfillment]:
        return self.session.get(ProductWarehouseFulfillment, tuple(key))

    def _list(self, *criteria) -> List[Fulfillment]:
        query = self.session.query(ProductWarehouseFulfillment).options(
            joinedload(ProductWarehouseFulfillment.product),
            joinedload(ProductWarehouseFulfillment.store)
        )
        if criteria:
            query = query.filter(*criteria)
        query = query.order_by(
            ProductWarehouseFulfillment.store_id,
            ProductWarehouseFulfillment.product_id,
            ProductWarehouseFulfillment.warehouse_business_unit
        )
        return [self._to_domain(record) for record in query.all()]

    @staticmethod
    def _to_domain(record: ProductWarehouseFulfillment) -> Fulfillment:
        return Fulfillment(
            product_id=record.product_id,
            warehouse_business_unit=record.warehouse_business_unit,
            store_id=record.store_id,
            created_at=record.created_at,
            product_name=record.product.name if record.product is not None else None,
            store_name=record.store.name if record.store is not None else None
        )
