# fulfillment_network/services/warehouse_store.py
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from fulfillment_network.core.warehouse import Warehouse
from fulfillment_network.exceptions import WarehouseNotFoundError
from fulfillment_network.models import WarehouseRecord

class WarehouseStore(ABC):
    """Warehouse persistence capabilities needed by the lifecycle use cases.

    Lookup, mutation and the two per-location aggregations live on the same
    interface; every aggregation only considers active warehouses.
    """

    @abstractmethod
    def get_all(self, include_archived: bool = False) -> List[Warehouse]:
        """Return warehouses, active ones only unless asked otherwise."""
        pass

    @abstractmethod
    def find_by_code(self, business_unit_code: str) -> Optional[Warehouse]:
        """Return the warehouse with this business unit code, or None."""
        pass

    @abstractmethod
    def find_by_id(self, warehouse_id: int) -> Optional[Warehouse]:
        """Return the warehouse with this surrogate id, or None."""
        pass

    @abstractmethod
    def create(self, warehouse: Warehouse) -> Warehouse:
        """Persist a new warehouse and return it with id and creation time."""
        pass

    @abstractmethod
    def update(self, warehouse: Warehouse) -> Warehouse:
        """Overwrite location, capacity, stock and a newly set archive time."""
        pass

    @abstractmethod
    def count_active(self, location: str) -> int:
        """Count non-archived warehouses at a location."""
        pass

    @abstractmethod
    def total_capacity_active(self, location: str) -> int:
        """Sum capacity over non-archived warehouses at a location."""
        pass

    def exists_by_code(self, business_unit_code: str) -> bool:
        return self.find_by_code(business_unit_code) is not None

class SqlAlchemyWarehouseStore(WarehouseStore):
    """Warehouse store backed by the ``warehouse`` table."""

    def __init__(self, session: Session):
        """Initialize the warehouse store.

        Args:
            session: Database session
        """
        self.session = session

    def get_all(self, include_archived: bool = False) -> List[Warehouse]:
        query = self.session.query(WarehouseRecord)
        if not include_archived:
            query = query.filter(WarehouseRecord.archived_at.is_(None))
        return [self._to_domain(record) for record in query.order_by(WarehouseRecord.id).all()]

    def find_by_code(self, business_unit_code: str) -> Optional[Warehouse]:
        record = self._find_record(business_unit_code)
        return self._to_domain(record) if record is not None else None

    def find_by_id(self, warehouse_id: int) -> Optional[Warehouse]:
        record = self.session.get(WarehouseRecord, warehouse_id)
        return self._to_domain(record) if record is not None else None

    def exists_by_code(self, business_unit_code: str) -> bool:
        return self.session.query(
            self.session.query(WarehouseRecord)
            .filter(WarehouseRecord.business_unit_code == business_unit_code)
            .exists()
        ).scalar()

    def create(self, warehouse: Warehouse) -> Warehouse:
        record = WarehouseRecord(
            business_unit_code=warehouse.business_unit_code,
            location=warehouse.location,
            capacity=warehouse.capacity,
            stock=warehouse.stock,
            created_at=datetime.now(),
            archived_at=warehouse.archived_at
        )
        self.session.add(record)
        self.session.flush()
        return self._to_domain(record)

    def update(self, warehouse: Warehouse) -> Warehouse:
        record = self._find_record(warehouse.business_unit_code)
        if record is None:
            raise WarehouseNotFoundError(warehouse.business_unit_code)

        record.location = warehouse.location
        record.capacity = warehouse.capacity
        record.stock = warehouse.stock
        # Never un-archive
        if warehouse.archived_at is not None:
            record.archived_at = warehouse.archived_at

        self.session.flush()
        return self._to_domain(record)

    def count_active(self, location: str) -> int:
        return self.session.query(func.count(WarehouseRecord.id)).filter(
            WarehouseRecord.location == location,
            WarehouseRecord.archived_at.is_(None)
        ).scalar() or 0

    def total_capacity_active(self, location: str) -> int:
        return self.session.query(
            func.coalesce(func.sum(func.coalesce(WarehouseRecord.capacity, 0)), 0)
        ).filter(
            WarehouseRecord.location == location,
            WarehouseRecord.archived_at.is_(None)
        ).scalar() or 0

    def lock_by_code(self, business_unit_code: str) -> None:
        """Take a row lock on the warehouse for the rest of the transaction."""
        self.session.query(WarehouseRecord).filter(
            WarehouseRecord.business_unit_code == business_unit_code
        ).with_for_update().first()

    def _find_record(self, business_unit_code: str) -> Optional[WarehouseRecord]:
        return self.session.query(WarehouseRecord).filter(
            WarehouseRecord.business_unit_code == business_unit_code
        ).first()

    @staticmethod
    def _to_domain(record: WarehouseRecord) -> Warehouse:
        return Warehouse(
            id=record.id,
            business_unit_code=record.business_unit_code,
            location=record.location,
            capacity=record.capacity if record.capacity is not None else 0,
            stock=record.stock if record.stock is not None else 0,
            created_at=record.created_at,
            archived_at=record.archived_at
        )
