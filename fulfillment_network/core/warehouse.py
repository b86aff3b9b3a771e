# fulfillment_network/core/warehouse.py
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional
import enum

from fulfillment_network.exceptions import ValidationError


class WarehouseStatus(enum.Enum):
    """Lifecycle of a warehouse. Archiving is a soft delete."""
    ACTIVE = 'ACTIVE'
    ARCHIVED = 'ARCHIVED'

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Warehouse:
    """Warehouse value passed between the API, the use cases and the store.

    Instances are immutable: every layer builds its own value instead of
    mutating one it received.
    """

    business_unit_code: str
    location: str
    capacity: int
    stock: int
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    @property
    def status(self) -> WarehouseStatus:
        if self.archived_at is None:
            return WarehouseStatus.ACTIVE
        return WarehouseStatus.ARCHIVED

    @property
    def is_active(self) -> bool:
        return self.status is WarehouseStatus.ACTIVE

    def archive(self, at: Optional[datetime] = None) -> 'Warehouse':
        """Return an archived copy stamped with ``at`` (defaults to now)."""
        return replace(self, archived_at=at or datetime.now())

    def replace_with(self, location: str, capacity: int, stock: int) -> 'Warehouse':
        """Return a copy carrying new location, capacity and stock under the same code."""
        return replace(self, location=location, capacity=capacity, stock=stock)

    def to_dict(self):
        return {
            'id': self.id,
            'business_unit_code': self.business_unit_code,
            'location': self.location,
            'capacity': self.capacity,
            'stock': self.stock,
            'status': str(self.status),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'archived_at': self.archived_at.isoformat() if self.archived_at else None,
        }

    def validate_quantities(self) -> None:
        if self.capacity < 0 or self.stock < 0:
            raise ValidationError(
                f"Warehouse capacity ({self.capacity}) and stock ({self.stock}) must not be negative"
            )

    def validate_stock(self) -> None:
        """Check that stock fits the capacity.

        Raises:
            ValidationError: If stock exceeds capacity
        """
        if self.stock > self.capacity:
            raise ValidationError(
                f"Warehouse stock ({self.stock}) exceeds capacity ({self.capacity})"
            )
