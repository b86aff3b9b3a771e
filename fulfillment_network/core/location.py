# fulfillment_network/core/location.py
from dataclasses import dataclass
from typing import Dict, List, Optional

from fulfillment_network.exceptions import LocationNotFoundError


@dataclass(frozen=True)
class Location:
    """A physical site with a fixed quota on warehouse count and total capacity."""

    identification: str
    max_number_of_warehouses: int
    max_capacity: int


LOCATIONS: Dict[str, Location] = {
    location.identification: location
    for location in (
        Location("ZWOLLE-001", 1, 40),
        Location("ZWOLLE-002", 2, 50),
        Location("AMSTERDAM-001", 5, 100),
        Location("AMSTERDAM-002", 3, 75),
        Location("TILBURG-001", 1, 40),
        Location("HELMOND-001", 1, 45),
        Location("EINDHOVEN-001", 2, 70),
        Location("VETSBY-001", 1, 90),
    )
}


class LocationDirectory:
    """Read-only lookup of locations by identifier."""

    def __init__(self, locations: Optional[Dict[str, Location]] = None):
        self._locations = dict(LOCATIONS if locations is None else locations)

    def resolve(self, identifier: Optional[str]) -> Location:
        """Resolve a location by its identifier.

        Args:
            identifier: Location identifier, e.g. ``ZWOLLE-001``

        Returns:
            The matching Location

        Raises:
            LocationNotFoundError: If the identifier is null, empty or unknown
        """
        if not identifier or identifier not in self._locations:
            raise LocationNotFoundError(identifier)
        return self._locations[identifier]

    def list_locations(self) -> List[Location]:
        return sorted(self._locations.values(), key=lambda location: location.identification)
