"""
DevCamper Backend — Abstract Geocoder Interface
=================================================

What:  Contract for turning a free-text location (postal code or street
       address) into candidate coordinates.
Who:   BootcampService, for creation/updates (address → location) and for
       the radius search (zipcode → centre point).

Providers usually return several candidates ordered by confidence. Callers
use the first one and treat an empty list as "no such place".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


class Geocoder(ABC):
    """
    Contract:
        - geocode() never returns None; "nothing found" is an empty list
        - transport and provider failures raise GeocodingError
        - no retries: the first failure is final
    """

    @abstractmethod
    async def geocode(self, query: str) -> List[GeocodeResult]:
        ...
