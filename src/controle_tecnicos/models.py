"""Typed value objects for controle_tecnicos."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point. An unresolved address is None, never (0, 0)."""

    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lon}")

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}


@dataclass(frozen=True)
class BoundingBox:
    """City extent as reported by the geocoder."""

    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    @classmethod
    def from_nominatim(cls, raw: list) -> BoundingBox:
        """Build from Nominatim's ``[latMin, latMax, lonMin, lonMax]`` strings."""
        lat_min, lat_max, lon_min, lon_max = (float(v) for v in raw)
        return cls(lat_min, lat_max, lon_min, lon_max)

    def viewbox(self) -> str:
        """Render as a Nominatim viewbox: ``lonMin,latMax,lonMax,latMin``."""
        return f"{self.lon_min},{self.lat_max},{self.lon_max},{self.lat_min}"


@dataclass(frozen=True)
class StructuredAddress:
    street: str
    city: str
    state: str       # two-letter UF, upper-cased


@dataclass(frozen=True)
class ParsedAddress:
    """Outcome of structured parsing: either matched with an address or not."""

    matched: bool
    address: Optional[StructuredAddress] = None

    @classmethod
    def unmatched(cls) -> ParsedAddress:
        return cls(matched=False)

    @classmethod
    def of(cls, street: str, city: str, state: str) -> ParsedAddress:
        return cls(matched=True, address=StructuredAddress(street, city, state))


@dataclass(frozen=True)
class GeocodeHit:
    """One candidate returned by a geocoding provider."""

    coordinate: Coordinate
    bounding_box: Optional[BoundingBox] = None
    display_name: str = ""


@dataclass(frozen=True)
class RosterEntry:
    """A raw roster row: the address text plus untouched passthrough columns."""

    address: str
    fields: dict = field(default_factory=dict)
    coords: Optional[Coordinate] = None


@dataclass
class Technician:
    """Request-scoped technician with derived location, distance and price."""

    fields: dict
    address: str
    coords: Coordinate
    distance_km: Optional[float] = None
    price: Optional[float] = None


def format_amount(value: float) -> str:
    """Two-decimal display string; unreachable distances render as 'Infinity'."""
    if math.isinf(value):
        return "Infinity"
    return f"{value:.2f}"


@dataclass(frozen=True)
class MatchResult:
    """The selected technician for a service address."""

    technician: Technician
    distance_km: float       # full precision, math.inf when no route exists
    price: float
    candidates: int          # technicians that resolved to coordinates

    @property
    def reachable(self) -> bool:
        return not math.isinf(self.distance_km)

    def to_dict(self) -> dict:
        """Roster fields plus coords, distance and price (useful for JSON)."""
        payload = dict(self.technician.fields)
        payload["coords"] = self.technician.coords.to_dict()
        payload["distancia"] = format_amount(self.distance_km)
        payload["valor"] = format_amount(self.price)
        return payload
