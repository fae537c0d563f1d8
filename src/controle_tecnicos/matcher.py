"""Nearest-technician selection and pricing."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from controle_tecnicos.exceptions import (
    AddressNotProvided,
    AddressUnresolvable,
    NoTechnicianAvailable,
)
from controle_tecnicos.models import Coordinate, MatchResult, RosterEntry, Technician

logger = logging.getLogger(__name__)

ROUND_TRIP_FACTOR = 2
RATE_PER_KM = 1.3


class Resolver(Protocol):
    def resolve(self, raw: Optional[str]) -> Optional[Coordinate]: ...


class Router(Protocol):
    def distance_km(self, origin: Coordinate, destination: Coordinate) -> float: ...


def price_for(distance_km: float) -> float:
    """Round-trip travel charge for a one-way road distance."""
    return distance_km * ROUND_TRIP_FACTOR * RATE_PER_KM


class MatchEngine:
    """
    Pick the technician closest by road to a service address.

    Everything runs sequentially in roster order: the target is resolved
    first, then each roster address, then one route per technician.
    """

    def __init__(self, resolver: Resolver, router: Router):
        self._resolver = resolver
        self._router = router

    def match(self, target_address: Optional[str], roster: Iterable[RosterEntry]) -> MatchResult:
        """
        Return the nearest technician with distance and price.

        Raises AddressNotProvided, AddressUnresolvable or NoTechnicianAvailable.
        """
        if not target_address or not target_address.strip():
            raise AddressNotProvided()

        destination = self._resolver.resolve(target_address)
        if destination is None:
            raise AddressUnresolvable(target_address)

        entries = list(roster)
        technicians = self._locate(entries)
        if not technicians:
            raise NoTechnicianAvailable(len(entries))

        best: Optional[Technician] = None
        for tech in technicians:
            tech.distance_km = self._router.distance_km(tech.coords, destination)
            tech.price = price_for(tech.distance_km)
            # Strict comparison: on a tie the earlier roster entry stays
            if best is None or tech.distance_km < best.distance_km:
                best = tech

        result = MatchResult(
            technician=best,
            distance_km=best.distance_km,
            price=best.price,
            candidates=len(technicians),
        )
        if not result.reachable:
            logger.warning(f"No route to '{target_address}' from any technician")
        return result

    def _locate(self, entries: list[RosterEntry]) -> list[Technician]:
        """Resolve roster addresses, dropping the ones that cannot be located."""
        located = []
        for entry in entries:
            if not entry.address:
                continue
            coords = entry.coords or self._resolver.resolve(entry.address)
            if coords is None:
                logger.warning(f"Technician address not located: {entry.address}")
                continue
            located.append(
                Technician(fields=dict(entry.fields), address=entry.address, coords=coords)
            )
        return located
