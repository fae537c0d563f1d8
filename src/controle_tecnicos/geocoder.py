"""
Address → coordinate resolution through an ordered chain of strategies.

Strategies, each tried only when the previous one found nothing:

1. direct              raw text (plus ", Brasil") on the primary provider
2. normalized          accent-free, whitespace-collapsed text
3. structured          street / city / state fields
   3a. without number  same, with house numbers removed from the street
   3b. city bounded    street searched inside the city's bounding box
4. secondary           normalized text on the secondary provider

The first candidate of the first strategy that returns anything wins.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

import httpx

from controle_tecnicos import address
from controle_tecnicos.models import Coordinate, GeocodeHit, StructuredAddress
from controle_tecnicos.providers import FreeTextGeocoder, StructuredGeocoder

logger = logging.getLogger(__name__)

Strategy = Callable[[str, str], list[GeocodeHit]]


class GeocodeCache(Protocol):
    def get(self, key: str) -> Optional[Coordinate]: ...

    def set(self, key: str, value: Coordinate) -> None: ...


class InMemoryGeocodeCache:
    """Plain dict cache; lives only as long as the object holding it."""

    def __init__(self):
        self._entries: dict[str, Coordinate] = {}

    def get(self, key: str) -> Optional[Coordinate]:
        return self._entries.get(key)

    def set(self, key: str, value: Coordinate) -> None:
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)


class GeocodeResolver:
    """Resolve free-text Brazilian addresses to coordinates."""

    def __init__(
        self,
        primary: StructuredGeocoder,
        secondary: Optional[FreeTextGeocoder] = None,
        cache: Optional[GeocodeCache] = None,
    ):
        self._primary = primary
        self._secondary = secondary
        self._cache = cache
        self._strategies: list[tuple[str, Strategy]] = [
            ("direct", self._direct),
            ("normalized", self._normalized),
            ("structured", self._structured),
            ("secondary", self._fallback),
        ]

    # ── Public API ────────────────────────────────────────────────

    def resolve(self, raw: Optional[str]) -> Optional[Coordinate]:
        """
        Return the coordinate for *raw*, or None when every strategy fails.

        Empty input returns None without contacting any provider.
        """
        query = address.with_country(raw)
        if not query:
            return None

        key = raw.strip()
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        normalized = address.normalise(query)
        for name, strategy in self._strategies:
            hits = strategy(query, normalized)
            if hits:
                coordinate = hits[0].coordinate
                logger.info(f"Resolved '{key}' via {name} strategy: {coordinate}")
                if self._cache is not None:
                    self._cache.set(key, coordinate)
                return coordinate

        logger.info(f"No strategy resolved '{key}'")
        return None

    # ── Strategies ────────────────────────────────────────────────

    def _direct(self, query: str, normalized: str) -> list[GeocodeHit]:
        return self._primary.search(query)

    def _normalized(self, query: str, normalized: str) -> list[GeocodeHit]:
        return self._primary.search(normalized)

    def _structured(self, query: str, normalized: str) -> list[GeocodeHit]:
        parsed = address.parse_structured(normalized)
        if not parsed.matched:
            return []
        parts = parsed.address

        hits = self._primary.structured_search(parts.street, parts.city, parts.state)
        if hits:
            return hits

        street_no_number = address.strip_house_numbers(parts.street)
        if street_no_number and street_no_number != parts.street:
            hits = self._primary.structured_search(
                street_no_number, parts.city, parts.state
            )
            if hits:
                return hits

        return self._city_bounded(parts, normalized)

    def _city_bounded(
        self, parts: StructuredAddress, normalized: str
    ) -> list[GeocodeHit]:
        cities = self._primary.city_search(parts.city, parts.state)
        if not cities or cities[0].bounding_box is None:
            return []
        return self._primary.bounded_search(
            parts.street or normalized, cities[0].bounding_box
        )

    def _fallback(self, query: str, normalized: str) -> list[GeocodeHit]:
        if self._secondary is None:
            return []
        try:
            return self._secondary.search(normalized)
        except (
            httpx.HTTPError, ValueError, KeyError, IndexError, TypeError, AttributeError
        ) as exc:
            logger.warning(
                f"Secondary geocoder {self._secondary.name} failed for "
                f"'{normalized}': {exc}"
            )
            return []
