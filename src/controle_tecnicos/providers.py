"""
Geocoding providers.

Each provider exposes only the capabilities the resolution chain needs,
so the chain can run against deterministic stubs in tests:

- ``FreeTextGeocoder``: free-text search (both providers).
- ``StructuredGeocoder``: adds structured, city, bounded and reverse
  lookups (Nominatim only).
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from controle_tecnicos._http import _HttpSession
from controle_tecnicos.address import COUNTRY
from controle_tecnicos.models import BoundingBox, Coordinate, GeocodeHit
from controle_tecnicos.retry import NO_RETRY, RetryPolicy

logger = logging.getLogger(__name__)

NOMINATIM_BASE = "https://nominatim.openstreetmap.org"
PHOTON_BASE = "https://photon.komoot.io"


class FreeTextGeocoder(Protocol):
    name: str

    def search(self, query: str) -> list[GeocodeHit]:
        """Free-text search, best candidate first."""
        ...


class StructuredGeocoder(FreeTextGeocoder, Protocol):
    def structured_search(
        self, street: str, city: str, state: str, country: str = COUNTRY
    ) -> list[GeocodeHit]:
        ...

    def city_search(
        self, city: str, state: str, country: str = COUNTRY
    ) -> list[GeocodeHit]:
        """City-level search; hits carry the city's bounding box."""
        ...

    def bounded_search(self, query: str, box: BoundingBox) -> list[GeocodeHit]:
        """Free-text search restricted to *box*."""
        ...

    def reverse(self, coordinate: Coordinate) -> Optional[str]:
        """Display name of the place at *coordinate*."""
        ...


class NominatimProvider:
    """OpenStreetMap Nominatim over HTTP, honouring its rate limit."""

    name = "nominatim"

    def __init__(
        self,
        session: _HttpSession,
        base_url: str = NOMINATIM_BASE,
        retry: RetryPolicy = RetryPolicy(),
    ):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._retry = retry

    # ── Public API ────────────────────────────────────────────────

    def search(self, query: str) -> list[GeocodeHit]:
        return self._search({"q": query, "addressdetails": 1})

    def structured_search(
        self, street: str, city: str, state: str, country: str = COUNTRY
    ) -> list[GeocodeHit]:
        return self._search(
            {
                "street": street,
                "city": city,
                "state": state,
                "country": country,
                "addressdetails": 1,
            }
        )

    def city_search(
        self, city: str, state: str, country: str = COUNTRY
    ) -> list[GeocodeHit]:
        return self._search(
            {
                "city": city,
                "state": state,
                "country": country,
                "polygon_geojson": 0,
                "addressdetails": 0,
            }
        )

    def bounded_search(self, query: str, box: BoundingBox) -> list[GeocodeHit]:
        return self._search({"q": query, "bounded": 1, "viewbox": box.viewbox()})

    def reverse(self, coordinate: Coordinate) -> Optional[str]:
        response = self._session.get(
            f"{self._base_url}/reverse",
            params={"lat": coordinate.lat, "lon": coordinate.lon, "format": "json"},
            retry=self._retry,
        )
        if response is None:
            return None
        data = response.json()
        if not isinstance(data, dict) or "error" in data:
            return None
        return data.get("display_name")

    # ── Private helpers ───────────────────────────────────────────

    def _search(self, params: dict) -> list[GeocodeHit]:
        params = {**params, "format": "json", "limit": 1}
        response = self._session.get(
            f"{self._base_url}/search", params=params, retry=self._retry
        )
        if response is None:
            return []
        data = response.json()
        if not isinstance(data, list):
            return []
        return [self._to_hit(item) for item in data]

    @staticmethod
    def _to_hit(item: dict) -> GeocodeHit:
        return GeocodeHit(
            coordinate=Coordinate(float(item["lat"]), float(item["lon"])),
            bounding_box=NominatimProvider._to_box(item.get("boundingbox")),
            display_name=item.get("display_name", ""),
        )

    @staticmethod
    def _to_box(raw) -> Optional[BoundingBox]:
        """Only city-bounded search needs the box, so a malformed one is dropped."""
        if not raw:
            return None
        try:
            return BoundingBox.from_nominatim(raw)
        except (ValueError, TypeError):
            logger.warning(f"Ignoring malformed bounding box: {raw!r}")
            return None


class PhotonProvider:
    """Komoot Photon, used as the last-resort free-text geocoder."""

    name = "photon"

    def __init__(
        self,
        session: _HttpSession,
        base_url: str = PHOTON_BASE,
        retry: RetryPolicy = NO_RETRY,
    ):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._retry = retry

    def search(self, query: str) -> list[GeocodeHit]:
        response = self._session.get(
            f"{self._base_url}/api/",
            params={"q": query, "limit": 1},
            retry=self._retry,
        )
        if response is None:
            return []
        data = response.json()
        if not isinstance(data, dict):
            return []
        hits = []
        for feature in data.get("features") or []:
            # GeoJSON order: [lon, lat]
            lon, lat = feature["geometry"]["coordinates"][:2]
            hits.append(
                GeocodeHit(
                    coordinate=Coordinate(float(lat), float(lon)),
                    display_name=feature.get("properties", {}).get("name", ""),
                )
            )
        return hits
