"""TechnicianLocator — the main entry point for the library."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

import httpx

from controle_tecnicos._http import _HttpSession
from controle_tecnicos.config import Settings
from controle_tecnicos.geocoder import GeocodeCache, GeocodeResolver
from controle_tecnicos.matcher import MatchEngine
from controle_tecnicos.models import Coordinate, MatchResult, RosterEntry
from controle_tecnicos.providers import NominatimProvider, PhotonProvider
from controle_tecnicos.retry import RetryPolicy
from controle_tecnicos.roster import CsvRosterProvider, RosterProvider
from controle_tecnicos.routing import OsrmRoutingClient


class TechnicianLocator:
    """
    Finds the nearest technician for a service address.

    Wires Nominatim (primary geocoder), Photon (secondary geocoder) and
    OSRM (routing) over one shared HTTP session. The roster is loaded
    again on every ``find_nearest`` call.
    """

    def __init__(
        self,
        roster: Union[RosterProvider, str, Path, None] = None,
        settings: Optional[Settings] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        cache: Optional[GeocodeCache] = None,
    ):
        self._settings = settings or Settings()
        self._roster = self._make_roster(roster)
        self._session = _HttpSession(
            user_agent=self._settings.user_agent,
            timeout=self._settings.http_timeout,
            client=http_client,
            sleep=sleep,
        )
        retry = RetryPolicy.with_retries(
            self._settings.rate_limit_retries, self._settings.rate_limit_delay
        )
        self._nominatim = NominatimProvider(
            self._session, self._settings.nominatim_url, retry=retry
        )
        self._resolver = GeocodeResolver(
            primary=self._nominatim,
            secondary=PhotonProvider(self._session, self._settings.photon_url),
            cache=cache,
        )
        self._engine = MatchEngine(
            self._resolver, OsrmRoutingClient(self._session, self._settings.osrm_url)
        )

    # ── Public API ────────────────────────────────────────────────

    def find_nearest(self, address: Optional[str]) -> MatchResult:
        """
        Match *address* against a fresh snapshot of the roster.

        Returns a MatchResult on success. Raises AddressNotProvided,
        AddressUnresolvable, NoTechnicianAvailable, RosterNotFound or
        RosterInvalid on failure. HTTP transport errors propagate.
        """
        return self._engine.match(address, self._roster_rows())

    def resolve(self, address: Optional[str]) -> Optional[Coordinate]:
        """Run the geocoding chain alone; None when the address is not found."""
        return self._resolver.resolve(address)

    def describe(self, coordinate: Coordinate) -> Optional[str]:
        """Reverse-geocode *coordinate* to a display name."""
        return self._nominatim.reverse(coordinate)

    def health_check(self) -> dict:
        """
        Verify the roster can be read.

        Returns a dict with status information.
        """
        status: dict = {"healthy": True, "roster": "ok"}
        try:
            self._roster.validate()
        except Exception as exc:
            status["healthy"] = False
            status["roster"] = str(exc)
        return status

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> TechnicianLocator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── Private helpers ───────────────────────────────────────────

    def _roster_rows(self) -> Iterator[RosterEntry]:
        # Read only when the engine iterates, after the target has resolved
        yield from self._roster.load()

    def _make_roster(self, roster) -> RosterProvider:
        if roster is None:
            roster = self._settings.roster_path
        if isinstance(roster, (str, Path)):
            return CsvRosterProvider(roster, self._settings.roster_address_field)
        return roster
