"""Road distance through an OSRM routing service."""

import logging
import math

from controle_tecnicos._http import _HttpSession
from controle_tecnicos.models import Coordinate
from controle_tecnicos.retry import NO_RETRY, RetryPolicy

logger = logging.getLogger(__name__)

OSRM_BASE = "https://router.project-osrm.org/route/v1/driving"


class OsrmRoutingClient:
    """
    Driving distance between two points.

    Only the route summary is requested (``overview=false``); nothing is
    memoized, so repeated pairs are fetched again.
    """

    def __init__(
        self,
        session: _HttpSession,
        base_url: str = OSRM_BASE,
        retry: RetryPolicy = NO_RETRY,
    ):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._retry = retry

    def distance_km(self, origin: Coordinate, destination: Coordinate) -> float:
        """Kilometers by road, or ``math.inf`` when no route exists."""
        url = (
            f"{self._base_url}/{origin.lon},{origin.lat};"
            f"{destination.lon},{destination.lat}"
        )
        response = self._session.get(
            url, params={"overview": "false"}, retry=self._retry
        )
        if response is None:
            return math.inf

        routes = response.json().get("routes")
        if not routes:
            logger.info(f"No route between {origin} and {destination}")
            return math.inf
        return routes[0]["distance"] / 1000
