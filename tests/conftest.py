"""Shared test fixtures — stub providers, a fake upstream and a small roster."""

import csv
from pathlib import Path

import httpx
import pytest

ADDRESS_COLUMN = "ENDEREÇO/RESIDENCIA"


class StubGeocoder:
    """Answers from a table keyed by (capability, *args) and records every call."""

    name = "stub"

    def __init__(self, responses: dict | None = None):
        self.responses = responses or {}
        self.calls: list[tuple] = []

    def _answer(self, key: tuple) -> list:
        self.calls.append(key)
        value = self.responses.get(key, [])
        if isinstance(value, Exception):
            raise value
        return value

    def search(self, query):
        return self._answer(("search", query))

    def structured_search(self, street, city, state, country="Brasil"):
        return self._answer(("structured", street, city, state))

    def city_search(self, city, state, country="Brasil"):
        return self._answer(("city", city, state))

    def bounded_search(self, query, box):
        return self._answer(("bounded", query, box.viewbox()))

    def reverse(self, coordinate):
        return self._answer(("reverse", coordinate))


class StubResolver:
    """Resolves from a dict of address -> Coordinate."""

    def __init__(self, places: dict):
        self.places = places
        self.calls: list = []

    def resolve(self, raw):
        self.calls.append(raw)
        return self.places.get(raw)


class StubRouter:
    """Distance keyed by the origin coordinate."""

    def __init__(self, distances: dict):
        self.distances = distances
        self.calls: list = []

    def distance_km(self, origin, destination):
        self.calls.append((origin, destination))
        return self.distances[origin]


class FakeUpstream:
    """An httpx.MockTransport handler serving Nominatim, Photon and OSRM."""

    def __init__(self):
        self.places: dict[str, tuple[float, float]] = {}
        self.routes: dict[str, float] = {}
        self.requests: list[httpx.Request] = []

    def add_place(self, query: str, lat: float, lon: float) -> None:
        self.places[query] = (lat, lon)

    def add_route(self, origin: tuple[float, float], meters: float) -> None:
        lat, lon = origin
        self.routes[f"{lon},{lat}"] = meters

    def hosts(self) -> list[str]:
        return [r.url.host for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "nominatim.openstreetmap.org":
            place = self.places.get(request.url.params.get("q"))
            if place is None:
                return httpx.Response(200, json=[])
            lat, lon = place
            return httpx.Response(200, json=[{"lat": str(lat), "lon": str(lon)}])
        if host == "photon.komoot.io":
            return httpx.Response(200, json={"type": "FeatureCollection", "features": []})
        if host == "router.project-osrm.org":
            origin = request.url.path.rsplit("/", 1)[1].split(";")[0]
            meters = self.routes.get(origin)
            if meters is None:
                return httpx.Response(400, json={"code": "NoRoute", "message": "No route"})
            return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": meters}]})
        return httpx.Response(404)


@pytest.fixture()
def stub_geocoder():
    """Factory for StubGeocoder instances."""
    return StubGeocoder


@pytest.fixture()
def stub_resolver():
    return StubResolver


@pytest.fixture()
def stub_router():
    return StubRouter


@pytest.fixture()
def upstream() -> FakeUpstream:
    """Fake upstream knowing a service address and two technicians in Campinas."""
    fake = FakeUpstream()
    fake.add_place("Av. Central 500, Campinas - SP, Brasil", -22.90, -47.06)
    fake.add_place("Rua A 10, Campinas - SP, Brasil", -22.95, -47.10)
    fake.add_place("Rua B 20, Campinas - SP, Brasil", -22.85, -47.00)
    fake.add_route((-22.95, -47.10), 12000.0)
    fake.add_route((-22.85, -47.00), 8000.0)
    return fake


@pytest.fixture()
def http_client(upstream: FakeUpstream):
    client = httpx.Client(transport=httpx.MockTransport(upstream))
    yield client
    client.close()


@pytest.fixture()
def roster_csv(tmp_path: Path) -> Path:
    """Create a small roster CSV (with BOM) with realistic rows."""
    path = tmp_path / "tecnicos.csv"
    rows = [
        ["NOME", "TELEFONE", ADDRESS_COLUMN],
        ["Ana", "1111-1111", "Rua A 10, Campinas - SP"],
        ["Bruno", "2222-2222", "Rua B 20, Campinas - SP"],
        # No address: skipped without a lookup
        ["Carla", "3333-3333", ""],
        # Never found by any provider
        ["Diego", "4444-4444", "Travessa Inexistente 99, Lugar Nenhum - ZZ"],
    ]
    with path.open("w", newline="", encoding="utf-8-sig") as fh:
        csv.writer(fh).writerows(rows)
    return path


@pytest.fixture()
def locator(roster_csv: Path, http_client: httpx.Client):
    """Create a TechnicianLocator wired to the fake upstream."""
    from controle_tecnicos import TechnicianLocator

    loc = TechnicianLocator(roster_csv, http_client=http_client, sleep=lambda s: None)
    yield loc
    loc.close()
