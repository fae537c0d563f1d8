"""Tests for controle_tecnicos.providers and the HTTP session retry."""

import httpx
import pytest

from controle_tecnicos._http import _HttpSession
from controle_tecnicos.geocoder import GeocodeResolver
from controle_tecnicos.models import BoundingBox, Coordinate
from controle_tecnicos.providers import NominatimProvider, PhotonProvider
from controle_tecnicos.retry import RetryPolicy

SAO_PAULO = {
    "lat": "-23.5506507",
    "lon": "-46.6333824",
    "display_name": "São Paulo, Brasil",
    "boundingbox": ["-24.0079003", "-23.3577551", "-46.8262692", "-46.3650898"],
}


class Recorder:
    """MockTransport handler replaying a queue of responses."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def make_session(handler, sleeps=None) -> _HttpSession:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    sleep = sleeps.append if sleeps is not None else (lambda s: None)
    return _HttpSession("controle-tecnicos-test/1.0", client=client, sleep=sleep)


class TestNominatimSearch:
    def test_free_text_params(self):
        rec = Recorder(httpx.Response(200, json=[SAO_PAULO]))
        provider = NominatimProvider(make_session(rec))

        hits = provider.search("São Paulo, Brasil")

        params = rec.requests[0].url.params
        assert rec.requests[0].url.path == "/search"
        assert params["q"] == "São Paulo, Brasil"
        assert params["format"] == "json"
        assert params["limit"] == "1"
        assert params["addressdetails"] == "1"
        assert hits[0].coordinate == Coordinate(-23.5506507, -46.6333824)
        assert hits[0].display_name == "São Paulo, Brasil"

    def test_bounding_box_parsed(self):
        rec = Recorder(httpx.Response(200, json=[SAO_PAULO]))
        box = NominatimProvider(make_session(rec)).city_search("Sao Paulo", "SP")[0].bounding_box

        assert box == BoundingBox(-24.0079003, -23.3577551, -46.8262692, -46.3650898)
        params = rec.requests[0].url.params
        assert params["city"] == "Sao Paulo"
        assert params["state"] == "SP"
        assert params["country"] == "Brasil"
        assert params["addressdetails"] == "0"
        assert "q" not in params

    def test_structured_params(self):
        rec = Recorder(httpx.Response(200, json=[]))
        hits = NominatimProvider(make_session(rec)).structured_search(
            "Rua das Flores", "Sao Paulo", "SP"
        )

        assert hits == []
        params = rec.requests[0].url.params
        assert params["street"] == "Rua das Flores"
        assert params["city"] == "Sao Paulo"
        assert params["state"] == "SP"
        assert params["country"] == "Brasil"

    def test_bounded_params(self):
        rec = Recorder(httpx.Response(200, json=[]))
        box = BoundingBox(-24.0, -23.3, -46.9, -46.3)
        NominatimProvider(make_session(rec)).bounded_search("Rua das Flores", box)

        params = rec.requests[0].url.params
        assert params["bounded"] == "1"
        assert params["viewbox"] == "-46.9,-23.3,-46.3,-24.0"
        assert params["q"] == "Rua das Flores"

    def test_user_agent_sent(self):
        rec = Recorder(httpx.Response(200, json=[]))
        NominatimProvider(make_session(rec)).search("x")
        assert rec.requests[0].headers["User-Agent"] == "controle-tecnicos-test/1.0"

    def test_custom_base_url(self):
        rec = Recorder(httpx.Response(200, json=[]))
        NominatimProvider(make_session(rec), "http://geo.local:8080/").search("x")
        assert str(rec.requests[0].url).startswith("http://geo.local:8080/search?")

    def test_malformed_payload_propagates(self):
        rec = Recorder(httpx.Response(502, text="<html>Bad gateway</html>"))
        with pytest.raises(ValueError):
            NominatimProvider(make_session(rec)).search("x")


class TestNominatimReverse:
    def test_display_name(self):
        rec = Recorder(httpx.Response(200, json=SAO_PAULO))
        name = NominatimProvider(make_session(rec)).reverse(Coordinate(-23.55, -46.63))

        assert name == "São Paulo, Brasil"
        assert rec.requests[0].url.path == "/reverse"
        assert rec.requests[0].url.params["lat"] == "-23.55"

    def test_unable_to_geocode(self):
        rec = Recorder(httpx.Response(200, json={"error": "Unable to geocode"}))
        assert NominatimProvider(make_session(rec)).reverse(Coordinate(0.5, 0.5)) is None


class TestRateLimitRetry:
    def test_retry_once_then_succeed(self):
        sleeps = []
        rec = Recorder(httpx.Response(429), httpx.Response(200, json=[SAO_PAULO]))
        provider = NominatimProvider(make_session(rec, sleeps))

        hits = provider.search("Sao Paulo")

        assert len(rec.requests) == 2
        assert sleeps == [1.0]
        assert hits[0].coordinate.lat == -23.5506507

    def test_retry_result_is_final(self):
        sleeps = []
        rec = Recorder(httpx.Response(429), httpx.Response(429))
        provider = NominatimProvider(make_session(rec, sleeps))

        assert provider.search("Sao Paulo") == []
        assert len(rec.requests) == 2
        assert sleeps == [1.0]

    def test_configured_policy(self):
        sleeps = []
        rec = Recorder(
            httpx.Response(429), httpx.Response(429), httpx.Response(200, json=[])
        )
        policy = RetryPolicy(max_attempts=3, delay=0.25)
        NominatimProvider(make_session(rec, sleeps), retry=policy).search("x")

        assert len(rec.requests) == 3
        assert sleeps == [0.25, 0.25]

    def test_resolver_continues_after_exhausted_retry(self):
        sleeps = []
        rec = Recorder(
            httpx.Response(429),
            httpx.Response(429),
            httpx.Response(200, json=[SAO_PAULO]),
        )
        resolver = GeocodeResolver(NominatimProvider(make_session(rec, sleeps)))

        coordinate = resolver.resolve("São Paulo")

        assert coordinate == Coordinate(-23.5506507, -46.6333824)
        assert rec.requests[2].url.params["q"] == "Sao Paulo, Brasil"
        assert sleeps == [1.0]

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)


class TestPhoton:
    def test_lon_lat_order(self):
        rec = Recorder(
            httpx.Response(
                200,
                json={
                    "features": [
                        {
                            "geometry": {"type": "Point", "coordinates": [-47.06, -22.90]},
                            "properties": {"name": "Campinas"},
                        }
                    ]
                },
            )
        )
        hits = PhotonProvider(make_session(rec)).search("Campinas - SP, Brasil")

        assert hits[0].coordinate == Coordinate(lat=-22.90, lon=-47.06)
        assert rec.requests[0].url.path == "/api/"
        assert rec.requests[0].url.params["limit"] == "1"

    def test_no_features(self):
        rec = Recorder(httpx.Response(200, json={"features": []}))
        assert PhotonProvider(make_session(rec)).search("x") == []

    def test_no_retry_by_default(self):
        sleeps = []
        rec = Recorder(httpx.Response(429))
        assert PhotonProvider(make_session(rec, sleeps)).search("x") == []
        assert sleeps == []

    @pytest.mark.parametrize("payload", [[], ["Campinas"], "Campinas", 42])
    def test_non_object_payload(self, payload):
        rec = Recorder(httpx.Response(200, json=payload))
        assert PhotonProvider(make_session(rec)).search("x") == []

    def test_non_object_payload_leaves_address_unresolved(self):
        nominatim = Recorder(*[httpx.Response(200, json=[]) for _ in range(2)])
        photon = Recorder(httpx.Response(200, json=[]))
        resolver = GeocodeResolver(
            NominatimProvider(make_session(nominatim)),
            PhotonProvider(make_session(photon)),
        )

        assert resolver.resolve("Rua X") is None
        assert len(photon.requests) == 1


class TestBoundingBox:
    @pytest.mark.parametrize(
        "box", [["-23.6", "-23.5"], ["a", "b", "c", "d"], [None, "-23.5", "-46.7", "-46.6"]]
    )
    def test_malformed_box_ignored_on_search_hit(self, box):
        rec = Recorder(httpx.Response(200, json=[{**SAO_PAULO, "boundingbox": box}]))
        hits = NominatimProvider(make_session(rec)).search("Sao Paulo")

        assert hits[0].coordinate == Coordinate(-23.5506507, -46.6333824)
        assert hits[0].bounding_box is None

    def test_missing_box(self):
        item = {k: v for k, v in SAO_PAULO.items() if k != "boundingbox"}
        rec = Recorder(httpx.Response(200, json=[item]))
        assert NominatimProvider(make_session(rec)).search("x")[0].bounding_box is None
