from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from motorhub.errors import UpstreamFetchFailure, ValidationFailure
from motorhub.services.overpass_client import OverpassClient, OverpassQuery

OVERPASS_URL = "https://overpass.test/api/interpreter"


def _client(handler) -> OverpassClient:
    return OverpassClient(
        base_url=OVERPASS_URL,
        timeout_seconds=25,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_query_targets_country_area_and_car_tags() -> None:
    query = OverpassQuery.car_related_businesses("bg", timeout=25)

    assert query.timeout == 25
    assert query.query.startswith("[out:json][timeout:25];")
    assert 'area["ISO3166-1"="BG"][admin_level=2]->.searchArea;' in query.query
    assert 'node["amenity"="fuel"](area.searchArea);' in query.query
    assert 'node["service"="vehicle_inspection"](area.searchArea);' in query.query


@pytest.mark.parametrize("code", ["", "BGR", "1A", "b g"])
def test_invalid_country_code_is_rejected(code: str) -> None:
    with pytest.raises(ValidationFailure):
        OverpassQuery.car_related_businesses(code)


def test_fetch_parses_elements() -> None:
    captured: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = request.content.decode()
        return httpx.Response(
            200,
            json={
                "elements": [
                    {"type": "node", "id": 11, "lat": 42.7, "lon": 23.3, "tags": {"amenity": "fuel"}},
                    {"type": "way", "id": 12},
                    {"type": "node", "lat": 1.0},
                ]
            },
        )

    elements = _client(handler).fetch("BG")

    assert [element.id for element in elements] == [11, 12]
    assert elements[0].element_type == "node"
    assert elements[0].tags == {"amenity": "fuel"}
    assert elements[1].has_coordinates is False
    assert elements[1].tags == {}
    assert "ISO3166-1" in parse_qs(captured["body"])["data"][0]


def test_zero_elements_is_not_a_failure() -> None:
    elements = _client(lambda request: httpx.Response(200, json={"elements": []})).fetch("BG")
    assert elements == []


def test_server_error_is_retryable_upstream_failure() -> None:
    with pytest.raises(UpstreamFetchFailure) as excinfo:
        _client(lambda request: httpx.Response(504, text="Gateway timeout")).fetch("BG")
    assert excinfo.value.retryable is True
    assert "HTTP 504" in excinfo.value.message


def test_bad_request_is_not_retryable() -> None:
    with pytest.raises(UpstreamFetchFailure) as excinfo:
        _client(lambda request: httpx.Response(400, text="parse error")).fetch("BG")
    assert excinfo.value.retryable is False


def test_timeout_surfaces_as_retryable_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamFetchFailure) as excinfo:
        _client(handler).fetch("BG")
    assert excinfo.value.retryable is True
    assert excinfo.value.timed_out is True
    assert excinfo.value.http_status() == 504


def test_connection_error_surfaces_as_upstream_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamFetchFailure):
        _client(handler).fetch("BG")


def test_malformed_body_is_upstream_failure() -> None:
    with pytest.raises(UpstreamFetchFailure):
        _client(lambda request: httpx.Response(200, text="<html>busy</html>")).fetch("BG")
    with pytest.raises(UpstreamFetchFailure):
        _client(lambda request: httpx.Response(200, json={"remark": "no elements"})).fetch("BG")
