from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from ..errors import UpstreamFetchFailure, ValidationFailure
from ..schemas import RawElement
from ..telemetry import timed_stage

logger = logging.getLogger(__name__)

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
DEFAULT_QUERY_TIMEOUT_SECONDS = 50
# Extra time allowed on top of the server-side query timeout.
HTTP_TIMEOUT_MARGIN_SECONDS = 10.0

COUNTRY_CODE_PATTERN = re.compile(r"^[A-Z]{2}$")

CAR_RELATED_SELECTORS: tuple[tuple[str, str], ...] = (
    ("amenity", "car_wash"),
    ("amenity", "fuel"),
    ("amenity", "charging_station"),
    ("amenity", "car_rental"),
    ("amenity", "parking"),
    ("shop", "car_repair"),
    ("shop", "car"),
    ("shop", "car_parts"),
    ("shop", "tyres"),
    ("shop", "wheels"),
    ("craft", "car_repair"),
    ("service", "vehicle_inspection"),
)


def normalize_country_code(value: str) -> str:
    code = (value or "").strip().upper()
    if not COUNTRY_CODE_PATTERN.match(code):
        raise ValidationFailure(f"Invalid country code {value!r}; expected ISO 3166-1 alpha-2")
    return code


@dataclass(frozen=True)
class OverpassQuery:
    query: str
    timeout: int = DEFAULT_QUERY_TIMEOUT_SECONDS

    @classmethod
    def car_related_businesses(cls, country_code: str, timeout: int = DEFAULT_QUERY_TIMEOUT_SECONDS) -> OverpassQuery:
        code = normalize_country_code(country_code)
        selectors = "\n".join(
            f'  node["{key}"="{value}"](area.searchArea);' for key, value in CAR_RELATED_SELECTORS
        )
        query = (
            f"[out:json][timeout:{timeout}];\n"
            f'area["ISO3166-1"="{code}"][admin_level=2]->.searchArea;\n'
            "(\n"
            f"{selectors}\n"
            ");\n"
            "out body;\n"
            ">;\n"
            "out skel qt;"
        )
        return cls(query=query, timeout=timeout)


class OverpassClient:
    """Fetches tagged elements from an Overpass API endpoint.

    Every request is bounded by the query timeout plus a fixed margin.
    Transport errors, timeouts, non-success statuses and unparseable
    bodies all raise UpstreamFetchFailure; an empty element list is a
    normal result.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_OVERPASS_URL,
        timeout_seconds: int = DEFAULT_QUERY_TIMEOUT_SECONDS,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> OverpassClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch(self, country_code: str) -> list[RawElement]:
        query = OverpassQuery.car_related_businesses(country_code, timeout=self.timeout_seconds)
        return self.execute_query(query)

    def execute_query(self, query: OverpassQuery) -> list[RawElement]:
        logger.debug("Executing Overpass query: %s", query.query)
        try:
            with timed_stage("fetch"):
                response = self._client.post(
                    self.base_url,
                    data={"data": query.query},
                    timeout=query.timeout + HTTP_TIMEOUT_MARGIN_SECONDS,
                )
        except httpx.TimeoutException as exc:
            raise UpstreamFetchFailure(f"Overpass request timed out: {exc}", timed_out=True) from exc
        except httpx.HTTPError as exc:
            raise UpstreamFetchFailure(f"Overpass request failed: {exc}") from exc

        if not response.is_success:
            logger.warning("Overpass returned HTTP %s", response.status_code)
            raise UpstreamFetchFailure(
                f"HTTP {response.status_code}: {response.text[:500]}",
                retryable=response.status_code == 429 or response.status_code >= 500,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamFetchFailure(f"Overpass returned malformed JSON: {exc}", retryable=False) from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
            raise UpstreamFetchFailure("Overpass response has no element list", retryable=False)

        elements: list[RawElement] = []
        for raw in payload["elements"]:
            try:
                elements.append(RawElement.model_validate(raw))
            except ValidationError:
                logger.debug("Skipping malformed Overpass element: %r", raw)

        logger.info("Received %s elements from Overpass API", len(elements))
        return elements
