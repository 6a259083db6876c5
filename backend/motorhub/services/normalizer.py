from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..categories import BusinessCategory, classify

ADDRESS_TRAILING_KEYS: tuple[str, ...] = ("addr:city", "addr:postcode", "addr:country")


@dataclass(frozen=True, slots=True)
class BusinessCandidate:
    """Externally-sourced business record, keyed by the feed's element id."""

    external_id: int
    latitude: float
    longitude: float
    name: str | None = None
    name_en: str | None = None
    address: str | None = None
    city: str | None = None
    categories: tuple[BusinessCategory, ...] = field(default_factory=tuple)


def _tag(tags: Mapping[str, str], key: str) -> str | None:
    value = tags.get(key)
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def build_address(tags: Mapping[str, str]) -> str | None:
    parts: list[str] = []
    street = _tag(tags, "addr:street")
    if street:
        number = _tag(tags, "addr:housenumber")
        parts.append(f"{street} {number}" if number else street)
    for key in ADDRESS_TRAILING_KEYS:
        value = _tag(tags, key)
        if value:
            parts.append(value)
    if not parts:
        return None
    return ", ".join(parts)


def normalize(
    external_id: int,
    lat: float,
    lon: float,
    tags: Mapping[str, str],
    categories: Sequence[BusinessCategory] | None = None,
) -> BusinessCandidate:
    """Turn one tagged feed element into a candidate record.

    Missing or blank tags become absent fields; this never raises on tag
    content. ``categories`` may be passed when the caller already
    classified the tags.
    """
    if categories is None:
        categories = classify(tags)
    return BusinessCandidate(
        external_id=int(external_id),
        latitude=float(lat),
        longitude=float(lon),
        name=_tag(tags, "name"),
        name_en=_tag(tags, "name:en"),
        address=build_address(tags),
        city=_tag(tags, "addr:city") or _tag(tags, "city"),
        categories=tuple(categories),
    )
