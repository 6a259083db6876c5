from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum

logger = logging.getLogger(__name__)


class BusinessCategory(str, Enum):
    """Car-related business kinds.

    Members order by declaration, which is the canonical order used for
    stored and serialized category lists.
    """

    CAR_WASH = "car_wash"
    MOBILE = "mobile"
    CAR_REPAIR = "car_repair"
    PARKING = "parking"
    GAS_STATION = "gas_station"
    ELECTRIC_VEHICLE_CHARGING_STATION = "electric_vehicle_charging_station"
    CAR_DEALER = "car_dealer"
    CAR_RENTAL = "car_rental"
    DETAILING_STUDIO = "detailing_studio"
    RIMS_SHOP = "rims_shop"
    TUNING = "tuning"
    TIRE_SHOP = "tire_shop"
    CAR_INSPECTION_STATION = "car_inspection_station"

    @property
    def display_name(self) -> str:
        return "".join(part.capitalize() for part in self.value.split("_"))

    @property
    def sort_key(self) -> int:
        return _CATEGORY_ORDER[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, BusinessCategory):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __le__(self, other: object) -> bool:
        if not isinstance(other, BusinessCategory):
            return NotImplemented
        return self.sort_key <= other.sort_key

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, BusinessCategory):
            return NotImplemented
        return self.sort_key > other.sort_key

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, BusinessCategory):
            return NotImplemented
        return self.sort_key >= other.sort_key

    def __str__(self) -> str:
        return self.value

    @classmethod
    def _missing_(cls, value: object) -> BusinessCategory | None:
        if not isinstance(value, str):
            return None
        folded = value.strip().replace("-", "_").replace(" ", "_").lower()
        for member in cls:
            if folded in (member.value, member.display_name.lower()):
                return member
        return None

    @classmethod
    def parse(cls, value: str | BusinessCategory) -> BusinessCategory:
        """Accept either the display name (``CarWash``) or the stored value (``car_wash``)."""
        return cls(value)


_CATEGORY_ORDER: dict[BusinessCategory, int] = {member: index for index, member in enumerate(BusinessCategory)}


def canonical_categories(categories: Iterable[BusinessCategory | str]) -> list[BusinessCategory]:
    return sorted({BusinessCategory.parse(category) for category in categories})


AMENITY_CATEGORIES: dict[str, BusinessCategory] = {
    "fuel": BusinessCategory.GAS_STATION,
    "charging_station": BusinessCategory.ELECTRIC_VEHICLE_CHARGING_STATION,
    "car_wash": BusinessCategory.CAR_WASH,
    "car_rental": BusinessCategory.CAR_RENTAL,
    "parking": BusinessCategory.PARKING,
    "parking_space": BusinessCategory.PARKING,
}

SHOP_CATEGORIES: dict[str, BusinessCategory] = {
    "car_repair": BusinessCategory.CAR_REPAIR,
    "car_parts": BusinessCategory.CAR_REPAIR,
    "car": BusinessCategory.CAR_DEALER,
    "tyres": BusinessCategory.TIRE_SHOP,
    "wheels": BusinessCategory.RIMS_SHOP,
}

CRAFT_CATEGORIES: dict[str, BusinessCategory] = {
    "car_repair": BusinessCategory.CAR_REPAIR,
    "automotive": BusinessCategory.CAR_REPAIR,
}

SERVICE_CATEGORIES: dict[str, BusinessCategory] = {
    "vehicle_inspection": BusinessCategory.CAR_INSPECTION_STATION,
    "car_wash": BusinessCategory.CAR_WASH,
}

AUTOMOTIVE_CATEGORIES: dict[str, BusinessCategory] = {
    "car_wash": BusinessCategory.CAR_WASH,
    "car_repair": BusinessCategory.CAR_REPAIR,
    "fuel": BusinessCategory.GAS_STATION,
}

# Checked in this order; every key may contribute one category.
TAG_TABLES: tuple[tuple[str, Mapping[str, BusinessCategory]], ...] = (
    ("amenity", AMENITY_CATEGORIES),
    ("shop", SHOP_CATEGORIES),
    ("craft", CRAFT_CATEGORIES),
    ("service", SERVICE_CATEGORIES),
    ("automotive", AUTOMOTIVE_CATEGORIES),
)

CAR_WASH_SENTINEL_KEY = "car_wash"
CAR_WASH_NAME_PHRASES: tuple[str, ...] = ("car wash", "автомивка")

_LOGGED_TAG_KEYS: tuple[str, ...] = ("amenity", "shop", "craft", "service", "automotive", "name", "brand")
_COMMON_CATEGORIES = frozenset({BusinessCategory.PARKING, BusinessCategory.GAS_STATION})


def _is_car_wash_by_name_or_key(tags: Mapping[str, str]) -> bool:
    if CAR_WASH_SENTINEL_KEY in tags:
        return True
    name = tags.get("name")
    if not isinstance(name, str):
        return False
    lowered = name.lower()
    return any(phrase in lowered for phrase in CAR_WASH_NAME_PHRASES)


def _key_tags(tags: Mapping[str, str]) -> dict[str, str]:
    return {key: tags[key] for key in _LOGGED_TAG_KEYS if key in tags}


def classify(tags: Mapping[str, str]) -> list[BusinessCategory]:
    """Infer the car-related categories of an external element from its tags.

    Every tag table is consulted (matches are unioned, not short-circuited),
    then the car-wash name heuristic is applied. The result is deduplicated
    and in canonical order; an empty list means the element is not
    car-related. Unknown keys or values never raise.
    """
    found: set[BusinessCategory] = set()
    for key, table in TAG_TABLES:
        value = tags.get(key)
        if not isinstance(value, str):
            continue
        category = table.get(value)
        if category is not None:
            found.add(category)

    if _is_car_wash_by_name_or_key(tags):
        found.add(BusinessCategory.CAR_WASH)

    categories = sorted(found)
    if categories and not found <= _COMMON_CATEGORIES:
        logger.debug(
            "Found car-related business with categories: %s, key tags: %s",
            [category.display_name for category in categories],
            _key_tags(tags),
        )
    return categories


def is_car_related(tags: Mapping[str, str]) -> bool:
    return bool(classify(tags))
