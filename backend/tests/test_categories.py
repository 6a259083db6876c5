from __future__ import annotations

import pytest

from motorhub.categories import BusinessCategory, canonical_categories, classify, is_car_related


def test_amenity_fuel_is_gas_station() -> None:
    assert classify({"amenity": "fuel"}) == [BusinessCategory.GAS_STATION]


def test_multiple_tag_keys_are_unioned_and_sorted() -> None:
    assert classify({"shop": "tyres", "craft": "car_repair"}) == [
        BusinessCategory.CAR_REPAIR,
        BusinessCategory.TIRE_SHOP,
    ]


def test_name_without_car_wash_phrase_is_not_car_related() -> None:
    tags = {"name": "Quick AutoWash"}
    assert classify(tags) == []
    assert not is_car_related(tags)


def test_unrecognized_values_are_ignored() -> None:
    tags = {"amenity": "restaurant", "shop": "bakery", "craft": "carpenter", "service": "x", "automotive": "y"}
    assert classify(tags) == []
    assert not is_car_related(tags)


def test_empty_tags_classify_to_empty() -> None:
    assert classify({}) == []


@pytest.mark.parametrize(
    "tags",
    [
        {"name": "Sunny CAR WASH"},
        {"name": "Автомивка Изток"},
        {"car_wash": "yes"},
        {"car_wash": ""},
    ],
)
def test_car_wash_name_heuristic_and_sentinel_key(tags: dict[str, str]) -> None:
    assert classify(tags) == [BusinessCategory.CAR_WASH]


def test_name_heuristic_adds_to_tag_matches_without_duplicates() -> None:
    tags = {"amenity": "car_wash", "service": "car_wash", "name": "Car Wash Express"}
    assert classify(tags) == [BusinessCategory.CAR_WASH]

    tags = {"amenity": "fuel", "name": "Fuel & Car Wash"}
    assert classify(tags) == [BusinessCategory.CAR_WASH, BusinessCategory.GAS_STATION]


def test_every_tag_key_contributes() -> None:
    tags = {
        "amenity": "charging_station",
        "shop": "car",
        "craft": "automotive",
        "service": "vehicle_inspection",
        "automotive": "fuel",
    }
    assert classify(tags) == [
        BusinessCategory.CAR_REPAIR,
        BusinessCategory.GAS_STATION,
        BusinessCategory.ELECTRIC_VEHICLE_CHARGING_STATION,
        BusinessCategory.CAR_DEALER,
        BusinessCategory.CAR_INSPECTION_STATION,
    ]


def test_classification_ignores_mapping_order_and_is_idempotent() -> None:
    forward = {"shop": "wheels", "amenity": "parking", "name": "car wash"}
    backward = dict(reversed(list(forward.items())))
    assert classify(forward) == classify(backward)
    assert classify(forward) == classify(forward)
    assert classify(forward) == [
        BusinessCategory.CAR_WASH,
        BusinessCategory.PARKING,
        BusinessCategory.RIMS_SHOP,
    ]


def test_categories_order_by_declaration() -> None:
    assert sorted([BusinessCategory.TIRE_SHOP, BusinessCategory.CAR_WASH, BusinessCategory.PARKING]) == [
        BusinessCategory.CAR_WASH,
        BusinessCategory.PARKING,
        BusinessCategory.TIRE_SHOP,
    ]
    assert BusinessCategory.CAR_WASH < BusinessCategory.MOBILE


def test_comparison_operators_follow_declaration_order() -> None:
    members = list(BusinessCategory)
    for left in members:
        for right in members:
            expected = members.index(left) - members.index(right)
            assert (left < right) is (expected < 0)
            assert (left <= right) is (expected <= 0)
            assert (left > right) is (expected > 0)
            assert (left >= right) is (expected >= 0)

    assert BusinessCategory.TIRE_SHOP <= BusinessCategory.CAR_INSPECTION_STATION
    assert BusinessCategory.CAR_INSPECTION_STATION >= BusinessCategory.TIRE_SHOP


def test_parse_accepts_display_names_and_stored_values() -> None:
    assert BusinessCategory.parse("CarWash") is BusinessCategory.CAR_WASH
    assert BusinessCategory.parse("car_wash") is BusinessCategory.CAR_WASH
    assert BusinessCategory.parse("electricvehiclechargingstation") is BusinessCategory.ELECTRIC_VEHICLE_CHARGING_STATION
    with pytest.raises(ValueError):
        BusinessCategory.parse("Bakery")


def test_display_names() -> None:
    assert BusinessCategory.GAS_STATION.display_name == "GasStation"
    assert BusinessCategory.CAR_INSPECTION_STATION.display_name == "CarInspectionStation"


def test_canonical_categories_dedupes_and_sorts() -> None:
    assert canonical_categories(["TireShop", "car_wash", "CarWash"]) == [
        BusinessCategory.CAR_WASH,
        BusinessCategory.TIRE_SHOP,
    ]
