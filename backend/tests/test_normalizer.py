from __future__ import annotations

from motorhub.categories import BusinessCategory
from motorhub.services.normalizer import build_address, normalize


def test_full_address_is_joined_in_fixed_order() -> None:
    tags = {
        "addr:country": "BG",
        "addr:postcode": "1000",
        "addr:city": "Sofia",
        "addr:housenumber": "12",
        "addr:street": "Vitosha Blvd",
    }
    assert build_address(tags) == "Vitosha Blvd 12, Sofia, 1000, BG"


def test_street_without_number_and_partial_components() -> None:
    assert build_address({"addr:street": "Tsarigradsko Shose", "addr:postcode": "1784"}) == "Tsarigradsko Shose, 1784"


def test_house_number_alone_is_dropped() -> None:
    assert build_address({"addr:housenumber": "7", "addr:city": "Plovdiv"}) == "Plovdiv"


def test_no_address_components_means_absent_address() -> None:
    assert build_address({"name": "Shell"}) is None
    assert build_address({"addr:street": "   "}) is None


def test_normalize_builds_candidate() -> None:
    tags = {
        "amenity": "fuel",
        "name": "Лукойл",
        "name:en": "Lukoil",
        "addr:street": "Bulgaria Blvd",
        "addr:housenumber": "3",
        "addr:city": "Sofia",
    }
    candidate = normalize(555, 42.66, 23.29, tags)

    assert candidate.external_id == 555
    assert candidate.latitude == 42.66
    assert candidate.longitude == 23.29
    assert candidate.name == "Лукойл"
    assert candidate.name_en == "Lukoil"
    assert candidate.address == "Bulgaria Blvd 3, Sofia"
    assert candidate.city == "Sofia"
    assert candidate.categories == (BusinessCategory.GAS_STATION,)


def test_city_falls_back_to_generic_city_tag() -> None:
    candidate = normalize(1, 42.0, 23.0, {"amenity": "parking", "city": "Varna"})
    assert candidate.city == "Varna"
    assert candidate.address is None


def test_missing_fields_degrade_to_absent_values() -> None:
    candidate = normalize(2, 42.0, 23.0, {"name": ""})
    assert candidate.name is None
    assert candidate.name_en is None
    assert candidate.city is None
    assert candidate.categories == ()


def test_precomputed_categories_are_used() -> None:
    candidate = normalize(3, 42.0, 23.0, {"amenity": "parking"}, categories=[BusinessCategory.PARKING])
    assert candidate.categories == (BusinessCategory.PARKING,)
