from motorhub.services.distance_service import haversine_km, latitude_window, sql_haversine_km


def test_haversine_zero_distance():
    assert haversine_km(42.6977, 23.3219, 42.6977, 23.3219) == 0


def test_haversine_sofia_to_plovdiv():
    distance = haversine_km(42.6977, 23.3219, 42.1354, 24.7453)
    assert 125 < distance < 140


def test_sql_variant_passes_nulls_through():
    assert sql_haversine_km(None, 23.0, 42.0, 23.0) is None
    assert sql_haversine_km(42.0, 23.0, 42.0, 23.0) == 0


def test_latitude_window_contains_radius():
    low, high = latitude_window(42.0, 10.0)
    assert low < 42.0 < high
    assert haversine_km(42.0, 23.0, high, 23.0) >= 9.99
    assert latitude_window(89.99, 50.0)[1] == 90.0
