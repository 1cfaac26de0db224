"""Unit tests for the core schema building blocks."""

import pytest
from pydantic import ValidationError

from geocoin import CacheRecord, Coin, GridCoordinate, LatLng, WindowBounds


def test_grid_coordinates_compare_by_value():
    a = GridCoordinate(i=3, j=-2)
    b = GridCoordinate(i=3, j=-2)

    assert a == b
    assert hash(a) == hash(b)
    assert {a: "cache"}[b] == "cache"
    assert a.label == "3:-2"
    assert a.offset(1, 1) == GridCoordinate(i=4, j=-1)


def test_coin_identity_and_label():
    coin = Coin(i=3, j=-2, serial=4)

    assert coin == Coin(i=3, j=-2, serial=4)
    assert coin != Coin(i=3, j=-2, serial=5)
    assert coin.home == GridCoordinate(i=3, j=-2)
    assert coin.label == "3:-2#4"

    with pytest.raises(ValidationError):
        coin.serial = 9


def test_coin_serials_start_at_one():
    with pytest.raises(ValidationError):
        Coin(i=0, j=0, serial=0)


def test_cache_record_count_tracks_coins():
    record = CacheRecord(coordinate=GridCoordinate(i=0, j=0))
    assert record.coin_count == 0

    record.coins.append(Coin(i=0, j=0, serial=1))
    assert record.coin_count == 1
    assert record.holds(Coin(i=0, j=0, serial=1))


def test_window_bounds_shift_is_pure():
    bounds = WindowBounds()
    moved = bounds.shifted(0, 1)

    assert bounds == WindowBounds()
    assert moved == WindowBounds(min_j=1, max_j=1)
    assert moved.shifted(0, -1) == bounds


def test_lat_lng_json_round_trip():
    point = LatLng(lat=36.98949379578401, lng=-122.06277128548504)
    assert LatLng.model_validate_json(point.model_dump_json()) == point
