import pytest

from src.attendance_badges.attendance_badges.common.geo import haversine_distance_m


def test_zero_distance_for_same_point():
    assert haversine_distance_m(37.422, -122.0841, 37.422, -122.0841) == 0


def test_distance_is_symmetric():
    a = haversine_distance_m(37.422, -122.0841, 37.7749, -122.4194)
    b = haversine_distance_m(37.7749, -122.4194, 37.422, -122.0841)

    assert a == pytest.approx(b)


def test_one_degree_of_latitude():
    # 2 * pi * 6371 km / 360
    assert haversine_distance_m(0, 0, 1, 0) == pytest.approx(111_194.9, abs=1)
