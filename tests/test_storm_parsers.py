from __future__ import annotations

import pytest

from hazard_globe.processing.storm_parsers import (
    GenericParser,
    JmaParser,
    JtwcParser,
    decode_lat_lon,
    locate_records,
    tidy_name,
)
from hazard_globe.processing.tracks import WINDOW_MS

from conftest import DAY_MS, HOUR_MS, NOW_MS, dtg, iso


def _generic_record(**overrides):
    record = {
        "id": "gen-1",
        "name": "Typhoon Mawar",
        "currentPosition": {"lat": 15.0, "lon": 135.0},
        "windSpeedKmh": 185,
        "intensity": 4,
        "path": [
            {"lat": 12.0, "lon": 140.0, "timestamp": iso(NOW_MS - 1 * DAY_MS), "intensity": 3},
            {"lat": 10.0, "lon": 145.0, "timestamp": iso(NOW_MS - 8 * DAY_MS), "intensity": 0},
            {"lat": 11.0, "lon": 142.0, "timestamp": NOW_MS - 3 * DAY_MS, "intensity": 2},
        ],
    }
    record.update(overrides)
    return record


def _assert_path_invariants(storm):
    times = [p.timestamp_ms for p in storm.path]
    assert times == sorted(times)
    assert all(t >= NOW_MS - WINDOW_MS for t in times)
    last = storm.path[-1]
    assert (last.lat, last.lon) == (storm.current_position.lat, storm.current_position.lon)
    assert all(p.intensity >= 0 for p in storm.path)
    assert storm.current_position.intensity >= 0


def test_generic_record_is_normalized():
    storms = GenericParser().parse({"storms": [_generic_record()]}, NOW_MS)

    assert len(storms) == 1
    storm = storms[0]
    assert storm.id == "gen-1"
    assert storm.international_name == "Typhoon Mawar"
    assert storm.local_name == "Betty"
    assert storm.is_in_region is True
    assert storm.display_name == "Betty (Typhoon Mawar)"
    assert storm.distance_to_region_km == 0.0
    assert storm.is_approaching is True
    assert storm.current_position.wind_speed_kmh == 185.0
    assert storm.current_position.intensity == 4
    assert storm.source == "generic"
    # 8-day-old point dropped; current position appended
    assert [p.timestamp_ms for p in storm.path] == [NOW_MS - 3 * DAY_MS, NOW_MS - DAY_MS, NOW_MS]
    _assert_path_invariants(storm)


def test_record_without_track_gets_synthesized_path():
    record = _generic_record()
    del record["path"]

    storm = GenericParser().parse([record], NOW_MS)[0]

    assert len(storm.path) == 7
    assert storm.path[0].timestamp_ms == NOW_MS - 6 * DAY_MS
    _assert_path_invariants(storm)


def test_position_as_pair_and_knots():
    record = {"name": "Guchol", "position": [19.0, 138.0], "windKts": 85}

    storm = GenericParser().parse([record], NOW_MS)[0]

    assert (storm.current_position.lat, storm.current_position.lon) == (19.0, 138.0)
    assert storm.current_position.wind_speed_kmh == pytest.approx(157.4)
    assert storm.current_position.intensity == 2


def test_position_falls_back_to_latest_track_point():
    record = {
        "name": "Yagi",
        "track": [
            {"lat": 14.0, "lon": 125.0, "time": NOW_MS - 2 * HOUR_MS},
            {"lat": 13.0, "lon": 127.0, "time": NOW_MS - 30 * HOUR_MS},
        ],
    }

    storm = GenericParser().parse({"data": [record]}, NOW_MS)[0]

    assert (storm.current_position.lat, storm.current_position.lon) == (14.0, 125.0)
    assert len(storm.path) == 2
    _assert_path_invariants(storm)


def test_missing_id_is_generated():
    record = _generic_record()
    del record["id"]

    storm = GenericParser().parse([record], NOW_MS)[0]

    assert storm.id == f"generic-0-{NOW_MS}"


@pytest.mark.parametrize(
    "payload",
    [
        [_generic_record()],
        {"storms": [_generic_record()]},
        {"activeStorms": [_generic_record()]},
        {"active": [_generic_record()]},
        {"data": [_generic_record()]},
        {"data": {"storms": [_generic_record()]}},
        {"data": {"WP02": _generic_record()}},
        {"storms": {"WP02": _generic_record(), "updated": "2024-05-25"}},
        {"WP022023": _generic_record(), "updated": "2024-05-25"},
    ],
)
def test_locate_records_shapes(payload):
    storms = GenericParser().parse(payload, NOW_MS)
    assert [s.id for s in storms] == ["gen-1"]


@pytest.mark.parametrize("payload", [None, "x", 42, {}, [], {"storms": "nope"}, {"data": None}])
def test_garbage_payloads_yield_nothing(payload):
    assert GenericParser().parse(payload, NOW_MS) == []
    assert JmaParser().parse(payload, NOW_MS) == []
    assert JtwcParser().parse(payload, NOW_MS) == []


def test_bad_records_are_dropped_individually():
    payload = [
        _generic_record(),
        "junk",
        None,
        {"name": None, "currentPosition": {"lat": 10, "lon": 120}},
        {"name": "Nowhere"},
        {"name": "Bad", "currentPosition": {"lat": "abc", "lon": 120}},
        {"name": "Offworld", "currentPosition": {"lat": 95.0, "lon": 120.0}},
        _generic_record(id="gen-2", name="Guchol"),
    ]

    storms = GenericParser().parse(payload, NOW_MS)

    assert [s.id for s in storms] == ["gen-1", "gen-2"]


def test_jma_record():
    payload = [
        {
            "typhoonNumber": "2302",
            "name": {"en": "MAWAR", "jp": "マーワー"},
            "position": [16.2, 131.5],
            "maximumWind": {"kt": 130},
            "track": [
                {"validtime": iso(NOW_MS - 2 * DAY_MS), "position": [13.5, 138.0], "wind": 120},
                {"validtime": iso(NOW_MS - 1 * DAY_MS), "position": [14.8, 134.9], "wind": 125},
            ],
        }
    ]

    storm = JmaParser().parse(payload, NOW_MS)[0]

    assert storm.id == "2302"
    assert storm.international_name == "Mawar"
    assert storm.local_name == "Betty"
    assert storm.display_name == "Betty (Mawar)"
    assert storm.source == "jma"
    assert storm.current_position.wind_speed_kmh == pytest.approx(240.8)
    assert storm.current_position.intensity == 4
    assert [p.intensity for p in storm.path[:2]] == [4, 4]
    assert len(storm.path) == 3
    _assert_path_invariants(storm)


def test_jma_wind_in_kmh():
    payload = [{"name": "Saola", "center": [20.0, 120.0], "maxWind": {"kmh": 90}}]

    storm = JmaParser().parse(payload, NOW_MS)[0]

    assert storm.current_position.wind_speed_kmh == 90.0
    assert storm.current_position.intensity == 0


def test_jtwc_record():
    payload = {
        "activeStorms": [
            {
                "stormId": "WP022023",
                "stormName": "GUCHOL",
                "lat": 19.0,
                "lon": 138.0,
                "intensity": 85,
                "track": [
                    {"dtg": dtg(NOW_MS - 2 * DAY_MS), "lat": 16.0, "lon": 140.0, "intensity": 65},
                    {"dtg": "not-a-dtg", "lat": 17.0, "lon": 139.5, "intensity": 70},
                ],
            }
        ]
    }

    storm = JtwcParser().parse(payload, NOW_MS)[0]

    assert storm.id == "WP022023"
    assert storm.international_name == "Guchol"
    assert storm.local_name == "Chedeng"
    assert storm.is_in_region is False
    assert storm.display_name == "Guchol"
    assert storm.distance_to_region_km > 0
    assert storm.is_approaching is True
    assert storm.current_position.intensity == 2
    assert [p.timestamp_ms for p in storm.path] == [NOW_MS - 2 * DAY_MS, NOW_MS]
    assert storm.path[0].intensity == 1
    _assert_path_invariants(storm)


def test_far_storm_is_not_approaching():
    record = _generic_record(currentPosition={"lat": 40.0, "lon": 160.0})

    storm = GenericParser().parse([record], NOW_MS)[0]

    assert storm.is_in_region is False
    assert storm.is_approaching is False
    assert storm.display_name == "Typhoon Mawar"


@pytest.mark.parametrize(
    "value,expected",
    [
        ({"lat": 10, "lon": 120}, (10.0, 120.0)),
        ({"latitude": "10.5", "longitude": "121"}, (10.5, 121.0)),
        ({"lat": 10, "lng": 120}, (10.0, 120.0)),
        ([10, 200], (10.0, -160.0)),
        ([10], None),
        ({"lat": 10}, None),
        ({"lat": -91, "lon": 0}, None),
        ("10,120", None),
    ],
)
def test_decode_lat_lon(value, expected):
    assert decode_lat_lon(value) == expected


def test_tidy_name():
    assert tidy_name("KONG-REY") == "Kong-rey"
    assert tidy_name("  Mawar  ") == "Mawar"
    assert tidy_name("   ") is None
    assert tidy_name(7) is None


def test_locate_records_prefers_known_keys():
    assert locate_records({"storms": [1], "data": [2]}) == [1]


def test_storms_keyed_by_id_under_known_key():
    payload = {
        "data": {
            "WP02": _generic_record(),
            "WP03": _generic_record(id="gen-3", name="Guchol"),
        }
    }

    storms = GenericParser().parse(payload, NOW_MS)

    assert [s.id for s in storms] == ["gen-1", "gen-3"]
