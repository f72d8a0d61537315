from __future__ import annotations

from types import SimpleNamespace

import pytest

from hazard_globe.processing.models import StormPosition
from hazard_globe.processing.names import (
    clean_name,
    display_name,
    format_display_name,
    international_name,
    local_name,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Mawar", "Betty"),
        ("Typhoon Mawar", "Betty"),
        ("  Super Typhoon   Mawar ", "Betty"),
        ("STS Yagi", "Enteng"),
        ("tropical depression Kong-rey", "Leon"),
        ("Haiyan", "Yolanda"),
    ],
)
def test_local_name_known(raw, expected):
    assert local_name(raw) == expected


@pytest.mark.parametrize("raw", ["Nonexistent", "", "   ", None, 42])
def test_local_name_unknown_is_absent(raw):
    assert local_name(raw) is None


def test_clean_name_strips_only_leading_designation():
    assert clean_name("Typhoon Mawar") == "Mawar"
    assert clean_name("TS Guchol") == "Guchol"
    # A bare designation word is not a prefix of anything
    assert clean_name("Typhoon") == "Typhoon"
    assert clean_name("Tyson") == "Tyson"


def test_international_name_prefers_latest_season():
    # Betty was used for Wutip (2019) and Mawar (2023)
    assert international_name("Betty") == "Mawar"
    assert international_name(" Yolanda ") == "Haiyan"
    assert international_name("Nobody") is None
    assert international_name(None) is None


def test_format_display_name():
    assert format_display_name("Mawar", "Betty", True) == "Betty (Mawar)"
    assert format_display_name("Mawar", "Betty", False) == "Mawar"
    assert format_display_name("Nonexistent", None, True) == "Nonexistent"


def _storm(lat, lon, intl="Mawar", local="Betty"):
    return SimpleNamespace(
        international_name=intl,
        local_name=local,
        current_position=StormPosition(lat, lon),
    )


def test_display_name_depends_on_region():
    assert display_name(_storm(15.0, 130.0)) == "Betty (Mawar)"
    assert display_name(_storm(30.0, 140.0)) == "Mawar"
    assert display_name(_storm(15.0, 130.0, intl="Unknown", local=None)) == "Unknown"


def test_display_name_is_idempotent():
    storm = _storm(15.0, 130.0)
    assert display_name(storm) == display_name(storm)
