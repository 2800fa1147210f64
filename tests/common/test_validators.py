import pytest

from site_pulse.common.validators import optional_coordinate, optional_int, optional_text
from site_pulse.core.exceptions import ValidationError


@pytest.mark.parametrize("value, expected", [(None, None), ("", None), (12, 12), ("12", 12), (3.0, 3)])
def test_optional_int_accepts_integral_values(value, expected):
    assert optional_int(value, "projectId") == expected


@pytest.mark.parametrize("value", [True, False, 1.7, "1.5", "abc", [1]])
def test_optional_int_rejects_bools_and_fractions(value):
    with pytest.raises(ValidationError, match="projectId must be an integer"):
        optional_int(value, "projectId")


def test_optional_coordinate_parses_numbers_and_strings():
    assert optional_coordinate("10.5", "latitude", limit=90) == 10.5
    assert optional_coordinate(-180, "longitude", limit=180) == -180.0
    assert optional_coordinate(None, "latitude", limit=90) is None


@pytest.mark.parametrize("value", [True, "north", float("nan"), 90.5])
def test_optional_coordinate_rejects_bad_values(value):
    with pytest.raises(ValidationError, match="latitude"):
        optional_coordinate(value, "latitude", limit=90)


def test_optional_text_trims_and_limits_length():
    assert optional_text("  Site A ", "locationName") == "Site A"
    assert optional_text("   ", "locationName") is None
    with pytest.raises(ValidationError):
        optional_text("x" * 300, "locationName")
