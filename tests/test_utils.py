import pytest

from clothing_inventory.core.utils import date_part, round_money


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.125, 0.13),
        (2.675, 2.68),
        (12.344, 12.34),
        ("19.995", 20.0),
        (3 * 0.1, 0.3),
        (7, 7.0),
    ],
)
def test_round_money_rounds_half_up(value, expected):
    assert round_money(value) == expected


def test_date_part_drops_time():
    assert date_part("2024-01-01T10:00") == "2024-01-01"
    assert date_part("2024-01-01") == "2024-01-01"
    assert date_part(None) == ""
