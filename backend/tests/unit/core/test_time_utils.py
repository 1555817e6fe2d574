import pytest

from tutorbook.utils.time_utils import minutes_to_time_str, time_str_to_minutes


@pytest.mark.parametrize("minutes, label", [(0, "00:00"), (570, "09:30"), (1439, "23:59"), (1440, "24:00")])
def test_minutes_to_time_str(minutes, label):
    assert minutes_to_time_str(minutes) == label


def test_minutes_out_of_range():
    with pytest.raises(ValueError):
        minutes_to_time_str(1441)


@pytest.mark.parametrize("value, minutes", [("00:00", 0), ("09:30", 570), ("24:00", 1440), ("12:00:00", 720)])
def test_parse_time_strings(value, minutes):
    assert time_str_to_minutes(value) == minutes


@pytest.mark.parametrize("value", ["24:30", "9am", "12:60", "", "10:00:30"])
def test_reject_invalid_time_strings(value):
    with pytest.raises(ValueError):
        time_str_to_minutes(value)
