from datetime import date

import pytest

from shared.domain.value_objects import DateRange


def test_stay_must_have_at_least_one_night():
    with pytest.raises(ValueError):
        DateRange(date(2025, 6, 3), date(2025, 6, 3))
    with pytest.raises(ValueError):
        DateRange(date(2025, 6, 3), date(2025, 6, 1))


def test_overlap_is_half_open():
    stay = DateRange(date(2025, 6, 25), date(2025, 6, 28))

    assert stay.overlaps_with(DateRange(date(2025, 6, 27), date(2025, 6, 30)))
    assert stay.overlaps_with(DateRange(date(2025, 6, 20), date(2025, 7, 1)))
    assert not stay.overlaps_with(DateRange(date(2025, 6, 28), date(2025, 6, 30)))
    assert not stay.overlaps_with(DateRange(date(2025, 6, 20), date(2025, 6, 25)))


def test_overlap_needs_a_date_range():
    with pytest.raises(TypeError):
        DateRange(date(2025, 6, 1), date(2025, 6, 2)).overlaps_with((date(2025, 6, 1), date(2025, 6, 2)))


def test_nights_and_length():
    stay = DateRange(date(2025, 12, 30), date(2026, 1, 2))

    assert list(stay.nights()) == [date(2025, 12, 30), date(2025, 12, 31), date(2026, 1, 1)]
    assert len(stay) == 3
    assert stay.contains(date(2026, 1, 1))
    assert not stay.contains(date(2026, 1, 2))
    assert str(stay) == "2025-12-30 - 2026-01-02"


def test_value_equality():
    assert DateRange(date(2025, 1, 1), date(2025, 1, 2)) == DateRange(date(2025, 1, 1), date(2025, 1, 2))
