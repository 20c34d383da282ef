# tests/test_core.py
from datetime import date, datetime, time

from barbershop.core import format_cents, interval, on_slot_grid, overlaps


def test_overlaps_is_half_open():
    nine = datetime(2030, 1, 7, 9, 0)
    ten = datetime(2030, 1, 7, 10, 0)
    eleven = datetime(2030, 1, 7, 11, 0)

    assert overlaps(nine, eleven, ten, eleven)
    assert not overlaps(nine, ten, ten, eleven)
    assert not overlaps(ten, eleven, nine, ten)


def test_slot_grid():
    assert on_slot_grid(time(9, 45), 15)
    assert not on_slot_grid(time(9, 40), 15)
    assert not on_slot_grid(time(9, 45, 30), 15)
    assert on_slot_grid(time(9, 30), 30)


def test_interval():
    start, end = interval(date(2030, 1, 7), time(9, 0), time(18, 0))
    assert start == datetime(2030, 1, 7, 9, 0)
    assert end == datetime(2030, 1, 7, 18, 0)


def test_format_cents():
    assert format_cents(3500) == "R$ 35.00"
    assert format_cents(5) == "R$ 0.05"
    assert format_cents(-1250) == "-R$ 12.50"
