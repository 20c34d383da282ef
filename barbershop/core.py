# barbershop/core.py

from datetime import datetime, date, time

from barbershop.config import shop_settings


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    return start_a < end_b and start_b < end_a


def on_slot_grid(t: time, slot_minutes: int = None) -> bool:
    slot_minutes = slot_minutes or shop_settings["slot_minutes"]
    return t.second == 0 and t.microsecond == 0 and t.minute % slot_minutes == 0


def interval(day: date, start: time, end: time):
    return datetime.combine(day, start), datetime.combine(day, end)


def format_cents(amount: int) -> str:
    # 1234 -> "R$ 12.34"
    sign = "-" if amount < 0 else ""
    return f"{sign}{shop_settings['currency_symbol']} {abs(amount) / 100:.2f}"
