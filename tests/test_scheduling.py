# tests/test_scheduling.py
from datetime import date, datetime, time

from barbershop.models import Professional
from barbershop.services import booking


def test_availability_covers_working_hours(client, professional, services, next_week):
    r = client.get(
        f"/professionals/{professional.id}/availability",
        params={"date": next_week.isoformat(), "service_ids": [services["haircut"].id]},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["duration_minutes"] == 30
    starts = data["available_starts"]
    assert starts[0] == "09:00"
    assert starts[-1] == "17:30"
    assert "09:15" in starts


def test_availability_without_services_uses_one_slot(client, professional, next_week):
    r = client.get(f"/professionals/{professional.id}/availability", params={"date": next_week.isoformat()})
    data = r.json()
    assert data["duration_minutes"] == 15
    assert data["available_starts"][-1] == "17:45"


def test_availability_skips_booked_and_blocked_times(
    client, barber_headers, professional, services, next_week, book,
):
    book([services["haircut"].id], start="10:00")

    r = client.post(f"/professionals/{professional.id}/blocked-times", json={
        "date": next_week.isoformat(), "start_time": "12:00", "end_time": "13:00", "reason": "Lunch",
    }, headers=barber_headers)
    assert r.status_code == 201

    r = client.get(
        f"/professionals/{professional.id}/availability",
        params={"date": next_week.isoformat(), "service_ids": [services["haircut"].id]},
    )
    starts = r.json()["available_starts"]
    # a 30 minute service cannot start at 09:45 because 10:00 is taken
    assert "09:30" in starts
    assert "09:45" not in starts
    assert "10:00" not in starts and "10:15" not in starts
    assert "10:30" in starts
    assert "11:45" not in starts and "12:30" not in starts
    assert "13:00" in starts


def test_cancelled_appointment_frees_the_slot(client, customer_headers, professional, services, next_week, book):
    appt = book([services["haircut"].id], start="10:00")
    client.patch(f"/appointments/{appt['id']}/cancel", headers=customer_headers)

    r = client.get(
        f"/professionals/{professional.id}/availability",
        params={"date": next_week.isoformat(), "service_ids": [services["haircut"].id]},
    )
    assert "10:00" in r.json()["available_starts"]


def test_available_starts_excludes_the_past(session, professional):
    day = date(2030, 1, 7)
    now = datetime.combine(day, time(16, 50))
    starts = booking.available_starts(session, professional.id, day, 30, now=now)
    assert starts == ["17:00", "17:15", "17:30"]


def test_day_off_has_no_availability(client, admin_headers, professional, next_week):
    other_day = (next_week.weekday() + 1) % 7
    r = client.put(f"/professionals/{professional.id}/schedules", json=[
        {"day_of_week": other_day, "start_time": "09:00", "end_time": "12:00"},
    ], headers=admin_headers)
    assert r.status_code == 200
    assert len(r.json()) == 1

    r = client.get(f"/professionals/{professional.id}/availability", params={"date": next_week.isoformat()})
    assert r.json()["available_starts"] == []


def test_schedule_validation(client, admin_headers, customer_headers, professional):
    url = f"/professionals/{professional.id}/schedules"

    r = client.put(url, json=[{"day_of_week": 1, "start_time": "09:00", "end_time": "12:00"}], headers=customer_headers)
    assert r.status_code == 403

    r = client.put(url, json=[{"day_of_week": 7, "start_time": "09:00", "end_time": "12:00"}], headers=admin_headers)
    assert r.status_code == 422

    r = client.put(url, json=[
        {"day_of_week": 1, "start_time": "09:00", "end_time": "12:00"},
        {"day_of_week": 1, "start_time": "13:00", "end_time": "18:00"},
    ], headers=admin_headers)
    assert r.status_code == 422

    r = client.put(url, json=[{"day_of_week": 1, "start_time": "12:00", "end_time": "09:00"}], headers=admin_headers)
    assert r.status_code == 422


def test_schedule_must_follow_slot_grid(client, admin_headers, professional, next_week):
    url = f"/professionals/{professional.id}/schedules"
    day = next_week.weekday()

    r = client.put(url, json=[{"day_of_week": day, "start_time": "09:10", "end_time": "12:00"}], headers=admin_headers)
    assert r.status_code == 422
    assert "15" in r.json()["detail"]

    r = client.put(url, json=[{"day_of_week": day, "start_time": "09:00", "end_time": "11:50"}], headers=admin_headers)
    assert r.status_code == 422

    # the previous schedule is left in place and every offered start is bookable
    r = client.get(f"/professionals/{professional.id}/availability", params={"date": next_week.isoformat()})
    starts = r.json()["available_starts"]
    assert starts[0] == "09:00"
    assert all(int(s[3:]) % 15 == 0 for s in starts)


def test_blocked_time_rules(client, barber_headers, customer_headers, professional, next_week):
    url = f"/professionals/{professional.id}/blocked-times"
    day = next_week.isoformat()

    r = client.post(url, json={"date": day, "start_time": "12:00", "end_time": "13:00"}, headers=customer_headers)
    assert r.status_code == 403

    # outside working hours
    r = client.post(url, json={"date": day, "start_time": "08:00", "end_time": "09:30"}, headers=barber_headers)
    assert r.status_code == 422

    # off the slot grid
    r = client.post(url, json={"date": day, "start_time": "12:10", "end_time": "13:00"}, headers=barber_headers)
    assert r.status_code == 422

    r = client.post(url, json={"date": day, "start_time": "12:00", "end_time": "13:00"}, headers=barber_headers)
    assert r.status_code == 201
    block_id = r.json()["id"]

    r = client.post(url, json={"date": day, "start_time": "12:30", "end_time": "14:00"}, headers=barber_headers)
    assert r.status_code == 409

    r = client.get(url, params={"on_date": day})
    assert [b["id"] for b in r.json()] == [block_id]

    r = client.delete(f"/blocked-times/{block_id}", headers=barber_headers)
    assert r.status_code == 204
    assert client.get(url).json() == []


def test_other_professional_cannot_block(client, session, account, professional, next_week):
    other = Professional(name="Someone else")
    session.add(other)
    session.commit()
    _, intruder_headers = account("intruder", role="professional", professional_id=other.id)

    r = client.post(f"/professionals/{professional.id}/blocked-times", json={
        "date": next_week.isoformat(), "start_time": "12:00", "end_time": "13:00",
    }, headers=intruder_headers)
    assert r.status_code == 403


def test_unknown_professional(client, next_week):
    r = client.get("/professionals/999/availability", params={"date": next_week.isoformat()})
    assert r.status_code == 404

    r = client.get("/professionals/999/blocked-times")
    assert r.status_code == 404
