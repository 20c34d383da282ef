# tests/test_appointments.py
from datetime import date, timedelta

from sqlmodel import select

from barbershop.models import AppointmentService, ProfessionalService


def _payload(professional, services, day, start="10:00"):
    return {
        "professional_id": professional.id,
        "date": day.isoformat(),
        "start_time": start,
        "service_ids": [s.id for s in services],
    }


def test_book_appointment(client, session, services, book):
    appt = book([services["haircut"].id, services["beard"].id], start="10:00", notes="Low fade")

    assert appt["status"] == "pending"
    assert appt["start_time"] == "10:00:00"
    assert appt["end_time"] == "10:45:00"
    assert appt["total_value"] == 5500
    assert appt["notes"] == "Low fade"

    lines = session.exec(
        select(AppointmentService).where(AppointmentService.appointment_id == appt["id"])
    ).all()
    assert sorted(line.price for line in lines) == [2000, 3500]


def test_variable_price_service_books_at_zero(client, services, book):
    appt = book([services["treatment"].id])
    assert appt["total_value"] == 0


def test_price_snapshot_survives_catalogue_changes(client, admin_headers, customer_headers, services, book):
    appt = book([services["haircut"].id])
    client.put(f"/services/{services['haircut'].id}", json={"price": 9900}, headers=admin_headers)

    r = client.get(f"/appointments/{appt['id']}/services", headers=customer_headers)
    assert r.status_code == 200
    assert [line["price"] for line in r.json()] == [3500]


def test_booking_validations(client, customer_headers, professional, services, next_week):
    haircut = services["haircut"]

    # off the grid
    r = client.post("/appointments", json=_payload(professional, [haircut], next_week, "10:10"), headers=customer_headers)
    assert r.status_code == 422

    # in the past
    yesterday = date.today() - timedelta(days=1)
    r = client.post("/appointments", json=_payload(professional, [haircut], yesterday), headers=customer_headers)
    assert r.status_code == 422

    # runs past closing time
    r = client.post("/appointments", json=_payload(professional, [haircut], next_week, "17:45"), headers=customer_headers)
    assert r.status_code == 422

    # no services
    payload = _payload(professional, [], next_week)
    r = client.post("/appointments", json=payload, headers=customer_headers)
    assert r.status_code == 422

    # duplicate services
    payload = _payload(professional, [haircut, haircut], next_week)
    r = client.post("/appointments", json=payload, headers=customer_headers)
    assert r.status_code == 422

    # unknown service
    payload = _payload(professional, [haircut], next_week)
    payload["service_ids"] = [999]
    r = client.post("/appointments", json=payload, headers=customer_headers)
    assert r.status_code == 422

    # unknown professional
    payload = _payload(professional, [haircut], next_week)
    payload["professional_id"] = 999
    r = client.post("/appointments", json=payload, headers=customer_headers)
    assert r.status_code == 404

    # both unknown: the services are checked first
    payload["service_ids"] = [999]
    r = client.post("/appointments", json=payload, headers=customer_headers)
    assert r.status_code == 422
    assert r.json()["detail"] == "Service 999 not available"


def test_professional_must_offer_service(client, session, customer_headers, professional, services, next_week):
    session.add(ProfessionalService(professional_id=professional.id, service_id=services["beard"].id))
    session.commit()

    r = client.post(
        "/appointments", json=_payload(professional, [services["haircut"]], next_week), headers=customer_headers,
    )
    assert r.status_code == 422

    r = client.post(
        "/appointments", json=_payload(professional, [services["beard"]], next_week), headers=customer_headers,
    )
    assert r.status_code == 201


def test_double_booking_is_conflict(client, customer_headers, professional, services, next_week, book):
    book([services["haircut"].id], start="10:00")

    for start in ("10:00", "10:15", "09:45"):
        r = client.post(
            "/appointments", json=_payload(professional, [services["haircut"]], next_week, start),
            headers=customer_headers,
        )
        assert r.status_code == 409, start

    r = client.post(
        "/appointments", json=_payload(professional, [services["haircut"]], next_week, "10:30"),
        headers=customer_headers,
    )
    assert r.status_code == 201


def test_booking_over_a_block_is_conflict(client, barber_headers, customer_headers, professional, services, next_week):
    client.post(f"/professionals/{professional.id}/blocked-times", json={
        "date": next_week.isoformat(), "start_time": "12:00", "end_time": "13:00",
    }, headers=barber_headers)

    r = client.post(
        "/appointments", json=_payload(professional, [services["haircut"]], next_week, "11:45"),
        headers=customer_headers,
    )
    assert r.status_code == 409


def test_staff_books_for_a_client(client, barber_headers, customer, customer_headers, services, book):
    appt = book([services["haircut"].id], headers=barber_headers, user_id=customer.id)
    assert appt["user_id"] == customer.id


def test_client_cannot_book_for_someone_else(client, customer_headers, admin, professional, services, next_week):
    payload = _payload(professional, [services["haircut"]], next_week)
    payload["user_id"] = admin.id
    r = client.post("/appointments", json=payload, headers=customer_headers)
    assert r.status_code == 403


def test_listing_is_scoped_by_role(client, account, admin_headers, barber_headers, customer_headers, services, book):
    mine = book([services["haircut"].id], start="10:00")
    _, other_headers = account("ana")
    theirs = book([services["haircut"].id], start="11:00", headers=other_headers)

    r = client.get("/appointments", headers=customer_headers)
    assert [a["id"] for a in r.json()] == [mine["id"]]

    r = client.get("/appointments", headers=barber_headers)
    assert [a["id"] for a in r.json()] == [mine["id"], theirs["id"]]

    r = client.get("/appointments", params={"user_id": theirs["user_id"]}, headers=admin_headers)
    assert [a["id"] for a in r.json()] == [theirs["id"]]

    r = client.get(f"/appointments/{theirs['id']}", headers=customer_headers)
    assert r.status_code == 403


def test_listing_filters(client, admin_headers, services, next_week, book):
    first = book([services["haircut"].id], start="10:00")
    later = book([services["haircut"].id], start="10:00", day=next_week + timedelta(days=1))

    r = client.get("/appointments", params={"date": next_week.isoformat()}, headers=admin_headers)
    assert [a["id"] for a in r.json()] == [first["id"]]

    r = client.get("/appointments", params={"start_date": (next_week + timedelta(days=1)).isoformat()},
                   headers=admin_headers)
    assert [a["id"] for a in r.json()] == [later["id"]]

    client.patch(f"/appointments/{first['id']}/status", json={"status": "confirmed"}, headers=admin_headers)
    r = client.get("/appointments", params={"status": "confirmed"}, headers=admin_headers)
    assert [a["id"] for a in r.json()] == [first["id"]]


def test_status_transitions(client, admin_headers, customer_headers, services, book):
    appt = book([services["haircut"].id])
    url = f"/appointments/{appt['id']}/status"

    r = client.patch(url, json={"status": "confirmed"}, headers=customer_headers)
    assert r.status_code == 403

    r = client.patch(url, json={"status": "confirmed"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "confirmed"

    r = client.patch(url, json={"status": "confirmed"}, headers=admin_headers)
    assert r.status_code == 409

    r = client.patch(url, json={"status": "pending"}, headers=admin_headers)
    assert r.status_code == 409

    r = client.patch(url, json={"status": "completed"}, headers=admin_headers)
    assert r.json()["status"] == "completed"
    assert r.json()["completed_at"] is not None

    # reopen
    r = client.patch(url, json={"status": "confirmed"}, headers=admin_headers)
    assert r.json()["status"] == "confirmed"
    assert r.json()["completed_at"] is None

    r = client.patch(url, json={"status": "cancelled"}, headers=admin_headers)
    assert r.status_code == 200

    r = client.patch(url, json={"status": "confirmed"}, headers=admin_headers)
    assert r.status_code == 409


def test_cancel(client, customer_headers, services, book, complete):
    appt = book([services["haircut"].id], start="10:00")
    r = client.patch(f"/appointments/{appt['id']}/cancel", headers=customer_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"

    r = client.patch(f"/appointments/{appt['id']}/cancel", headers=customer_headers)
    assert r.status_code == 409

    done = book([services["haircut"].id], start="11:00")
    complete(done["id"])
    r = client.patch(f"/appointments/{done['id']}/cancel", headers=customer_headers)
    assert r.status_code == 409


def test_assigned_professional_sees_appointment(client, barber_headers, services, book):
    appt = book([services["haircut"].id])
    r = client.get(f"/appointments/{appt['id']}", headers=barber_headers)
    assert r.status_code == 200
