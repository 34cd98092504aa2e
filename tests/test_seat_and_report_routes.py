import os
from decimal import Decimal

from services.report_pdf_generator import REPORTS_DIR


def _zone(layout, floor):
    return next(z for z in layout["zones"] if z["floor"] == floor)


def test_seat_layout_with_selection(client, enroll):
    enroll(seat_no="F1")
    enroll(name="B", seat_no="S10", floor="2nd Floor")

    layout = client.get("/api/seats/layout", params={"selected": "f2"}).json()
    assert layout["selected"] == "F2"
    first = {s["seat_no"]: s["state"] for s in _zone(layout, "1st Floor")["seats"]}
    assert first["F1"] == "booked"
    assert first["F2"] == "selected"
    assert first["F3"] == "available"
    assert _zone(layout, "2nd Floor")["booked"] == 1
    assert _zone(layout, "Cabin")["capacity"] == 4


def test_selecting_booked_seat_is_ignored(client, enroll):
    enroll(seat_no="F1")
    layout = client.get("/api/seats/layout", params={"selected": "F1"}).json()
    assert layout["selected"] is None
    states = [s["state"] for z in layout["zones"] for s in z["seats"]]
    assert "selected" not in states


def test_check_seat(client, enroll):
    enroll(seat_no="F1")
    assert client.get("/api/seats/check/f1").json() == {"seat_no": "F1", "floor": "1st Floor", "state": "booked"}
    assert client.get("/api/seats/check/F2").json()["state"] == "available"
    assert client.get("/api/seats/check/F16").status_code == 404


def test_monthly_report(client, enroll):
    enroll(name="A", seat_no="F1", joining_date="2025-01-05", fees=1000, paid=1000)
    enroll(name="B", seat_no="F2", joining_date="2025-01-25", fees=3000, paid=2000)
    enroll(name="C", seat_no="F3", joining_date="2025-02-02", fees=500, paid=500)

    report = client.get("/api/reports/monthly").json()
    months = [(m["month"], m["new_students"], Decimal(m["total_collected"]), Decimal(m["pending"])) for m in report["months"]]
    assert months == [
        ("Feb 2025", 1, Decimal("500"), Decimal("0")),
        ("Jan 2025", 2, Decimal("3000"), Decimal("1000")),
    ]
    assert report["chart"]["labels"] == ["Feb 2025", "Jan 2025"]


def test_monthly_report_pdf(client, enroll):
    enroll(joining_date="2025-01-05", paid=100)
    resp = client.get("/api/reports/monthly/pdf")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")
    # the generated file is removed once it has been sent
    filename = resp.headers["content-disposition"].split("filename=")[1].strip('"')
    assert filename.startswith("monthly_report_")
    assert not os.path.exists(os.path.join(REPORTS_DIR, filename))


def test_dashboard_and_revenue(client, enroll):
    enroll(name="A", seat_no="F1", fees=1000, paid=400)
    enroll(name="B", seat_no="C1", floor="Cabin", fees=800, paid=800)
    enroll(name="C", seat_no="F2", fees=600, paid=0)

    dash = client.get("/api/reports/dashboard").json()
    assert dash["total_students"] == 3
    assert Decimal(dash["total_payments"]) == Decimal("1200")
    assert Decimal(dash["total_pending"]) == Decimal("1200")
    assert dash["floor_occupancy"] == {"1st Floor": 2, "Cabin": 1}

    revenue = client.get("/api/reports/revenue").json()
    assert len(revenue) == 1
    assert Decimal(revenue[0]["total_amount"]) == Decimal("1200")


def test_reports_with_no_data(client):
    assert client.get("/api/reports/monthly").json() == {"months": [], "chart": {"labels": [], "collected": [], "pending": []}}
    assert client.get("/api/reports/revenue").json() == []
    assert client.get("/api/reports/dashboard").json()["total_students"] == 0


def test_upcoming_payments(client, enroll):
    enroll(name="A", seat_no="F1", allotted_date="2025-02-01")
    enroll(name="B", seat_no="F2", allotted_date="2025-01-20")
    enroll(name="C", seat_no="F3", allotted_date="2025-01-25", package_months=2)

    rows = client.get("/api/reports/upcoming", params={"as_of": "2025-02-25"}).json()
    assert [(r["name"], r["next_payment_date"], r["days_left"], r["status"]) for r in rows] == [
        ("B", "2025-02-20", -5, "Overdue (5 days)"),
        ("A", "2025-03-01", 4, "4 days left"),
        ("C", "2025-03-25", 28, "28 days left"),
    ]
    assert [r["urgency"] for r in rows] == ["high", "medium", "low"]
    assert client.get("/api/reports/upcoming").status_code == 200
