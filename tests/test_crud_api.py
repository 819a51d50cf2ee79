from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient


async def _academic_year(client: AsyncClient, headers, name="2024-2025", current=True) -> dict:
    response = await client.post(
        "/api/v1/academic-years",
        json={"name": name, "startDate": "2024-04-01", "endDate": "2025-03-31", "isCurrent": current},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _student(client: AsyncClient, headers, name: str, **extra) -> dict:
    response = await client.post(
        "/api/v1/students",
        json={
            "fullName": name,
            "dateOfBirth": "2021-06-01",
            "gender": "female",
            "guardianName": "Guardian",
            "phone": "555-0100",
            **extra,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_validation_errors_return_400(client: AsyncClient, admin_headers) -> None:
    response = await client.post("/api/v1/students", json={"fullName": ""}, headers=admin_headers)
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation error"
    assert body["errors"]


@pytest.mark.asyncio
async def test_academic_year_rules(client: AsyncClient, admin_headers) -> None:
    first = await _academic_year(client, admin_headers)
    second = await _academic_year(client, admin_headers, name="2025-2026")

    current = await client.get("/api/v1/academic-years/current", headers=admin_headers)
    assert current.json()["id"] == second["id"]
    refreshed = [ay for ay in (await client.get("/api/v1/academic-years", headers=admin_headers)).json()]
    assert [ay["isCurrent"] for ay in refreshed if ay["id"] == first["id"]] == [False]

    duplicate = await client.post(
        "/api/v1/academic-years",
        json={"name": "2024-2025", "startDate": "2024-04-01", "endDate": "2025-03-31"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    backwards = await client.post(
        "/api/v1/academic-years",
        json={"name": "Broken", "startDate": "2025-04-01", "endDate": "2024-03-31"},
        headers=admin_headers,
    )
    assert backwards.status_code == 400

    await client.post(
        "/api/v1/classes", json={"name": "Nursery", "academicYearId": first["id"]}, headers=admin_headers
    )
    blocked = await client.delete(f"/api/v1/academic-years/{first['id']}", headers=admin_headers)
    assert blocked.status_code == 400


@pytest.mark.asyncio
async def test_class_delete_blocked_by_students(client: AsyncClient, admin_headers) -> None:
    school_class = (await client.post("/api/v1/classes", json={"name": "Nursery"}, headers=admin_headers)).json()
    await _student(client, admin_headers, "Ivy", classId=school_class["id"])

    response = await client.delete(f"/api/v1/classes/{school_class['id']}", headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_batch_defaults_to_current_academic_year(client: AsyncClient, admin_headers) -> None:
    ay = await _academic_year(client, admin_headers)
    school_class = (await client.post("/api/v1/classes", json={"name": "Nursery"}, headers=admin_headers)).json()

    batch = await client.post(
        "/api/v1/batches", json={"name": "Morning", "classId": school_class["id"]}, headers=admin_headers
    )
    assert batch.status_code == 201
    assert batch.json()["academicYearId"] == ay["id"]
    assert batch.json()["capacity"] == 20


@pytest.mark.asyncio
async def test_student_filters_and_delete(client: AsyncClient, admin_headers) -> None:
    school_class = (await client.post("/api/v1/classes", json={"name": "Nursery"}, headers=admin_headers)).json()
    kept = await _student(client, admin_headers, "Jay", classId=school_class["id"])
    await _student(client, admin_headers, "Kim", status="inactive")

    by_class = await client.get("/api/v1/students", params={"classId": school_class["id"]}, headers=admin_headers)
    assert [s["id"] for s in by_class.json()] == [kept["id"]]
    inactive = await client.get("/api/v1/students", params={"status": "inactive"}, headers=admin_headers)
    assert [s["fullName"] for s in inactive.json()] == ["Kim"]

    updated = await client.patch(
        f"/api/v1/students/{kept['id']}", json={"notes": "Allergic to nuts"}, headers=admin_headers
    )
    assert updated.json()["notes"] == "Allergic to nuts"

    deleted = await client.delete(f"/api/v1/students/{kept['id']}", headers=admin_headers)
    assert deleted.status_code == 204
    missing = await client.get(f"/api/v1/students/{kept['id']}", headers=admin_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_attendance_report(client: AsyncClient, admin_headers) -> None:
    school_class = (await client.post("/api/v1/classes", json={"name": "Nursery"}, headers=admin_headers)).json()
    student = await _student(client, admin_headers, "Lia", classId=school_class["id"])
    start = date.today() - timedelta(days=10)
    for offset, mark in enumerate(("present", "late", "absent")):
        response = await client.post(
            "/api/v1/attendance",
            json={"studentId": student["id"], "date": (start + timedelta(days=offset)).isoformat(), "status": mark},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["classId"] == school_class["id"]

    duplicate = await client.post(
        "/api/v1/attendance",
        json={"studentId": student["id"], "date": start.isoformat(), "status": "present"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    report = await client.get(
        "/api/v1/attendance/report", params={"classId": school_class["id"]}, headers=admin_headers
    )
    row = report.json()[0]
    assert row["totalDays"] == 3
    assert row["presentDays"] == 1
    assert row["lateDays"] == 1
    assert Decimal(row["attendancePercentage"]) == Decimal("66.67")


@pytest.mark.asyncio
async def test_expense_report_and_dashboard(client: AsyncClient, admin_headers) -> None:
    today = date.today().isoformat()
    for description, amount, category in (
        ("Crayons", "120.50", "supplies"),
        ("Paper", "79.50", "supplies"),
        ("Electricity", "300.00", "utilities"),
    ):
        response = await client.post(
            "/api/v1/expenses",
            json={"description": description, "amount": amount, "category": category, "date": today},
            headers=admin_headers,
        )
        assert response.status_code == 201

    report = (await client.get("/api/v1/expenses/report", headers=admin_headers)).json()
    assert [(c["category"], Decimal(c["amount"])) for c in report["categories"]] == [
        ("utilities", Decimal("300.00")),
        ("supplies", Decimal("200.00")),
    ]
    assert Decimal(report["total"]) == Decimal("500.00")

    await client.post(
        "/api/v1/inventory",
        json={"name": "Glue", "category": "supplies", "quantity": 2, "unit": "bottle", "minQuantity": 5},
        headers=admin_headers,
    )
    await client.post(
        "/api/v1/inventory",
        json={"name": "Chairs", "category": "furniture", "quantity": 30, "unit": "piece", "minQuantity": 5},
        headers=admin_headers,
    )
    low = (await client.get("/api/v1/inventory", params={"lowStock": True}, headers=admin_headers)).json()
    assert [item["name"] for item in low] == ["Glue"]

    await _student(client, admin_headers, "Max")
    stats = (await client.get("/api/v1/dashboard/stats", headers=admin_headers)).json()
    assert stats["totalStudents"] == 1
    assert stats["activeStudents"] == 1
    assert Decimal(stats["monthlyExpenses"]) == Decimal("500.00")
    assert stats["totalInventoryItems"] == 2
    assert stats["lowStockItems"] == 1
    assert Decimal(stats["pendingFeeTotal"]) == Decimal("0.00")


@pytest.mark.asyncio
async def test_activities_are_newest_first(client: AsyncClient, admin_headers) -> None:
    await client.post("/api/v1/classes", json={"name": "First"}, headers=admin_headers)
    await client.post("/api/v1/classes", json={"name": "Second"}, headers=admin_headers)

    response = await client.get("/api/v1/activities", params={"limit": 1}, headers=admin_headers)
    activities = response.json()
    assert len(activities) == 1
    assert activities[0]["type"] == "class"
    assert activities[0]["details"]["name"] == "Second"


@pytest.mark.asyncio
async def test_reminder_mark_sent(client: AsyncClient, admin_headers) -> None:
    ay = await _academic_year(client, admin_headers)
    school_class = (await client.post("/api/v1/classes", json={"name": "Nursery"}, headers=admin_headers)).json()
    student = await _student(client, admin_headers, "Noa", classId=school_class["id"])
    fs = (
        await client.post(
            "/api/v1/fee-structures",
            json={"name": "Annual", "classId": school_class["id"], "academicYearId": ay["id"], "totalAmount": "100.00"},
            headers=admin_headers,
        )
    ).json()["feeStructure"]

    reminder = await client.post(
        "/api/v1/reminders",
        json={"studentId": student["id"], "feeStructureId": fs["id"], "message": "Fee due soon"},
        headers=admin_headers,
    )
    assert reminder.status_code == 201
    assert reminder.json()["status"] == "pending"

    sent = await client.post(f"/api/v1/reminders/{reminder.json()['id']}/mark-sent", headers=admin_headers)
    assert sent.json()["status"] == "sent"
    assert sent.json()["sentDate"] is not None


@pytest.mark.asyncio
async def test_user_management(client: AsyncClient, admin_headers) -> None:
    created = await client.post(
        "/api/v1/users",
        json={
            "username": "office1",
            "email": "office1@example.com",
            "fullName": "Office One",
            "password": "Office123",
            "role": "officeadmin",
        },
        headers=admin_headers,
    )
    assert created.status_code == 201
    assert "passwordHash" not in created.json()

    duplicate = await client.post(
        "/api/v1/users",
        json={
            "username": "office1",
            "email": "other@example.com",
            "fullName": "Office Two",
            "password": "Office123",
            "role": "officeadmin",
        },
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    user_id = created.json()["id"]
    updated = await client.patch(f"/api/v1/users/{user_id}", json={"active": False}, headers=admin_headers)
    assert updated.json()["active"] is False

    login = await client.post("/api/v1/auth/login", json={"username": "office1", "password": "Office123"})
    assert login.status_code == 403

    deleted = await client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)
    assert deleted.status_code == 204
