from datetime import date, timedelta
from decimal import Decimal
from typing import Dict

import pytest
from httpx import AsyncClient

from playgroup.api.v1.fee_reports import service as fee_reports_service
from playgroup.core.exceptions import ServiceError

PAST = (date.today() - timedelta(days=30)).isoformat()
FUTURE = (date.today() + timedelta(days=30)).isoformat()


async def _setup_batch(client: AsyncClient, headers: Dict[str, str]) -> Dict[str, int]:
    ay = await client.post(
        "/api/v1/academic-years",
        json={"name": "2024-2025", "startDate": "2024-04-01", "endDate": "2025-03-31", "isCurrent": True},
        headers=headers,
    )
    assert ay.status_code == 201
    school_class = await client.post(
        "/api/v1/classes",
        json={"name": "Nursery", "academicYearId": ay.json()["id"], "capacity": 25},
        headers=headers,
    )
    assert school_class.status_code == 201
    batch = await client.post(
        "/api/v1/batches",
        json={"name": "Nursery A", "classId": school_class.json()["id"], "academicYearId": ay.json()["id"]},
        headers=headers,
    )
    assert batch.status_code == 201
    return {
        "academic_year_id": ay.json()["id"],
        "class_id": school_class.json()["id"],
        "batch_id": batch.json()["id"],
    }


async def _create_student(client: AsyncClient, headers: Dict[str, str], name: str, **extra) -> dict:
    payload = {
        "fullName": name,
        "dateOfBirth": "2021-02-03",
        "gender": "female",
        "guardianName": f"{name} Guardian",
        "phone": "+911234567890",
        **extra,
    }
    response = await client.post("/api/v1/students", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_fee_structure_creation_links_batch_students(client: AsyncClient, admin_headers) -> None:
    ids = await _setup_batch(client, admin_headers)
    student = await _create_student(client, admin_headers, "Asha", batchId=ids["batch_id"])
    assert student["batchId"] == ids["batch_id"]
    assert student["classId"] == ids["class_id"]
    assert student["feeStructureId"] is None

    response = await client.post(
        "/api/v1/fee-structures",
        json={
            "name": "Term 1",
            "classId": ids["class_id"],
            "academicYearId": ids["academic_year_id"],
            "totalAmount": "500.00",
            "dueDate": PAST,
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    fee_structure_id = data["feeStructure"]["id"]
    assert data["linkedStudents"] == [
        {"studentId": student["id"], "outcome": "success", "feeStructureId": fee_structure_id, "error": None}
    ]

    fetched = await client.get(f"/api/v1/students/{student['id']}", headers=admin_headers)
    assert fetched.json()["feeStructureId"] == fee_structure_id

    pending = await client.get("/api/v1/fee-reports/pending", headers=admin_headers)
    assert pending.status_code == 200
    rows = pending.json()
    assert len(rows) == 1
    assert rows[0]["studentName"] == "Asha"
    assert rows[0]["className"] == "Nursery"
    assert rows[0]["status"] == "overdue"
    assert Decimal(rows[0]["dueAmount"]) == Decimal("500.00")


@pytest.mark.asyncio
async def test_payments_reduce_pending_and_freeze_structure(client: AsyncClient, admin_headers) -> None:
    ids = await _setup_batch(client, admin_headers)
    student = await _create_student(client, admin_headers, "Ben", batchId=ids["batch_id"])
    fs = (
        await client.post(
            "/api/v1/fee-structures",
            json={
                "name": "Term 1",
                "classId": ids["class_id"],
                "academicYearId": ids["academic_year_id"],
                "totalAmount": "500.00",
                "dueDate": PAST,
            },
            headers=admin_headers,
        )
    ).json()["feeStructure"]

    receipts = []
    for amount in ("200.00", "200.00"):
        paid = await client.post(
            "/api/v1/fee-payments",
            json={"studentId": student["id"], "feeStructureId": fs["id"], "amount": amount, "paymentMethod": "upi"},
            headers=admin_headers,
        )
        assert paid.status_code == 201, paid.text
        receipts.append(paid.json()["receiptNumber"])
    assert receipts == ["RC-001", "RC-002"]

    rows = (await client.get("/api/v1/fee-reports/pending", headers=admin_headers)).json()
    assert len(rows) == 1
    assert rows[0]["status"] == "partial-overdue"
    assert Decimal(rows[0]["paidAmount"]) == Decimal("400.00")
    assert Decimal(rows[0]["dueAmount"]) == Decimal("100.00")

    frozen = await client.patch(
        f"/api/v1/fee-structures/{fs['id']}", json={"totalAmount": "600.00"}, headers=admin_headers
    )
    assert frozen.status_code == 400

    blocked = await client.delete(f"/api/v1/fee-structures/{fs['id']}", headers=admin_headers)
    assert blocked.status_code == 400


@pytest.mark.asyncio
async def test_payment_for_unknown_student(client: AsyncClient, admin_headers) -> None:
    ids = await _setup_batch(client, admin_headers)
    fs = (
        await client.post(
            "/api/v1/fee-structures",
            json={
                "name": "Annual",
                "classId": ids["class_id"],
                "academicYearId": ids["academic_year_id"],
                "totalAmount": "1000.00",
            },
            headers=admin_headers,
        )
    ).json()["feeStructure"]

    response = await client.post(
        "/api/v1/fee-payments",
        json={"studentId": 999, "feeStructureId": fs["id"], "amount": "10.00"},
        headers=admin_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_batch_membership_endpoints(client: AsyncClient, admin_headers) -> None:
    ids = await _setup_batch(client, admin_headers)
    fs = (
        await client.post(
            "/api/v1/fee-structures",
            json={
                "name": "Annual",
                "classId": ids["class_id"],
                "academicYearId": ids["academic_year_id"],
                "totalAmount": "1000.00",
                "dueDate": FUTURE,
            },
            headers=admin_headers,
        )
    ).json()["feeStructure"]
    student = await _create_student(client, admin_headers, "Cleo")

    assigned = await client.post(
        f"/api/v1/batches/{ids['batch_id']}/students",
        json={"studentIds": [student["id"], 999]},
        headers=admin_headers,
    )
    assert assigned.status_code == 200
    body = assigned.json()
    assert body["feeStructureId"] == fs["id"]
    outcomes = {r["studentId"]: r for r in body["results"]}
    assert outcomes[student["id"]]["outcome"] == "success"
    assert outcomes[999]["outcome"] == "error"

    members = await client.get(f"/api/v1/batches/{ids['batch_id']}/students", headers=admin_headers)
    assert [s["id"] for s in members.json()] == [student["id"]]

    batch = await client.get(f"/api/v1/batches/{ids['batch_id']}", headers=admin_headers)
    assert batch.json()["studentCount"] == 1

    blocked = await client.delete(f"/api/v1/batches/{ids['batch_id']}", headers=admin_headers)
    assert blocked.status_code == 400

    removed = await client.delete(
        f"/api/v1/batches/{ids['batch_id']}/students/{student['id']}", headers=admin_headers
    )
    assert removed.status_code == 200
    assert removed.json()["batchId"] is None
    assert removed.json()["feeStructureId"] is None

    again = await client.delete(
        f"/api/v1/batches/{ids['batch_id']}/students/{student['id']}", headers=admin_headers
    )
    assert again.status_code == 400

    deleted = await client.delete(f"/api/v1/batches/{ids['batch_id']}", headers=admin_headers)
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_assign_to_missing_batch(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/v1/batches/404/students", json={"studentIds": [1]}, headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_clone_fee_structures(client: AsyncClient, admin_headers) -> None:
    ids = await _setup_batch(client, admin_headers)
    next_year = await client.post(
        "/api/v1/academic-years",
        json={"name": "2025-2026", "startDate": "2025-04-01", "endDate": "2026-03-31"},
        headers=admin_headers,
    )
    for name in ("Term 1", "Term 2"):
        await client.post(
            "/api/v1/fee-structures",
            json={
                "name": name,
                "classId": ids["class_id"],
                "academicYearId": ids["academic_year_id"],
                "totalAmount": "400.00",
            },
            headers=admin_headers,
        )

    payload = {
        "sourceAcademicYearId": ids["academic_year_id"],
        "sourceClassId": ids["class_id"],
        "targetAcademicYearId": next_year.json()["id"],
        "targetClassId": ids["class_id"],
    }
    cloned = await client.post("/api/v1/fee-structures/clone", json=payload, headers=admin_headers)
    assert cloned.status_code == 201
    created = cloned.json()["created"]
    assert sorted(fs["name"] for fs in created) == ["Term 1", "Term 2"]
    assert {fs["academicYearId"] for fs in created} == {next_year.json()["id"]}

    same = dict(payload, targetAcademicYearId=ids["academic_year_id"])
    assert (await client.post("/api/v1/fee-structures/clone", json=same, headers=admin_headers)).status_code == 400


@pytest.mark.asyncio
async def test_reconcile_endpoint_links_unassigned_students(client: AsyncClient, admin_headers) -> None:
    ids = await _setup_batch(client, admin_headers)
    student = await _create_student(client, admin_headers, "Dara", classId=ids["class_id"])
    fs = (
        await client.post(
            "/api/v1/fee-structures",
            json={
                "name": "Annual",
                "classId": ids["class_id"],
                "academicYearId": ids["academic_year_id"],
                "totalAmount": "900.00",
            },
            headers=admin_headers,
        )
    ).json()["feeStructure"]

    # Pending report lists the unlinked student but leaves the link alone
    rows = (await client.get("/api/v1/fee-reports/pending", headers=admin_headers)).json()
    assert [r["studentId"] for r in rows] == [student["id"]]
    fetched = (await client.get(f"/api/v1/students/{student['id']}", headers=admin_headers)).json()
    assert fetched["feeStructureId"] is None

    reconciled = await client.post("/api/v1/fee-reports/reconcile", headers=admin_headers)
    assert reconciled.status_code == 200
    assert reconciled.json()["linked"] == 1

    fetched = (await client.get(f"/api/v1/students/{student['id']}", headers=admin_headers)).json()
    assert fetched["feeStructureId"] == fs["id"]


@pytest.mark.asyncio
async def test_collection_reports(client: AsyncClient, admin_headers) -> None:
    ids = await _setup_batch(client, admin_headers)
    student = await _create_student(client, admin_headers, "Eli", batchId=ids["batch_id"])
    fs = (
        await client.post(
            "/api/v1/fee-structures",
            json={
                "name": "Annual",
                "classId": ids["class_id"],
                "academicYearId": ids["academic_year_id"],
                "totalAmount": "900.00",
            },
            headers=admin_headers,
        )
    ).json()["feeStructure"]
    for amount, paid_on in (("100.00", "2024-05-03"), ("150.00", "2024-05-03"), ("50.00", "2024-05-20")):
        await client.post(
            "/api/v1/fee-payments",
            json={"studentId": student["id"], "feeStructureId": fs["id"], "amount": amount, "paymentDate": paid_on},
            headers=admin_headers,
        )

    daily = (await client.get("/api/v1/fee-reports/daily", params={"date": "2024-05-03"}, headers=admin_headers)).json()
    assert Decimal(daily["totalCollected"]) == Decimal("250.00")
    assert [d["studentName"] for d in daily["paymentDetails"]] == ["Eli", "Eli"]

    monthly = (
        await client.get("/api/v1/fee-reports/monthly", params={"year": 2024, "month": 5}, headers=admin_headers)
    ).json()
    assert Decimal(monthly["totalCollected"]) == Decimal("300.00")
    assert [d["date"] for d in monthly["dailyCollection"]] == ["2024-05-03", "2024-05-20"]

    bad_month = await client.get("/api/v1/fee-reports/monthly", params={"year": 2024, "month": 13}, headers=admin_headers)
    assert bad_month.status_code == 400


@pytest.mark.asyncio
async def test_dashboard_pending_total_ignores_structures_without_students(
    client: AsyncClient, admin_headers
) -> None:
    ids = await _setup_batch(client, admin_headers)
    await _create_student(client, admin_headers, "Ravi", batchId=ids["batch_id"])
    await client.post(
        "/api/v1/fee-structures",
        json={
            "name": "Term 1",
            "classId": ids["class_id"],
            "academicYearId": ids["academic_year_id"],
            "totalAmount": "500.00",
            "dueDate": FUTURE,
        },
        headers=admin_headers,
    )
    empty_class = await client.post("/api/v1/classes", json={"name": "Toddlers"}, headers=admin_headers)
    assert empty_class.status_code == 201
    await client.post(
        "/api/v1/fee-structures",
        json={
            "name": "Toddlers Term 1",
            "classId": empty_class.json()["id"],
            "academicYearId": ids["academic_year_id"],
            "totalAmount": "300.00",
            "dueDate": FUTURE,
        },
        headers=admin_headers,
    )

    rows = (await client.get("/api/v1/fee-reports/pending", headers=admin_headers)).json()
    assert sorted(row["studentName"] for row in rows) == ["Ravi", "Unassigned"]

    stats = (await client.get("/api/v1/dashboard/stats", headers=admin_headers)).json()
    assert Decimal(stats["pendingFeeTotal"]) == Decimal("500.00")


@pytest.mark.asyncio
async def test_monthly_collection_rejects_out_of_range_year(
    client: AsyncClient, admin_headers, db_session
) -> None:
    response = await client.get("/api/v1/fee-reports/monthly", params={"year": 1, "month": 5}, headers=admin_headers)
    assert response.status_code == 400

    with pytest.raises(ServiceError) as exc_info:
        await fee_reports_service.get_monthly_collection(db_session, 0, 5)
    assert exc_info.value.status_code == 400
