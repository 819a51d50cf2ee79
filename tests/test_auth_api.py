import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playgroup.auth.models import User
from playgroup.core.models import Student


async def _student(db_session: AsyncSession, name: str, email: str = None) -> Student:
    student = Student(
        full_name=name,
        date_of_birth="2021-01-01",
        gender="male",
        guardian_name=f"{name} Guardian",
        phone="555-0100",
        email=email,
    )
    db_session.add(student)
    await db_session.commit()
    await db_session.refresh(student)
    return student


@pytest.mark.asyncio
async def test_login_success_and_me(client: AsyncClient, make_user) -> None:
    await make_user("officeadmin", username="office", password="Office123")

    response = await client.post("/api/v1/auth/login", json={"username": "office", "password": "Office123"})
    assert response.status_code == 200
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["user"]["role"] == "officeadmin"

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "office"


@pytest.mark.asyncio
async def test_login_accepts_email(client: AsyncClient, make_user) -> None:
    await make_user("teacher", username="tina", email="Tina@Example.com", password="Teach123")

    response = await client.post("/api/v1/auth/login", json={"username": "tina@example.com", "password": "Teach123"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, make_user) -> None:
    await make_user("teacher", username="tom", password="Right123")

    response = await client.post("/api/v1/auth/login", json={"username": "tom", "password": "wrong"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user(client: AsyncClient, make_user) -> None:
    await make_user("teacher", username="gone", password="Right123", active=False)

    response = await client.post("/api/v1/auth/login", json={"username": "gone", "password": "Right123"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_oauth_form_login(client: AsyncClient, make_user) -> None:
    await make_user("officeadmin", username="form", password="Form1234")

    response = await client.post("/api/v1/auth/login-oauth", data={"username": "form", "password": "Form1234"})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(client: AsyncClient) -> None:
    response = await client.get("/api/v1/students")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_teacher_permissions(client: AsyncClient, make_user, headers_for) -> None:
    headers = headers_for(await make_user("teacher"))

    assert (await client.get("/api/v1/classes", headers=headers)).status_code == 200
    denied = await client.post("/api/v1/classes", json={"name": "Nursery"}, headers=headers)
    assert denied.status_code == 403
    assert denied.json()["detail"] == "Insufficient permissions"
    assert (await client.get("/api/v1/fee-structures", headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_superadmin_grants_permission(client: AsyncClient, make_user, headers_for, admin_headers) -> None:
    teacher_headers = headers_for(await make_user("teacher"))

    response = await client.put(
        "/api/v1/role-permissions",
        json={
            "role": "teacher",
            "module": "classes",
            "canView": True,
            "canCreate": True,
            "canEdit": False,
            "canDelete": False,
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["canCreate"] is True

    created = await client.post("/api/v1/classes", json={"name": "Nursery"}, headers=teacher_headers)
    assert created.status_code == 201

    flags = await client.get("/api/v1/module-permissions", headers=teacher_headers)
    assert flags.json()["classes"] == {"canView": True, "canCreate": True, "canEdit": False, "canDelete": False}


@pytest.mark.asyncio
async def test_only_superadmin_edits_permissions(client: AsyncClient, make_user, headers_for) -> None:
    headers = headers_for(await make_user("officeadmin"))

    response = await client.put(
        "/api/v1/role-permissions",
        json={"role": "teacher", "module": "classes", "canView": True, "canCreate": True, "canEdit": True, "canDelete": True},
        headers=headers,
    )
    assert response.status_code == 403

    other_role = await client.get("/api/v1/module-permissions", params={"role": "teacher"}, headers=headers)
    assert other_role.status_code == 403


@pytest.mark.asyncio
async def test_parent_sees_only_own_children(
    client: AsyncClient, db_session: AsyncSession, make_user, headers_for
) -> None:
    own = await _student(db_session, "Own", email="parent@example.com")
    await _student(db_session, "Other", email="someone@example.com")
    headers = headers_for(await make_user("parent", username="parent", email="parent@example.com"))

    listed = await client.get("/api/v1/students", headers=headers)
    assert listed.status_code == 200
    assert [s["id"] for s in listed.json()] == [own.id]


@pytest.mark.asyncio
async def test_parent_cannot_open_other_student(
    client: AsyncClient, db_session: AsyncSession, make_user, headers_for
) -> None:
    other = await _student(db_session, "Other", email="someone@example.com")
    headers = headers_for(await make_user("parent", username="parent", email="parent@example.com"))

    response = await client.get(f"/api/v1/students/{other.id}", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_parent_account(client: AsyncClient, db_session: AsyncSession, admin_headers) -> None:
    student = await _student(db_session, "Kid", email="Guardian.One@example.com")

    response = await client.post(
        f"/api/v1/students/{student.id}/parent-account",
        json={"password": "Parent123"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "guardian.one"
    assert data["role"] == "parent"
    assert data["studentId"] == student.id

    user = (await db_session.execute(select(User).where(User.username == "guardian.one"))).scalar_one()
    assert user.email == "guardian.one@example.com"

    again = await client.post(
        f"/api/v1/students/{student.id}/parent-account",
        json={"password": "Parent123"},
        headers=admin_headers,
    )
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_parent_account_requires_email(client: AsyncClient, db_session: AsyncSession, admin_headers) -> None:
    student = await _student(db_session, "NoMail")

    response = await client.post(
        f"/api/v1/students/{student.id}/parent-account",
        json={"password": "Parent123"},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_tampered_token_is_rejected(client: AsyncClient, make_user, headers_for) -> None:
    headers = headers_for(await make_user("officeadmin"))
    headers["Authorization"] += "x"

    response = await client.get("/api/v1/auth/me", headers=headers)
    assert response.status_code == 401
