"""End-to-end flows through the HTTP API."""

from __future__ import annotations

from app.controllers.dependencies import get_account_service
from app.errors import RemoteFailure
from app.main import app
from app.models import UserRole
from app.services import AccountService, IdentityRevoker


async def _register_and_login(client, path, name, email, password="secret1"):
    response = await client.post(
        path,
        json={"name": name, "email": email, "password": password, "phone": "5550001111"},
    )
    assert response.status_code == 201, response.text

    login = await client.post("/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    return {"Authorization": f"Bearer {login.json()['accessToken']}"}


async def _school_with_item(client, need=10):
    admin_headers = await _register_and_login(
        client, "/users/school-admins", "Sam Admin", "sam@example.com"
    )
    school = await client.post(
        "/schools/",
        headers=admin_headers,
        json={
            "name": "Hillside School",
            "address": "12 Hill Road",
            "phoneNumber": "5551234567",
            "latitude": 12.97,
            "longitude": 77.59,
        },
    )
    assert school.status_code == 201, school.text
    school_id = school.json()["id"]

    need_response = await client.put(
        f"/schools/{school_id}/need", headers=admin_headers, json={"totalFoodNeeded": need}
    )
    assert need_response.json() == {"schoolId": school_id, "totalFoodNeeded": need}

    item = await client.post(
        f"/schools/{school_id}/food-items", headers=admin_headers, json={"name": "Rice"}
    )
    assert item.status_code == 201, item.text
    assert item.json()["currentQuantity"] == 0
    return admin_headers, school_id, item.json()["id"]


async def test_donation_flow(client):
    admin_headers, school_id, item_id = await _school_with_item(client, need=10)
    donor_headers = await _register_and_login(client, "/users/", "Dana Donor", "dana@example.com")

    too_much = await client.post(
        "/donations/",
        headers=donor_headers,
        json={"schoolId": school_id, "foodItemId": item_id, "quantity": 11},
    )
    assert too_much.status_code == 409
    assert too_much.json() == {"detail": "Maximum donation amount is 10"}

    ok = await client.post(
        "/donations/",
        headers=donor_headers,
        json={"schoolId": school_id, "foodItemId": item_id, "quantity": 4, "note": "a, b"},
    )
    assert ok.status_code == 201, ok.text
    assert ok.json()["remainingNeed"] == 6
    assert ok.json()["needSynced"] is True

    need = await client.get(f"/schools/{school_id}/need")
    assert need.json()["totalFoodNeeded"] == 6

    report = await client.get(
        f"/reports/schools/{school_id}/donations", headers=admin_headers
    )
    assert report.status_code == 200
    [donation] = report.json()
    assert donation["donorName"] == "Dana Donor"
    assert donation["foodItemName"] == "Rice"

    export = await client.get(
        f"/reports/schools/{school_id}/donations/export?scope=today",
        headers=admin_headers,
    )
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    assert 'filename="todays-donations-' in export.headers["content-disposition"]
    lines = export.text.splitlines()
    assert lines[0] == "Date,Donor,Food Item,Quantity,Note"
    assert lines[1].endswith(',Dana Donor,Rice,4,"a, b"')

    donors = await client.get(
        f"/reports/schools/{school_id}/donors?search=dana", headers=admin_headers
    )
    assert [d["donationCount"] for d in donors.json()] == [1]

    mine = await client.get("/donations/me", headers=donor_headers)
    assert [d["quantity"] for d in mine.json()] == [4]


async def test_donor_cannot_touch_school(client):
    _, school_id, item_id = await _school_with_item(client)
    donor_headers = await _register_and_login(client, "/users/", "Dana Donor", "dana@example.com")

    need = await client.put(
        f"/schools/{school_id}/need", headers=donor_headers, json={"totalFoodNeeded": 99}
    )
    assert need.status_code == 403

    delete = await client.delete(f"/food-items/{item_id}", headers=donor_headers)
    assert delete.status_code == 403

    report = await client.get(
        f"/reports/schools/{school_id}/donations", headers=donor_headers
    )
    assert report.status_code == 403


async def test_negative_need_is_rejected(client):
    admin_headers, school_id, _ = await _school_with_item(client)

    response = await client.put(
        f"/schools/{school_id}/need", headers=admin_headers, json={"totalFoodNeeded": -1}
    )
    assert response.status_code == 422


async def test_requests_without_token_are_unauthenticated(client):
    response = await client.get("/donations/me")
    assert response.status_code == 401


async def test_registration_validation(client):
    short = await client.post(
        "/users/",
        json={"name": "A", "email": "a@example.com", "password": "123", "phone": "1"},
    )
    assert short.status_code == 422

    await _register_and_login(client, "/users/", "A", "a@example.com")
    again = await client.post(
        "/users/",
        json={"name": "A", "email": "A@example.com", "password": "secret1", "phone": "1"},
    )
    assert again.status_code == 422
    assert again.json()["detail"] == "This email is already registered"


async def test_school_phone_must_have_ten_digits(client):
    admin_headers, school_id, _ = await _school_with_item(client)

    bad = await client.put(
        f"/schools/{school_id}", headers=admin_headers, json={"phoneNumber": "12345"}
    )
    assert bad.status_code == 422

    good = await client.put(
        f"/schools/{school_id}", headers=admin_headers, json={"phoneNumber": "0123456789"}
    )
    assert good.status_code == 200
    assert good.json()["phoneNumber"] == "0123456789"


class RefusingRevoker(IdentityRevoker):
    async def revoke(self, target_user_id, caller_token):
        raise RemoteFailure("HTTP error 500")


async def test_partial_account_deletion_is_an_error(client, make_user):
    _, root_headers = await make_user(name="Root", email="root@example.com")
    donor, _ = await make_user(role=UserRole.DONOR)
    app.dependency_overrides[get_account_service] = lambda: AccountService(
        revoker=RefusingRevoker()
    )

    response = await client.delete(f"/admin/users/{donor.id}", headers=root_headers)

    assert response.status_code == 502
    body = response.json()
    assert "remains" in body["detail"]
    assert body["result"] == {
        "success": False,
        "message": body["detail"],
        "profile_deleted": True,
        "identity_deleted": False,
    }


async def test_full_account_deletion(client, make_user):
    _, root_headers = await make_user(name="Root", email="root@example.com")
    donor, _ = await make_user()

    response = await client.delete(f"/admin/users/{donor.id}", headers=root_headers)

    assert response.status_code == 200
    assert response.json()["identityDeleted"] is True


async def test_console_requires_super_admin(client, make_user):
    _, donor_headers = await make_user()

    response = await client.get("/admin/users", headers=donor_headers)
    assert response.status_code == 403
