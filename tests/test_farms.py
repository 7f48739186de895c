from sqlalchemy.orm import Session

from app.db.models.activity import Activity as ActivityModel
from app.repositories.farm import get_farm_by_id

FARM_PAYLOAD = {
    "name": "Sunny Meadows",
    "address": "42 Country Lane",
    "latitude": 44.1,
    "longitude": 8.2,
    "size": 55.5,
    "types": ["poultry", "organic"],
}


# ============================================================================
# CREATE
# ============================================================================


def test_manager_creates_farm_and_becomes_owner(client, db: Session, manager: dict):
    response = client.post(
        "/api/v1/farms",
        json=FARM_PAYLOAD,
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["owner_id"] == manager["id"]
    assert data["owner"]["email"] == manager["email"]
    assert data["managers"] == []
    assert data["types"] == ["poultry", "organic"]

    activity = db.query(ActivityModel).filter(ActivityModel.entity_id == data["id"]).one()
    assert activity.type == "farm_created"
    assert activity.entity_type == "farm"
    assert activity.user_id == manager["id"]
    assert activity.farm_id == data["id"]


def test_worker_cannot_create_farm(client, db: Session, worker: dict):
    response = client.post(
        "/api/v1/farms",
        json=FARM_PAYLOAD,
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 403


def test_create_farm_negative_size(client, db: Session, manager: dict):
    response = client.post(
        "/api/v1/farms",
        json={**FARM_PAYLOAD, "size": -1},
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_create_farm_unknown_type(client, db: Session, manager: dict):
    response = client.post(
        "/api/v1/farms",
        json={**FARM_PAYLOAD, "types": ["aquaculture"]},
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 400


# ============================================================================
# READ
# ============================================================================


def test_list_farms_for_members(client, db: Session, farm: dict, worker: dict, outsider: dict):
    response = client.get(
        "/api/v1/farms", headers={"Authorization": f"Bearer {worker['token']}"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["id"] == farm["id"]

    response = client.get(
        "/api/v1/farms", headers={"Authorization": f"Bearer {outsider['token']}"}
    )
    assert response.json()["count"] == 0


def test_admin_lists_every_farm(client, db: Session, farm: dict, admin_token: str):
    response = client.get("/api/v1/farms", headers={"Authorization": f"Bearer {admin_token}"})
    assert response.status_code == 200
    assert [f["id"] for f in response.json()["data"]] == [farm["id"]]


def test_get_farm_as_member(client, db: Session, farm: dict, worker: dict, manager: dict):
    response = client.get(
        f"/api/v1/farms/{farm['id']}",
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert [m["id"] for m in data["managers"]] == [manager["id"]]
    assert [w["id"] for w in data["workers"]] == [worker["id"]]


def test_get_farm_as_outsider(client, db: Session, farm: dict, outsider: dict):
    response = client.get(
        f"/api/v1/farms/{farm['id']}",
        headers={"Authorization": f"Bearer {outsider['token']}"},
    )
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_missing_farm_is_not_found_even_for_outsiders(client, db: Session, outsider: dict):
    response = client.get(
        "/api/v1/farms/9999", headers={"Authorization": f"Bearer {outsider['token']}"}
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Farm not found"


# ============================================================================
# UPDATE / DELETE
# ============================================================================


def test_owner_updates_farm(client, db: Session, farm: dict, owner: dict):
    response = client.put(
        f"/api/v1/farms/{farm['id']}",
        json={"name": "Greener Acres", "size": 130},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Greener Acres"
    assert data["size"] == 130
    assert data["address"] == "1 Farm Road"


def test_manager_cannot_update_farm_settings(client, db: Session, farm: dict, manager: dict):
    response = client.put(
        f"/api/v1/farms/{farm['id']}",
        json={"name": "Mine Now"},
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 403


def test_update_farm_cannot_clear_required_field(client, db: Session, farm: dict, owner: dict):
    response = client.put(
        f"/api/v1/farms/{farm['id']}",
        json={"name": None},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "name cannot be empty"


def test_manager_cannot_delete_farm(client, db: Session, farm: dict, manager: dict):
    response = client.delete(
        f"/api/v1/farms/{farm['id']}",
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 403


def test_owner_deletes_farm(client, db: Session, farm: dict, owner: dict):
    response = client.delete(
        f"/api/v1/farms/{farm['id']}",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {}}

    db.expire_all()
    assert get_farm_by_id(db, farm["id"]) is None

    response = client.get(
        f"/api/v1/farms/{farm['id']}",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 404


# ============================================================================
# MEMBERSHIP
# ============================================================================


def test_owner_adds_worker(client, db: Session, farm: dict, owner: dict, outsider: dict):
    response = client.post(
        f"/api/v1/farms/{farm['id']}/members",
        json={"user_id": outsider["id"], "membership": "worker"},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 201
    worker_ids = [w["id"] for w in response.json()["data"]["workers"]]
    assert outsider["id"] in worker_ids

    activity = db.query(ActivityModel).filter(ActivityModel.type == "user_joined").one()
    assert activity.entity_type == "user"
    assert activity.entity_id == outsider["id"]
    assert activity.user_id == owner["id"]
    assert activity.metadata_ == {"membership": "worker"}

    response = client.get(
        f"/api/v1/farms/{farm['id']}",
        headers={"Authorization": f"Bearer {outsider['token']}"},
    )
    assert response.status_code == 200


def test_promote_worker_to_manager(client, db: Session, farm: dict, owner: dict, worker: dict):
    response = client.post(
        f"/api/v1/farms/{farm['id']}/members",
        json={"user_id": worker["id"], "membership": "manager"},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert worker["id"] in [m["id"] for m in data["managers"]]
    assert worker["id"] not in [w["id"] for w in data["workers"]]


def test_owner_cannot_be_added_as_member(client, db: Session, farm: dict, owner: dict):
    response = client.post(
        f"/api/v1/farms/{farm['id']}/members",
        json={"user_id": owner["id"], "membership": "worker"},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 400


def test_add_unknown_user(client, db: Session, farm: dict, owner: dict):
    response = client.post(
        f"/api/v1/farms/{farm['id']}/members",
        json={"user_id": 9999, "membership": "worker"},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 404


def test_manager_cannot_add_members(client, db: Session, farm: dict, manager: dict, outsider: dict):
    response = client.post(
        f"/api/v1/farms/{farm['id']}/members",
        json={"user_id": outsider["id"], "membership": "worker"},
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 403


def test_remove_member(client, db: Session, farm: dict, owner: dict, worker: dict):
    response = client.delete(
        f"/api/v1/farms/{farm['id']}/members/{worker['id']}",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["workers"] == []

    response = client.get(
        f"/api/v1/farms/{farm['id']}",
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 403


def test_remove_non_member(client, db: Session, farm: dict, owner: dict, outsider: dict):
    response = client.delete(
        f"/api/v1/farms/{farm['id']}/members/{outsider['id']}",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 404
    assert response.json()["error"] == "User is not a member of this farm"
