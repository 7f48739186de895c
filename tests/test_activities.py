import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

from app.api.deps import get_activity_ledger
from app.db.base import utcnow
from app.db.models.activity import Activity as ActivityModel
from app.db.models.animal import Animal as AnimalModel
from app.domain.activity_types import ActivityEntityType, ActivityType
from app.main import app
from app.schemas.activity import ActivityCreate
from app.services.activity import ActivityLedger


def entry(farm_id: int, user_id: int, activity_type=ActivityType.ANIMAL_ADDED, **overrides):
    fields = {
        "type": activity_type,
        "action": "added",
        "description": "Added new animal #T-1",
        "entity_type": ActivityEntityType.ANIMAL,
        "entity_id": 1,
        "user_id": user_id,
        "farm_id": farm_id,
    }
    fields.update(overrides)
    return ActivityCreate(**fields)


def _unreachable_store():
    raise ConnectionError("activity store unreachable")


# ============================================================================
# LEDGER
# ============================================================================


def test_append_assigns_identity_and_timestamp(db: Session, ledger: ActivityLedger, farm, owner):
    stored = ledger.append(entry(farm["id"], owner["id"], metadata={"tag_number": "T-1"}))

    assert stored.id is not None
    assert stored.created_at is not None

    row = db.query(ActivityModel).filter(ActivityModel.id == stored.id).one()
    assert row.type == "animal_added"
    assert row.entity_type == "animal"
    assert row.metadata_ == {"tag_number": "T-1"}


def test_record_swallows_and_logs_failures(caplog, farm, owner):
    broken = ActivityLedger(_unreachable_store)

    with caplog.at_level(logging.ERROR, logger="app.services.activity"):
        broken.record(entry(farm["id"], owner["id"]))

    assert any(
        "Failed to log animal_added activity" in record.getMessage() for record in caplog.records
    )


def test_append_propagates_failures(farm, owner):
    broken = ActivityLedger(_unreachable_store)

    with pytest.raises(ConnectionError):
        broken.append(entry(farm["id"], owner["id"]))


def test_mutation_succeeds_when_ledger_is_down(client, db: Session, farm: dict, owner: dict):
    app.dependency_overrides[get_activity_ledger] = lambda: ActivityLedger(_unreachable_store)

    response = client.post(
        "/api/v1/animals",
        json={
            "farm_id": farm["id"],
            "tag_number": "DOWN-1",
            "type": "pig",
            "breed": "Duroc",
            "gender": "male",
            "date_of_birth": "2023-02-01",
            "weight": 110,
        },
        headers={"Authorization": f"Bearer {owner['token']}"},
    )

    assert response.status_code == 201
    assert db.query(AnimalModel).filter(AnimalModel.tag_number == "DOWN-1").count() == 1
    assert db.query(ActivityModel).count() == 0


# ============================================================================
# QUERIES
# ============================================================================


def test_farm_activities_are_newest_first(
    client, ledger: ActivityLedger, farm: dict, owner: dict, worker: dict
):
    ids = [
        ledger.append(entry(farm["id"], owner["id"], entity_id=n, description=f"Added #{n}")).id
        for n in range(5)
    ]

    response = client.get(
        f"/api/v1/activities/farms/{farm['id']}/activities",
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 200
    body = response.json()
    assert [a["id"] for a in body["data"]] == list(reversed(ids))
    assert body["pagination"] == {"total": 5, "limit": 10, "offset": 0}

    timestamps = [a["created_at"] for a in body["data"]]
    assert timestamps == sorted(timestamps, reverse=True)


def test_same_timestamp_activities_fall_back_to_id_order(
    client, db: Session, farm: dict, owner: dict
):
    created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    rows = [
        ActivityModel(
            type="animal_added",
            action="added",
            description=f"Added #{n}",
            entity_type="animal",
            entity_id=n,
            user_id=owner["id"],
            farm_id=farm["id"],
            created_at=created_at,
        )
        for n in range(3)
    ]
    db.add_all(rows)
    db.commit()
    ids = [row.id for row in rows]

    for url in (
        f"/api/v1/activities/farms/{farm['id']}/activities",
        "/api/v1/activities/user/activities",
    ):
        response = client.get(url, headers={"Authorization": f"Bearer {owner['token']}"})
        assert response.status_code == 200
        assert [a["id"] for a in response.json()["data"]] == list(reversed(ids))


def test_farm_activities_pagination(client, ledger: ActivityLedger, farm: dict, owner: dict):
    ids = [ledger.append(entry(farm["id"], owner["id"], entity_id=n)).id for n in range(5)]

    response = client.get(
        f"/api/v1/activities/farms/{farm['id']}/activities?limit=2&offset=2",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    body = response.json()
    assert [a["id"] for a in body["data"]] == [ids[2], ids[1]]
    assert body["pagination"] == {"total": 5, "limit": 2, "offset": 2}


def test_activity_payload_shape(client, ledger: ActivityLedger, farm: dict, owner: dict):
    ledger.append(entry(farm["id"], owner["id"], entity_name="Bella", metadata={"weight": 12.5}))

    response = client.get(
        f"/api/v1/activities/farms/{farm['id']}/activities",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    activity = response.json()["data"][0]
    assert activity["type"] == "animal_added"
    assert activity["entity_name"] == "Bella"
    assert activity["metadata"] == {"weight": 12.5}
    assert activity["user"]["id"] == owner["id"]
    assert activity["farm"] == {"id": farm["id"], "name": farm["name"]}


def test_outsider_cannot_read_farm_activities(client, farm: dict, outsider: dict):
    response = client.get(
        f"/api/v1/activities/farms/{farm['id']}/activities",
        headers={"Authorization": f"Bearer {outsider['token']}"},
    )
    assert response.status_code == 403


def test_missing_farm_activities(client, owner: dict):
    response = client.get(
        "/api/v1/activities/farms/9999/activities",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 404


def test_user_activities_are_scoped_to_actor(
    client, ledger: ActivityLedger, farm: dict, owner: dict, manager: dict
):
    mine = ledger.append(entry(farm["id"], manager["id"])).id
    ledger.append(entry(farm["id"], owner["id"]))

    response = client.get(
        "/api/v1/activities/user/activities",
        headers={"Authorization": f"Bearer {manager['token']}"},
    )
    assert response.status_code == 200
    body = response.json()
    assert [a["id"] for a in body["data"]] == [mine]
    assert body["pagination"]["total"] == 1


# ============================================================================
# STATS
# ============================================================================


def test_stats_count_types_within_window(
    client, db: Session, ledger: ActivityLedger, farm: dict, owner: dict, worker: dict
):
    ledger.append(entry(farm["id"], owner["id"]))
    ledger.append(entry(farm["id"], owner["id"]))
    ledger.append(entry(farm["id"], owner["id"], activity_type=ActivityType.HEALTH_CHECK))
    old = ledger.append(entry(farm["id"], owner["id"], activity_type=ActivityType.FARM_CREATED))

    row = db.query(ActivityModel).filter(ActivityModel.id == old.id).one()
    row.created_at = utcnow() - timedelta(days=30)
    db.commit()

    response = client.get(
        f"/api/v1/activities/farms/{farm['id']}/activities/stats",
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["stats"] == [
        {"type": "animal_added", "count": 2},
        {"type": "health_check", "count": 1},
    ]
    assert body["period"]["days"] == 7

    response = client.get(
        f"/api/v1/activities/farms/{farm['id']}/activities/stats?days=60",
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    types = {item["type"]: item["count"] for item in response.json()["stats"]}
    assert types["farm_created"] == 1


def test_stats_rejects_non_positive_window(client, farm: dict, owner: dict):
    response = client.get(
        f"/api/v1/activities/farms/{farm['id']}/activities/stats?days=0",
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 400
