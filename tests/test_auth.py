from sqlalchemy.orm import Session

from app.core.security import create_access_token, decode_token
from app.repositories.user import get_user_by_email


# ============================================================================
# REGISTER
# ============================================================================


def test_register_defaults_to_worker(client, db: Session):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": "New Hand", "email": "NewHand@Example.com", "password": "secret1"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "newhand@example.com"
    assert data["user"]["role"]["name"] == "worker"
    assert decode_token(data["access_token"])["sub"] == str(data["user"]["id"])


def test_register_as_manager(client, db: Session):
    response = client.post(
        "/api/v1/auth/register",
        json={
            "name": "Farm Boss",
            "email": "boss@example.com",
            "password": "secret1",
            "role": "manager",
        },
    )
    assert response.status_code == 201
    assert response.json()["user"]["role"]["name"] == "manager"


def test_register_cannot_pick_admin(client, db: Session):
    response = client.post(
        "/api/v1/auth/register",
        json={
            "name": "Sneaky",
            "email": "sneaky@example.com",
            "password": "secret1",
            "role": "admin",
        },
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert get_user_by_email(db, "sneaky@example.com") is None


def test_register_duplicate_email(client, db: Session, worker: dict):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": "Again", "email": worker["email"].upper(), "password": "secret1"},
    )
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Email already registered",
        "code": "DUPLICATE_RESOURCE",
    }


def test_register_short_password(client, db: Session):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": "Shorty", "email": "short@example.com", "password": "abc"},
    )
    assert response.status_code == 400
    assert "password" in response.json()["error"]


def test_register_blank_password(client, db: Session):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": "Blank", "email": "blank@example.com", "password": "        "},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Password cannot be blank"


# ============================================================================
# LOGIN
# ============================================================================


def test_login_success(client, db: Session, admin_user: dict):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": admin_user["email"], "password": admin_user["password"]},
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["user"]["email"] == admin_user["email"]
    assert data["user"]["last_login"] is not None


def test_login_is_case_insensitive_on_email(client, db: Session, worker: dict):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": worker["email"].upper(), "password": worker["password"]},
    )
    assert response.status_code == 200


def test_login_invalid_email(client, db: Session):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": "nobody@example.com", "password": "Password123"},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"
    assert response.json()["code"] == "UNAUTHORIZED"


def test_login_wrong_password(client, db: Session, admin_user: dict):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": admin_user["email"], "password": "WrongPassword"},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"


def test_login_deactivated_account(client, db: Session, worker: dict):
    user = get_user_by_email(db, worker["email"])
    user.is_active = False
    db.commit()

    response = client.post(
        "/api/v1/auth/login",
        data={"username": worker["email"], "password": worker["password"]},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Account is deactivated"


# ============================================================================
# ME / TOKENS
# ============================================================================


def test_me(client, db: Session, worker: dict):
    response = client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {worker['token']}"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["data"]["id"] == worker["id"]
    assert "password_hash" not in data["data"]


def test_me_without_token(client, db: Session):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.json()["code"] == "UNAUTHORIZED"


def test_me_with_garbage_token(client, db: Session):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"] == "Could not validate credentials"


def test_me_with_token_for_missing_user(client, db: Session):
    token = create_access_token(data={"sub": 12345})
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"] == "User not found"


def test_token_of_deactivated_user_is_rejected(client, db: Session, worker: dict):
    user = get_user_by_email(db, worker["email"])
    user.is_active = False
    db.commit()

    response = client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {worker['token']}"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Account is deactivated"


# ============================================================================
# UPDATE DETAILS / PASSWORD
# ============================================================================


def test_update_details(client, db: Session, worker: dict):
    response = client.put(
        "/api/v1/auth/updatedetails",
        json={"name": "Wendy W.", "email": "Wendy@Example.com"},
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Wendy W."
    assert data["email"] == "wendy@example.com"


def test_update_details_email_taken(client, db: Session, worker: dict, manager: dict):
    response = client.put(
        "/api/v1/auth/updatedetails",
        json={"email": manager["email"]},
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_RESOURCE"


def test_update_password(client, db: Session, worker: dict):
    response = client.put(
        "/api/v1/auth/updatepassword",
        json={"current_password": worker["password"], "new_password": "brandnew"},
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 200
    assert "access_token" in response.json()

    login = client.post(
        "/api/v1/auth/login",
        data={"username": worker["email"], "password": "brandnew"},
    )
    assert login.status_code == 200


def test_update_password_wrong_current(client, db: Session, worker: dict):
    response = client.put(
        "/api/v1/auth/updatepassword",
        json={"current_password": "not-it", "new_password": "brandnew"},
        headers={"Authorization": f"Bearer {worker['token']}"},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Password is incorrect"
