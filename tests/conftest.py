import os
import tempfile

# Set environment variables BEFORE any imports that might use settings
# Use a temporary directory for test database to avoid permission issues
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_farm_savvy.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-characters-long-for-testing"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@test.example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "AdminTest123!"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

import app.repositories.farm as farm_repo
from app.api.deps import get_activity_ledger, get_db
from app.core.security import create_access_token, get_password_hash
from app.db.models.role import Role as RoleModel
from app.db.models.user import User as UserModel
from app.main import app
from app.services.activity import ActivityLedger


@pytest.fixture(scope="function")
def session_factory():
    """Create a fresh database for each test, run migrations, yield its sessionmaker."""
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    # WAL lets the ledger's own sessions write while the request session reads
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    # Run Alembic migrations to set up the database schema and seed data
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    try:
        yield TestingSessionLocal
    finally:
        test_engine.dispose()

        try:
            for suffix in ("", "-wal", "-shm"):
                path = f"{test_db_path}{suffix}"
                if os.path.exists(path):
                    os.remove(path)
            if os.path.exists(temp_db_dir):
                os.rmdir(temp_db_dir)
        except OSError as e:
            print(f"Cleanup failed: {e}")


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def ledger(session_factory) -> ActivityLedger:
    """Activity ledger bound to the per-test database."""
    return ActivityLedger(session_factory)


@pytest.fixture(scope="function")
def client(db_session, ledger):
    """Create a test client with database and ledger dependency overrides."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_activity_ledger] = lambda: ledger

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


def _make_user(db: Session, email: str, name: str, role_name: str, password: str = "Secret123") -> dict:
    """Insert a user with the given role and return its id, credentials and token."""
    role = db.query(RoleModel).filter(RoleModel.name == role_name).first()
    if not role:
        raise RuntimeError(f"Role {role_name} not found")

    user = UserModel(
        email=email,
        name=name,
        password_hash=get_password_hash(password),
        role_id=role.id,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    return {
        "id": user.id,
        "email": user.email,
        "password": password,
        "role_id": user.role_id,
        "token": create_access_token(data={"sub": user.id}),
    }


@pytest.fixture(scope="function")
def admin_user(db: Session) -> dict:
    """The admin seeded by migration 002."""
    from app.core.config import settings
    from app.repositories.user import get_user_by_email

    user = get_user_by_email(db, settings.first_admin_email)
    if not user:
        raise RuntimeError("Admin user not found. Check migration 002.")

    return {
        "id": user.id,
        "email": user.email,
        "password": settings.first_admin_password,
        "role_id": user.role_id,
        "token": create_access_token(data={"sub": user.id}),
    }


@pytest.fixture(scope="function")
def admin_token(admin_user: dict) -> str:
    return admin_user["token"]


@pytest.fixture(scope="function")
def owner(db: Session) -> dict:
    return _make_user(db, "owner@example.com", "Olivia Owner", "manager")


@pytest.fixture(scope="function")
def manager(db: Session) -> dict:
    return _make_user(db, "manager@example.com", "Mark Manager", "manager")


@pytest.fixture(scope="function")
def worker(db: Session) -> dict:
    return _make_user(db, "worker@example.com", "Wendy Worker", "worker")


@pytest.fixture(scope="function")
def outsider(db: Session) -> dict:
    """A worker who belongs to no farm."""
    return _make_user(db, "outsider@example.com", "Oscar Outsider", "worker")


@pytest.fixture(scope="function")
def farm(db: Session, owner: dict, manager: dict, worker: dict) -> dict:
    """A farm owned by ``owner`` with ``manager`` and ``worker`` as members.

    Built through the repository so the activity ledger starts empty.
    """
    db_farm = farm_repo.create_farm(
        db,
        name="Green Acres",
        owner_id=owner["id"],
        address="1 Farm Road",
        latitude=45.0,
        longitude=7.5,
        size=120.0,
        types=["dairy", "crop"],
    )
    manager_user = db.get(UserModel, manager["id"])
    worker_user = db.get(UserModel, worker["id"])
    farm_repo.add_member(db, db_farm, manager_user, "manager")
    farm_repo.add_member(db, db_farm, worker_user, "worker")
    return {"id": db_farm.id, "name": db_farm.name}


@pytest.fixture(scope="function")
def make_user(db: Session):
    """Factory for extra users: make_user(email, name, role_name)."""

    def factory(email: str, name: str, role_name: str = "worker") -> dict:
        return _make_user(db, email, name, role_name)

    return factory
