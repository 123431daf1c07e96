import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient
import os

# Add project root to sys.path to allow imports from app
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


from app.main import app
from app.db import base # noqa: F401 - registers every model on Base.metadata
from app.db.base_class import Base
from app.db.session import get_db, enable_sqlite_foreign_keys
from tests.utils import create_hierarchy_user, create_config
from app.models.commission_config import CommissionConfig as CommissionConfigModel

# Use a separate SQLite database for testing
TEST_SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
event.listen(engine, "connect", enable_sqlite_foreign_keys)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.create_all(bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(scope="session")
def test_engine():
    Base.metadata.create_all(bind=engine)
    yield engine

@pytest.fixture(scope="function")
def db_session(test_engine):
    """
    Provides a database session for each test function.
    Tables are dropped and recreated for each test to ensure isolation.
    """
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(scope="function")
def client():
    # The TestClient uses the app with the overridden get_db dependency
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def hierarchy(db_session: Session) -> dict:
    """admin <- branch manager <- taluk manager <- service agent <- customer"""
    admin = create_hierarchy_user(db_session, "admin")
    branch_manager = create_hierarchy_user(db_session, "branch_manager", admin)
    taluk_manager = create_hierarchy_user(db_session, "taluk_manager", branch_manager)
    service_agent = create_hierarchy_user(db_session, "service_agent", taluk_manager)
    customer = create_hierarchy_user(db_session, "registered_user", service_agent)
    return {
        "admin": admin,
        "branch_manager": branch_manager,
        "taluk_manager": taluk_manager,
        "service_agent": service_agent,
        "customer": customer,
    }

@pytest.fixture(scope="function")
def recharge_config(db_session: Session) -> CommissionConfigModel:
    return create_config(db_session)


def _create_user_and_get_token(db: Session, client: TestClient, user_type: str):
    password = "testpassword123"
    user = create_hierarchy_user(db, user_type, password=password)

    login_data = {"username": user.username, "password": password}
    response = client.post("/api/v1/auth/login", data=login_data)
    if response.status_code != 200:
        raise Exception(f"Failed to log in user {user.username} during fixture setup. Status: {response.status_code}, Detail: {response.text}")

    token = response.json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}
    return headers, user

@pytest.fixture(scope="function")
def admin_token_headers(db_session: Session, client: TestClient):
    return _create_user_and_get_token(db_session, client, "admin")

@pytest.fixture(scope="function")
def agent_token_headers(db_session: Session, client: TestClient):
    return _create_user_and_get_token(db_session, client, "service_agent")
