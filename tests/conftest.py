import os

# must be set before config.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEFAULT_ADMIN", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
# the shared app would otherwise throttle the whole suite; see test_ratelimit.py
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import date, datetime, timedelta
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database.connection import create_all_tables, get_db, make_engine
from main import app
from modules.employees.models import Employee
from modules.security.model import User, UserRole
from modules.security.passwords import hash_password
from modules.security.tokens import create_access_token

PASSWORD = "secret123"

_seq = count(1)


@pytest.fixture
def db():
    engine = make_engine("sqlite://")
    create_all_tables(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(role: UserRole = UserRole.EMPLOYEE, **kwargs) -> User:
        n = next(_seq)
        user = User(
            username=kwargs.pop("username", f"user{n}"),
            email=kwargs.pop("email", f"user{n}@example.com"),
            password_hash=hash_password(kwargs.pop("password", PASSWORD)),
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", f"User{n}"),
            role=role,
            department=kwargs.pop("department", "Engineering"),
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}

    return _headers


@pytest.fixture
def as_role(make_user, auth_headers):
    """headers for a fresh user with the given role"""
    def _as(role: UserRole = UserRole.EMPLOYEE) -> dict:
        return auth_headers(make_user(role))

    return _as


@pytest.fixture
def make_employee(db):
    def _make(**kwargs) -> Employee:
        n = next(_seq)
        emp = Employee(
            employee_code=kwargs.pop("employee_code", f"EMP{n:04d}"),
            first_name=kwargs.pop("first_name", "Jane"),
            last_name=kwargs.pop("last_name", f"Doe{n}"),
            email=kwargs.pop("email", f"jane{n}@example.com"),
            department=kwargs.pop("department", "Engineering"),
            position=kwargs.pop("position", "Developer"),
            salary=kwargs.pop("salary", 50000),
            hire_date=kwargs.pop("hire_date", date(2022, 1, 10)),
            **kwargs,
        )
        db.add(emp)
        db.commit()
        db.refresh(emp)
        return emp

    return _make


@pytest.fixture
def iso_in_days():
    """ISO timestamp `days` from now (negative = past)"""
    def _iso(days: int) -> str:
        return (datetime.utcnow() + timedelta(days=days)).isoformat()

    return _iso
