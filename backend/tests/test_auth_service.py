"""
Tests for account registration and login against an in-memory SQLite DB.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy.orm import sessionmaker

from config.settings import settings
from models.db import User, create_db_engine, init_db
from services.auth_service import AccountError, AuthService, hash_password, verify_password


@pytest.fixture
def session_factory(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def auth(session_factory):
    return AuthService(session_factory)


def test_hash_and_verify():
    hashed = hash_password("s3cret!", rounds=4)

    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_register_returns_public_record(auth, session_factory):
    user = auth.register("Asha", "Asha@Example.com ", "s3cret!")

    assert user["email"] == "asha@example.com"
    assert user["name"] == "Asha"
    assert isinstance(user["id"], str)
    assert "password_hash" not in user

    with session_factory() as session:
        stored = session.query(User).filter_by(email="asha@example.com").one()
        assert stored.password_hash != "s3cret!"


def test_duplicate_email_rejected(auth):
    auth.register("Asha", "asha@example.com", "s3cret!")

    with pytest.raises(AccountError, match="Email already exists") as info:
        auth.register("Other", "ASHA@example.com", "another")
    assert info.value.status_code == 400


@pytest.mark.parametrize("email, password", [("", "pw"), ("a@b.c", ""), (None, "pw")])
def test_missing_fields_rejected(auth, email, password):
    with pytest.raises(AccountError):
        auth.register("x", email, password)


def test_authenticate(auth):
    auth.register("Asha", "asha@example.com", "s3cret!")

    assert auth.authenticate("ASHA@example.com", "s3cret!")["name"] == "Asha"
    assert auth.authenticate("asha@example.com", "wrong") is None
    assert auth.authenticate("nobody@example.com", "s3cret!") is None
    assert auth.authenticate("", "") is None
