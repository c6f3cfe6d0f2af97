import gc
import importlib.util
import sys
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from localtotp import db
from localtotp.security import verify_password, get_pepper
from localtotp.totp import decode_secret


@pytest.fixture
def temp_db():
    """Create a temporary database for testing"""
    fd, temp_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    try:
        with patch.object(db, 'db_path', temp_path):
            db.init_db(temp_path)
            yield temp_path
    finally:
        # Dispose of SQLAlchemy engine to close all connections
        if db.engine is not None:
            db.engine.dispose()
        gc.collect()

        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except (PermissionError, OSError):
                pass


def test_create_user(temp_db):
    """Test creating a user"""
    db.create_user("testuser", "password")

    user = db.get_user("testuser")
    assert user is not None
    assert user.username == "testuser"
    # Password should be hashed, not plain text
    assert user.password != "password"
    assert user.hash_mode == "argon2id"
    assert verify_password("password", user.salt, get_pepper(), user.password, "argon2id") == True


def test_create_user_provisions_otp_seed(temp_db):
    """Test that new users get a decodable base32 seed"""
    user = db.create_user("testuser", "password", hash_mode="sha256")

    assert user.otp_seed
    assert len(decode_secret(user.otp_seed)) > 0
    assert db.get_user("testuser").otp_seed == user.otp_seed


def test_create_user_without_otp(temp_db):
    db.create_user("testuser", "password", hash_mode="sha256", with_otp=False)
    assert db.get_user("testuser").otp_seed is None


def test_create_user_with_hash_mode_and_pepper(temp_db):
    user = db.create_user("testuser", "password123", hash_mode="bcrypt", pepper="other")

    assert user.hash_mode == "bcrypt"
    assert verify_password("password123", user.salt, "other", user.password, "bcrypt") == True
    assert verify_password("password123", user.salt, get_pepper(), user.password, "bcrypt") == False


def test_get_user_nonexistent(temp_db):
    """Test getting a non-existent user"""
    assert db.get_user("nonexistent") is None


def test_set_otp_seed(temp_db):
    db.create_user("testuser", "password", hash_mode="sha256", with_otp=False)

    assert db.set_otp_seed("testuser", "JBSWY3DPEHPK3PXP") == True
    assert db.get_user("testuser").otp_seed == "JBSWY3DPEHPK3PXP"

    assert db.set_otp_seed("testuser", None) == True
    assert db.get_user("testuser").otp_seed is None


def test_set_otp_seed_unknown_user(temp_db):
    assert db.set_otp_seed("nobody", "JBSWY3DPEHPK3PXP") == False


def test_path_from_url():
    assert db.path_from_url("sqlite:///./app.db") == "app.db"
    assert db.path_from_url("sqlite:///data.db") == "data.db"
    assert db.path_from_url("sqlite:///") == "app.db"


def test_session_requires_init():
    with patch.object(db, 'SessionLocal', None):
        with pytest.raises(RuntimeError, match="Database not initialized"):
            with db.get_session():
                pass


def _load_seed_script():
    path = Path(__file__).resolve().parents[2] / "scripts" / "seed_data.py"
    module_spec = importlib.util.spec_from_file_location("seed_data", path)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_seed_script_reprovisions_otp_seed(temp_db, capsys):
    """Test that the seed script issues a fresh OTP seed for an existing user"""
    old_seed = db.create_user("testuser", "password", hash_mode="sha256").otp_seed
    seed_data = _load_seed_script()

    with patch.object(db, 'init_db'), patch.object(sys, 'argv', ["seed_data.py", "--reprovision", "testuser"]):
        seed_data.main()

    new_seed = db.get_user("testuser").otp_seed
    assert new_seed and new_seed != old_seed
    assert new_seed in capsys.readouterr().out


def test_seed_script_reprovision_unknown_user(temp_db):
    seed_data = _load_seed_script()

    with patch.object(db, 'init_db'), patch.object(sys, 'argv', ["seed_data.py", "--reprovision", "nobody"]):
        with pytest.raises(SystemExit, match="Unknown user"):
            seed_data.main()
