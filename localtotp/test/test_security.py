import pytest

from localtotp.security import HASH_MODES, hash_password, verify_password


class TestSecurity:
    """Test suite for password hashing"""

    @pytest.mark.parametrize("mode", HASH_MODES)
    def test_hash_and_verify(self, mode):
        stored = hash_password("password123", "salt", "pepper", mode)

        assert stored != "password123"
        assert verify_password("password123", "salt", "pepper", stored, mode) == True
        assert verify_password("password124", "salt", "pepper", stored, mode) == False

    @pytest.mark.parametrize("mode", HASH_MODES)
    def test_pepper_is_applied(self, mode):
        stored = hash_password("password123", "salt", "pepper", mode)
        assert verify_password("password123", "salt", "other", stored, mode) == False

    @pytest.mark.parametrize("mode", ["argon2id", "bcrypt"])
    def test_corrupt_hash_is_a_mismatch(self, mode):
        assert verify_password("password123", "salt", "pepper", "garbage", mode) == False

    def test_unsupported_mode(self):
        with pytest.raises(ValueError, match="Unsupported hash mode"):
            hash_password("password123", "salt", "pepper", "md5")
        with pytest.raises(ValueError, match="Unsupported hash mode"):
            verify_password("password123", "salt", "pepper", "x", "md5")
