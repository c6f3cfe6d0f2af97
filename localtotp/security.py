import hashlib
import hmac

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from localtotp.config import load_config

HASH_MODES = ("argon2id", "bcrypt", "sha256")

argon2_hasher = PasswordHasher(time_cost=1, memory_cost=65536, parallelism=1, hash_len=32)


def _apply_pepper(password: str, pepper: str) -> bytes:
    combo = password + pepper
    return combo.encode()


def hash_password(password: str, salt: str, pepper: str, mode: str) -> str:
    payload = _apply_pepper(password, pepper)
    if mode == "sha256":
        return hashlib.sha256(salt.encode() + payload).hexdigest()
    if mode == "bcrypt":
        return bcrypt.hashpw(payload, bcrypt.gensalt(rounds=12)).decode()
    if mode == "argon2id":
        return argon2_hasher.hash(salt + password + pepper)
    raise ValueError(f"Unsupported hash mode: {mode}")


def verify_password(password: str, salt: str, pepper: str, stored_hash: str, mode: str) -> bool:
    payload = _apply_pepper(password, pepper)
    if mode == "sha256":
        calc = hashlib.sha256(salt.encode() + payload).hexdigest()
        return hmac.compare_digest(calc, stored_hash)
    if mode == "bcrypt":
        try:
            return bcrypt.checkpw(payload, stored_hash.encode())
        except ValueError:
            return False
    if mode == "argon2id":
        try:
            return argon2_hasher.verify(stored_hash, salt + password + pepper)
        except (VerificationError, InvalidHashError):
            return False
    raise ValueError(f"Unsupported hash mode: {mode}")


def get_pepper() -> str:
    return load_config().pepper
