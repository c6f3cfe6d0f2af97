import hashlib
import hmac
import struct

import pyotp

from localtotp.config import TotpParameters


def generate_secret() -> str:
    return pyotp.random_base32()


def decode_secret(base32_secret: str) -> bytes:
    """Decode a stored base32 seed; raises binascii.Error when malformed."""
    return pyotp.TOTP(base32_secret).byte_secret()


def plan_windows(step_seconds: int, grace_seconds: int, now: int) -> list[int]:
    """Timestamps to test so that together they cover now +/- grace_seconds.

    With a grace period larger than the step, probe once per step; otherwise
    probe at -grace, 0 and +grace. A zero grace period means the clocks must
    agree, so only now is tested.
    """
    if grace_seconds < 0:
        raise ValueError(f"grace_seconds must not be negative, got {grace_seconds}")
    if grace_seconds > 0 and step_seconds <= 0:
        raise ValueError(f"step_seconds must be positive, got {step_seconds}")
    if grace_seconds == 0:
        return [now]

    if grace_seconds > step_seconds:
        increment = step_seconds
        offset = -(grace_seconds // step_seconds) * step_seconds
    else:
        increment = grace_seconds
        offset = -grace_seconds

    moments = []
    while offset <= grace_seconds:
        moments.append(now + offset)
        offset += increment
    return moments


def generate_code(timestamp: int, step_seconds: int, secret: bytes, code_length: int) -> str:
    if step_seconds <= 0:
        raise ValueError(f"step_seconds must be positive, got {step_seconds}")

    counter = struct.pack(">Q", int(timestamp // step_seconds))
    digest = hmac.new(secret, counter, hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    value = struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(value % (10 ** code_length)).zfill(code_length)


def split_credential(combined: str, code_length: int) -> tuple[str, str] | None:
    if len(combined) <= code_length:
        return None
    return combined[:code_length], combined[code_length:]


def verify_code(secret: bytes, code: str, params: TotpParameters, now: int) -> bool:
    candidate = code.encode()
    for moment in plan_windows(params.step_seconds, params.grace_seconds, now):
        expected = generate_code(moment, params.step_seconds, secret, params.code_length)
        if hmac.compare_digest(candidate, expected.encode()):
            return True
    return False
