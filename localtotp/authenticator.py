import binascii
import time
from typing import Callable

from localtotp import db
from localtotp.config import Config, TotpParameters
from localtotp.models import User
from localtotp.security import verify_password
from localtotp.totp import decode_secret, generate_code, split_credential, verify_code


class LocalAuthenticator:
    """Password check against the hash stored on the user record."""

    type_name = "local"
    description = "Local Database"

    def __init__(
        self,
        config: Config,
        lookup_user: Callable[[str], User | None] = db.get_user,
        password_verifier: Callable[[str, str, str, str, str], bool] = verify_password,
    ):
        self.config = config
        self._lookup_user = lookup_user
        self._password_verifier = password_verifier

    def get_user(self, username: str) -> User | None:
        return self._lookup_user(username)

    def verify_user_password(self, user: User, password: str) -> bool:
        if not password:
            return False
        hash_mode = user.hash_mode or self.config.default_hash_mode
        return self._password_verifier(password, user.salt, self.config.pepper, user.password, hash_mode)

    def authenticate(self, username: str, password: str) -> bool:
        user = self.get_user(username)
        if user is None:
            return False
        return self.verify_user_password(user, password)


class TotpAuthenticator(LocalAuthenticator):
    """Local password authentication guarded by an RFC 6238 token.

    The submitted password is the current token code immediately followed by
    the account password. The token must match one of the moments inside the
    grace period and the remaining password must pass the local check.
    """

    type_name = "totp"
    description = "Local + Timebased One Time Password"

    def __init__(
        self,
        config: Config,
        lookup_user: Callable[[str], User | None] = db.get_user,
        password_verifier: Callable[[str, str, str, str, str], bool] = verify_password,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(config, lookup_user, password_verifier)
        self._clock = clock

    @property
    def params(self) -> TotpParameters:
        return self.config.totp

    def now(self) -> int:
        return int(self._clock())

    def authenticate(self, username: str, password: str) -> bool:
        user = self.get_user(username)
        if user is None or not user.otp_seed:
            return False

        params = self.params
        if not params.is_usable():
            return False

        parts = split_credential(password, params.code_length)
        if parts is None:
            return False
        code, user_password = parts

        try:
            secret = decode_secret(user.otp_seed)
        except (binascii.Error, ValueError, TypeError):
            return False

        if not verify_code(secret, code, params, self.now()):
            return False
        return self.verify_user_password(user, user_password)

    def generate_current_code(self, base32_secret: str) -> str:
        params = self.params
        if not params.is_usable():
            raise ValueError(f"Unusable TOTP parameters: {params}")
        return generate_code(self.now(), params.step_seconds, decode_secret(base32_secret), params.code_length)
