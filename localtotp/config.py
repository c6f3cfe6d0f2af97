from dataclasses import dataclass, field, replace
import json
import os

from localtotp.schema import DEFAULTS, OPTION_ALIASES, VALIDATORS, FIELD_VALIDATORS


@dataclass(frozen=True)
class TotpParameters:
    step_seconds: int = DEFAULTS["timeWindow"]
    code_length: int = DEFAULTS["otpLength"]
    grace_seconds: int = DEFAULTS["graceperiod"]

    def is_usable(self) -> bool:
        return (
            self.step_seconds > 0
            and self.code_length in (6, 8)
            and self.grace_seconds >= 0
        )


@dataclass(frozen=True)
class Config:
    db_url: str = "sqlite:///./app.db"
    attempts_log_file: str = "attempts.log"
    pepper: str = "pepper"
    default_hash_mode: str = "argon2id"
    admin_token: str = "526078169"

    totp: TotpParameters = field(default_factory=TotpParameters)


_ATTRIBUTES = {
    "timeWindow": "step_seconds",
    "otpLength": "code_length",
    "graceperiod": "grace_seconds",
}


def parse_totp_parameters(data: dict | None, base: TotpParameters | None = None) -> TotpParameters:
    """Build parameters from a config mapping.

    Accepts the option names (timeWindow, otpLength, graceperiod) and the
    attribute names. Empty values keep the current setting.
    """
    params = base or TotpParameters()
    if not data:
        return params

    updates = {}
    for key, value in data.items():
        option = OPTION_ALIASES.get(key, key)
        if option not in FIELD_VALIDATORS:
            raise ValueError(f"Unknown TOTP option: {key}")
        if value is None or value == "":
            continue
        errors = VALIDATORS[FIELD_VALIDATORS[option]](value)
        if errors:
            raise ValueError(f"{key}: {'; '.join(errors)}")
        updates[_ATTRIBUTES[option]] = int(value)
    return replace(params, **updates)


def load_config(path: str | None = None) -> Config:
    cfg = Config()
    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        updates = {}
        for k, v in data.items():
            if k == "totp":
                updates["totp"] = parse_totp_parameters(v, cfg.totp)
            elif hasattr(cfg, k):
                updates[k] = v
        cfg = replace(cfg, **updates)

    return cfg
