import re
from typing import Any, Callable

DEFAULTS = {
    "timeWindow": 30,
    "otpLength": 6,
    "graceperiod": 10,
}

OPTION_ALIASES = {
    "step_seconds": "timeWindow",
    "code_length": "otpLength",
    "grace_seconds": "graceperiod",
}

SUPPORTED_CODE_LENGTHS = (6, 8)

_DIGITS = re.compile(r"[0-9]+")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _is_non_negative_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, str):
        return _DIGITS.fullmatch(value) is not None
    return False


def validate_token_length(value: Any) -> list[str]:
    if isinstance(value, bool) or str(value) not in {str(n) for n in SUPPORTED_CODE_LENGTHS}:
        return ["Only token lengths of 6 or 8 characters are supported"]
    return []


def validate_time_window(value: Any) -> list[str]:
    if not _is_empty(value) and not _is_non_negative_int(value):
        return ["Please enter a valid time window in seconds"]
    return []


def validate_grace_period(value: Any) -> list[str]:
    if not _is_empty(value) and not _is_non_negative_int(value):
        return ["Please enter a valid grace period in seconds"]
    return []


VALIDATORS: dict[str, Callable[[Any], list[str]]] = {
    "token_length": validate_token_length,
    "time_window": validate_time_window,
    "grace_period": validate_grace_period,
}

FIELD_VALIDATORS = {
    "otpLength": "token_length",
    "timeWindow": "time_window",
    "graceperiod": "grace_period",
}


def configuration_options() -> dict[str, dict]:
    """Describe the configurable TOTP options.

    Each entry carries the display name, field type, default, help text and
    the name of its validator in VALIDATORS.
    """
    return {
        "otpLength": {
            "name": "Token length",
            "type": "dropdown",
            "default": DEFAULTS["otpLength"],
            "options": {str(n): str(n) for n in SUPPORTED_CODE_LENGTHS},
            "help": "Token length to use",
            "validate": FIELD_VALIDATORS["otpLength"],
        },
        "timeWindow": {
            "name": "Time window",
            "type": "text",
            "default": None,
            "help": "The time period in which the token will be valid,"
            " default is 30 seconds (google authenticator)",
            "validate": FIELD_VALIDATORS["timeWindow"],
        },
        "graceperiod": {
            "name": "Grace period",
            "type": "text",
            "default": None,
            "help": "Time in seconds in which this server and the token may differ,"
            " default is 10 seconds. Set higher for a less secure easier match.",
            "validate": FIELD_VALIDATORS["graceperiod"],
        },
    }


def validate_options(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for key, value in values.items():
        option = OPTION_ALIASES.get(key, key)
        validator_name = FIELD_VALIDATORS.get(option)
        if validator_name is None:
            errors[key] = [f"Unknown option: {key}"]
            continue
        messages = VALIDATORS[validator_name](value)
        if messages:
            errors[key] = messages
    return errors
