import binascii
import time
from fastapi import FastAPI, HTTPException

from localtotp import db
from localtotp.attempt_logger import log_attempt
from localtotp.authenticator import TotpAuthenticator
from localtotp.config import load_config
from localtotp.models import (
    LoginRequest,
    LoginResponse,
    OptionsValidateRequest,
    OptionsValidateResponse,
    RegisterRequest,
    RegisterResponse,
    TokenCheckResponse,
)
from localtotp.schema import configuration_options, validate_options
from localtotp.security import HASH_MODES

app = FastAPI(title="Local TOTP Authentication")

config = load_config("config.json")
authenticator = TotpAuthenticator(config)


@app.on_event("startup")
def startup():
    db.init_db(db.path_from_url(config.db_url))


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/register", response_model=RegisterResponse)
def register(req: RegisterRequest):
    hash_mode = req.hash_mode if req.hash_mode is not None else config.default_hash_mode
    if hash_mode not in HASH_MODES:
        raise HTTPException(status_code=400, detail=f"Unsupported hash mode: {hash_mode}")
    if db.get_user(req.username):
        raise HTTPException(status_code=400, detail="Username already exists")
    user = db.create_user(req.username, req.password, hash_mode, pepper=config.pepper)
    return RegisterResponse(result="created", otp_seed=user.otp_seed)


@app.post("/login", response_model=LoginResponse)
def login(req: LoginRequest):
    start_time = time.perf_counter()
    valid = authenticator.authenticate(req.username, req.password)
    result = "success" if valid else "invalid_credentials"
    log_attempt(
        username=req.username,
        authenticator=authenticator.type_name,
        result=result,
        latency_ms=(time.perf_counter() - start_time) * 1000,
        path=config.attempts_log_file,
    )
    if not valid:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return LoginResponse(result=result)


@app.get("/admin/test_token", response_model=TokenCheckResponse)
def admin_test_token(username: str, admin_token: str):
    if admin_token != config.admin_token:
        raise HTTPException(status_code=403, detail="invalid admin token")
    user = db.get_user(username)
    if user is None or not user.otp_seed:
        raise HTTPException(status_code=404, detail="No OTP seed configured for user")
    try:
        code = authenticator.generate_current_code(user.otp_seed)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=409, detail="Cannot compute a token for the stored OTP seed")
    return TokenCheckResponse(username=username, code=code)


@app.get("/auth/options")
def auth_options():
    return {
        "type": authenticator.type_name,
        "description": authenticator.description,
        "fields": configuration_options(),
    }


@app.post("/auth/options/validate", response_model=OptionsValidateResponse)
def auth_options_validate(req: OptionsValidateRequest):
    return OptionsValidateResponse(errors=validate_options(req.values))
