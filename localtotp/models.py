from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)
    salt = Column(String, nullable=False)
    otp_seed = Column(String, nullable=True)
    hash_mode = Column(String, nullable=False)


class User(BaseModel):
    id: int | None = None
    username: str
    password: str
    salt: str
    otp_seed: str | None = None
    hash_mode: str | None = Field(default=None)

    @classmethod
    def from_orm_model(cls, orm_user: UserModel) -> "User":
        return cls(
            id=orm_user.id,
            username=orm_user.username,
            password=orm_user.password,
            salt=orm_user.salt,
            otp_seed=orm_user.otp_seed,
            hash_mode=orm_user.hash_mode,
        )


class RegisterRequest(BaseModel):
    username: str
    password: str = Field(min_length=6)
    hash_mode: str | None = Field(default=None, description="argon2id|bcrypt|sha256")


class RegisterResponse(BaseModel):
    result: str
    otp_seed: str


class LoginRequest(BaseModel):
    username: str
    password: str = Field(description="OTP code followed by the account password")


class LoginResponse(BaseModel):
    result: str


class TokenCheckResponse(BaseModel):
    username: str
    code: str


class OptionsValidateRequest(BaseModel):
    values: dict[str, Any]


class OptionsValidateResponse(BaseModel):
    errors: dict[str, list[str]]
