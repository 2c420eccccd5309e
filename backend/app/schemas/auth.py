"""Pydantic schemas for auth endpoints."""

from pydantic import BaseModel, Field


class RegisterBody(BaseModel):
    email: str
    password: str
    display_name: str | None = Field(None, max_length=128)
    device_id: str | None = Field(None, max_length=128)


class LoginBody(BaseModel):
    email: str
    password: str
    device_id: str | None = Field(None, max_length=128)  # one refresh session per user and device


class RefreshBody(BaseModel):
    refresh_token: str


class LogoutBody(BaseModel):
    refresh_token: str = ""


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expiry_duration: int  # seconds until access token expires
