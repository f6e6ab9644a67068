from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List
from app.config.constants import MAX_DISPLAY_NAME_LENGTH, MAX_SESSION_CODE_FIELD_LENGTH


def clean_display_name(v: str) -> str:
    v = " ".join((v or "").split())
    if not v:
        raise ValueError("Name is required")
    if len(v) > MAX_DISPLAY_NAME_LENGTH:
        raise ValueError(f"Name must be at most {MAX_DISPLAY_NAME_LENGTH} characters")
    return v


def normalize_session_code(v: str) -> str:
    v = (v or "").strip().upper()
    if not v:
        raise ValueError("Session code is required")
    if len(v) > MAX_SESSION_CODE_FIELD_LENGTH or not v.isalnum():
        raise ValueError("Malformed session code")
    return v


class CreateSessionRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_display_name(v)


class JoinSessionRequest(BaseModel):
    code: str
    name: str

    @field_validator("code")
    @classmethod
    def validate_code(cls, v):
        return normalize_session_code(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return clean_display_name(v)


class CreatedSession(BaseModel):
    code: str
    participant_id: int
    session_id: int


class JoinedSession(BaseModel):
    code: str
    participant_id: int
    session_id: int


class SessionView(BaseModel):
    """Roster of a live session, in join order."""
    participant_count: int
    participants: List[str] = Field(default_factory=list)


class SessionContext(BaseModel):
    """Everything a returning member needs to re-enter a live session."""
    session_id: int
    code: str
    created_at: datetime
    expires_at: datetime
    participant_id: int
    participant_name: str
    participant_count: int
    participants: List[str] = Field(default_factory=list)
