import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, TIMESTAMP, Index, func
from app.db.base import Base

class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"

class VotingSession(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True)
    code = Column(String(12), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('ix_session_code_expires', 'code', 'expires_at'),
    )

    def status_at(self, now: datetime) -> SessionStatus:
        # Expiry is lazy: derived from the timestamp on every read, never stored
        if now < self.expires_at:
            return SessionStatus.ACTIVE
        return SessionStatus.EXPIRED

    def is_active(self, now: datetime) -> bool:
        return self.status_at(now) == SessionStatus.ACTIVE
