from sqlalchemy import Column, Integer, ForeignKey, TIMESTAMP, UniqueConstraint, func
from sqlalchemy.orm import relationship, backref
from app.db.base import Base

class SessionMembership(Base):
    __tablename__ = "session_participants"

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    joined_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    session = relationship("VotingSession", backref=backref("memberships", cascade="all, delete-orphan"))
    participant = relationship("Participant", backref="memberships")

    __table_args__ = (
        UniqueConstraint('session_id', 'participant_id', name='uq_membership_session_participant'),
    )
