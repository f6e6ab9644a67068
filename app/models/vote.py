import enum
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, UniqueConstraint, CheckConstraint, Index, func
from sqlalchemy.orm import relationship, backref
from app.db.base import Base

class VoteKind(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"

class Vote(Base):
    """Append-only ledger row. One per (session, participant, movie)."""
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id"), nullable=False)
    vote = Column(String(10), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    session = relationship("VotingSession", backref=backref("votes", cascade="all, delete-orphan"))
    participant = relationship("Participant")
    movie = relationship("Movie")

    __table_args__ = (
        UniqueConstraint('session_id', 'participant_id', 'movie_id', name='uq_vote_session_participant_movie'),
        CheckConstraint("vote IN ('like', 'dislike')", name='ck_vote_kind'),
        Index('ix_vote_session_movie_kind', 'session_id', 'movie_id', 'vote'),
    )
