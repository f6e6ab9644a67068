from pydantic import BaseModel, Field
from typing import Optional
from app.models.vote import VoteKind
from app.schemas.match import MatchView


class VoteRequest(BaseModel):
    session_id: int = Field(..., gt=0)
    participant_id: int = Field(..., gt=0)
    movie_id: int = Field(..., gt=0)
    vote: VoteKind


class VoteResult(BaseModel):
    match: Optional[MatchView] = None
