from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class MovieOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    poster_url: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None


class VoteStats(BaseModel):
    likes: int = 0
    dislikes: int = 0


class MovieWithStats(MovieOut):
    stats: VoteStats = Field(default_factory=VoteStats)
