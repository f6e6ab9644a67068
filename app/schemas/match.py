from pydantic import BaseModel, Field
from typing import List, Optional


class MatchView(BaseModel):
    movie_id: int
    title: str
    poster_url: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    like_count: int
    users_who_liked: List[str] = Field(default_factory=list)
