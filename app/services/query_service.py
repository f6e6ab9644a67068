import logging
import random
from typing import List, Optional
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.movie import Movie
from app.models.vote import Vote, VoteKind
from app.schemas.movie import MovieWithStats, VoteStats
from app.schemas.session import SessionView
from app.services.session_service import SessionService
from app.utils.clock import Clock

logger = logging.getLogger(__name__)


class SessionQueryService:
    """Read-side projections polled by clients."""

    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None, rng: Optional[random.Random] = None):
        self.session = session
        self.sessions = SessionService(session, clock=clock)
        self.rng = rng or random.Random()

    async def list_unvoted_movies(self, session_id: int, participant_id: int) -> List[MovieWithStats]:
        """
        Catalog movies this participant has not voted on yet, with the
        session's like/dislike tallies.

        Order is shuffled per call so participants do not all swipe the
        same sequence.
        """
        await self.sessions.require_membership(session_id, participant_id)

        already_voted = select(Vote.movie_id).where(
            Vote.session_id == session_id,
            Vote.participant_id == participant_id,
        )
        stmt = (
            select(
                Movie,
                func.count(Vote.id).filter(Vote.vote == VoteKind.LIKE.value).label("likes"),
                func.count(Vote.id).filter(Vote.vote == VoteKind.DISLIKE.value).label("dislikes"),
            )
            .outerjoin(Vote, and_(Vote.movie_id == Movie.id, Vote.session_id == session_id))
            .where(Movie.id.not_in(already_voted))
            .group_by(Movie.id)
        )
        result = await self.session.execute(stmt)

        movies = [
            MovieWithStats(
                id=movie.id,
                title=movie.title,
                poster_url=movie.poster_url,
                year=movie.year,
                genre=movie.genre,
                stats=VoteStats(likes=likes or 0, dislikes=dislikes or 0),
            )
            for movie, likes, dislikes in result.all()
        ]
        self.rng.shuffle(movies)
        return movies

    async def get_participants(self, session_id: int) -> List[str]:
        await self.sessions.get_active_session(session_id)
        return await self.sessions.list_participant_names(session_id)

    async def get_roster(self, session_id: int) -> SessionView:
        return await self.sessions.get_session_view(session_id)
