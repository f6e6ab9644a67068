from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from collections import defaultdict
from typing import Dict, Iterable, List, Optional
import logging
from app.models.movie import Movie
from app.models.participant import Participant
from app.models.membership import SessionMembership
from app.models.vote import Vote, VoteKind
from app.schemas.match import MatchView
from app.services.session_service import SessionService
from app.config.constants import MIN_LIKES_FOR_MATCH, MIN_PARTICIPANTS_FOR_MATCH
from app.utils.clock import Clock

logger = logging.getLogger(__name__)


def sort_liker_names(names: Iterable[str]) -> List[str]:
    return sorted(set(names), key=lambda n: (n.casefold(), n))


def build_match(
    movie: Movie,
    liker_names: Iterable[str],
    participant_count: int,
    min_likes: int = MIN_LIKES_FOR_MATCH,
) -> Optional[MatchView]:
    """
    Decide whether ``movie`` is a match.

    ``liker_names`` holds one entry per like vote, in any order. The
    result depends only on that multiset and ``participant_count``, so the
    same votes always give the same answer however they arrived.
    """
    if participant_count < MIN_PARTICIPANTS_FOR_MATCH:
        return None

    names = list(liker_names)
    like_count = len(names)
    if like_count < min_likes:
        return None

    return MatchView(
        movie_id=movie.id,
        title=movie.title,
        poster_url=movie.poster_url,
        year=movie.year,
        genre=movie.genre,
        like_count=like_count,
        users_who_liked=sort_liker_names(names),
    )


class MatchService:
    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None):
        self.session = session
        self.sessions = SessionService(session, clock=clock)

    async def count_participants(self, session_id: int) -> int:
        stmt = select(func.count(SessionMembership.id)).where(SessionMembership.session_id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def evaluate_match(self, session_id: int, movie_id: int) -> Optional[MatchView]:
        """
        Point-in-time match check for one movie.

        Holds no "already announced" state: calling it again on the same
        votes returns the same match. Runs on whatever transaction the
        caller's session has open.
        """
        participant_count = await self.count_participants(session_id)
        if participant_count < MIN_PARTICIPANTS_FOR_MATCH:
            return None

        movie = await self.session.get(Movie, movie_id)
        if not movie:
            return None

        stmt = (
            select(Participant.display_name)
            .join(Vote, Vote.participant_id == Participant.id)
            .where(
                Vote.session_id == session_id,
                Vote.movie_id == movie_id,
                Vote.vote == VoteKind.LIKE.value,
            )
        )
        result = await self.session.execute(stmt)
        match = build_match(movie, result.scalars().all(), participant_count)
        if match:
            logger.info(f"Movie {movie_id} matched in session {session_id} with {match.like_count} likes")
        return match

    async def list_matches(self, session_id: int) -> List[MatchView]:
        """All matches of a live session, most liked first, then by title."""
        await self.sessions.get_active_session(session_id)
        participant_count = await self.count_participants(session_id)

        stmt = (
            select(Movie, Participant.display_name)
            .join(Vote, Vote.movie_id == Movie.id)
            .join(Participant, Participant.id == Vote.participant_id)
            .where(Vote.session_id == session_id, Vote.vote == VoteKind.LIKE.value)
        )
        result = await self.session.execute(stmt)

        movies: Dict[int, Movie] = {}
        likers: Dict[int, List[str]] = defaultdict(list)
        for movie, name in result.all():
            movies[movie.id] = movie
            likers[movie.id].append(name)

        matches = []
        for movie_id, names in likers.items():
            match = build_match(movies[movie_id], names, participant_count)
            if match:
                matches.append(match)

        matches.sort(key=lambda m: (-m.like_count, m.title, m.movie_id))
        return matches
