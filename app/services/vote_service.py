import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.vote import Vote, VoteKind
from app.schemas.match import MatchView
from app.schemas.vote import VoteResult
from app.services.session_service import SessionService
from app.services.catalog_service import CatalogService
from app.services.match_service import MatchService
from app.db.transaction import write_transaction, retry_on_write_conflict
from app.core.exceptions import InvalidInputError, NotFoundError, ConflictError
from app.config.constants import MOVIE_NOT_FOUND_MESSAGE, ALREADY_VOTED_MESSAGE
from app.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

VOTE_UNIQUE_CONSTRAINT = "uq_vote_session_participant_movie"


class VoteService:
    """
    Append-only vote ledger.

    A participant gets exactly one vote per movie per session. The unique
    constraint on ``votes`` is what enforces it; the lookup before the
    insert only gives the common case a clean error without a failed
    statement.
    """

    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None):
        self.session = session
        self.clock = clock or utcnow
        self.sessions = SessionService(session, clock=self.clock)
        self.catalog = CatalogService(session)
        self.matches = MatchService(session, clock=self.clock)

    async def has_voted(self, session_id: int, participant_id: int, movie_id: int) -> bool:
        stmt = select(Vote.id).where(
            Vote.session_id == session_id,
            Vote.participant_id == participant_id,
            Vote.movie_id == movie_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def register_vote(self, session_id: int, participant_id: int, movie_id: int, vote: str) -> VoteResult:
        """
        Record a vote and, for likes, evaluate the movie for a match.

        Guards run in order: membership of a live session (``UnauthorizedError``),
        movie in the catalog (``NotFoundError``), no earlier vote
        (``ConflictError``). Insert and match evaluation share one
        transaction, so the returned match reflects exactly the committed
        state. A lost serialization race reruns the whole transaction, so a
        duplicate committed concurrently surfaces as ``ConflictError``.
        """
        try:
            kind = VoteKind(vote)
        except ValueError as e:
            raise InvalidInputError(f"Invalid vote type: {vote}") from e

        match = await retry_on_write_conflict(
            "register_vote",
            lambda: self._record_vote(session_id, participant_id, movie_id, kind),
        )

        logger.info(f"Vote {kind.value} on movie {movie_id} by participant {participant_id} in session {session_id}")
        return VoteResult(match=match)

    async def _record_vote(
        self, session_id: int, participant_id: int, movie_id: int, kind: VoteKind
    ) -> Optional[MatchView]:
        match = None
        async with write_transaction(self.session, "register_vote"):
            await self.sessions.require_membership(session_id, participant_id)

            movie = await self.catalog.get_movie(movie_id)
            if not movie:
                raise NotFoundError(MOVIE_NOT_FOUND_MESSAGE)

            if await self.has_voted(session_id, participant_id, movie_id):
                raise ConflictError(ALREADY_VOTED_MESSAGE)

            self.session.add(Vote(
                session_id=session_id,
                participant_id=participant_id,
                movie_id=movie_id,
                vote=kind.value,
                created_at=self.clock(),
            ))
            try:
                await self.session.flush()
            except IntegrityError as e:
                if VOTE_UNIQUE_CONSTRAINT not in str(e.orig):
                    raise
                logger.info(
                    f"Concurrent duplicate vote rejected: session={session_id} "
                    f"participant={participant_id} movie={movie_id}"
                )
                raise ConflictError(ALREADY_VOTED_MESSAGE) from e

            if kind == VoteKind.LIKE:
                match = await self.matches.evaluate_match(session_id, movie_id)
        return match
