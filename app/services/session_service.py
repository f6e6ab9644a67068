import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.participant import Participant
from app.models.voting_session import VotingSession
from app.models.membership import SessionMembership
from app.schemas.session import (
    CreatedSession,
    JoinedSession,
    SessionContext,
    SessionView,
    clean_display_name,
    normalize_session_code,
)
from app.services.code_generator import allocate_session_code
from app.db.transaction import write_transaction, retry_on_write_conflict
from app.core.config import settings
from app.core.exceptions import InvalidInputError, NotFoundError, UnauthorizedError
from app.config.constants import (
    INVALID_SESSION_MESSAGE,
    INVALID_SESSION_CODE_MESSAGE,
    NOT_A_MEMBER_MESSAGE,
)
from app.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class SessionService:
    """
    Session registry: creation, joining and the liveness guards every other
    service goes through.

    A session is live while ``now < expires_at``. Missing and expired
    sessions are reported identically so callers cannot guess codes.
    """

    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None, rng: Optional[random.Random] = None):
        self.session = session
        self.clock = clock or utcnow
        self.rng = rng

    async def _code_in_use(self, code: str) -> bool:
        stmt = (
            select(VotingSession.id)
            .where(VotingSession.code == code, VotingSession.expires_at > self.clock())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create_session(self, participant_name: str) -> CreatedSession:
        """
        Create a session owned by a new participant.

        Two creators drawing the same code concurrently lose a serialization
        race rather than both committing; the loser reruns and draws again.
        """
        name = _validated_name(participant_name)
        return await retry_on_write_conflict(
            "create_session", lambda: self._create_session(name)
        )

    async def _create_session(self, name: str) -> CreatedSession:
        now = self.clock()

        async with write_transaction(self.session, "create_session"):
            participant = Participant(display_name=name, created_at=now)
            self.session.add(participant)

            code = await allocate_session_code(self._code_in_use, rng=self.rng)
            voting_session = VotingSession(
                code=code,
                created_at=now,
                expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
            )
            self.session.add(voting_session)
            await self.session.flush()

            self.session.add(SessionMembership(
                session_id=voting_session.id,
                participant_id=participant.id,
                joined_at=now,
            ))
            await self.session.flush()

        logger.info(f"Session {voting_session.id} created with code {code} by participant {participant.id}")
        return CreatedSession(code=code, participant_id=participant.id, session_id=voting_session.id)

    async def join_session(self, code: str, participant_name: str) -> JoinedSession:
        name = _validated_name(participant_name)
        code = _validated_code(code)
        return await retry_on_write_conflict(
            "join_session", lambda: self._join_session(code, name)
        )

    async def _join_session(self, code: str, name: str) -> JoinedSession:
        now = self.clock()

        async with write_transaction(self.session, "join_session"):
            voting_session = await self._find_live_session(code, now)
            if not voting_session:
                raise NotFoundError(INVALID_SESSION_CODE_MESSAGE)

            participant = Participant(display_name=name, created_at=now)
            self.session.add(participant)
            await self.session.flush()

            self.session.add(SessionMembership(
                session_id=voting_session.id,
                participant_id=participant.id,
                joined_at=now,
            ))
            await self.session.flush()

        logger.info(f"Participant {participant.id} joined session {voting_session.id}")
        return JoinedSession(code=code, participant_id=participant.id, session_id=voting_session.id)

    async def _find_live_session(self, code: str, now: datetime) -> Optional[VotingSession]:
        stmt = (
            select(VotingSession)
            .where(VotingSession.code == code, VotingSession.expires_at > now)
            .order_by(VotingSession.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def resume_session(self, code: str, participant_id: int) -> SessionContext:
        """
        Re-enter a session from its code, e.g. after a page reload.

        The participant must already be a member of the live session behind
        ``code``; a missing, expired or foreign session is ``UnauthorizedError``.
        """
        code = _validated_code(code)
        now = self.clock()

        stmt = (
            select(VotingSession, Participant.display_name)
            .join(SessionMembership, SessionMembership.session_id == VotingSession.id)
            .join(Participant, Participant.id == SessionMembership.participant_id)
            .where(
                VotingSession.code == code,
                VotingSession.expires_at > now,
                SessionMembership.participant_id == participant_id,
            )
            .order_by(VotingSession.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if not row or not row[0].is_active(now):
            raise UnauthorizedError(NOT_A_MEMBER_MESSAGE)

        voting_session, display_name = row
        names = await self.list_participant_names(voting_session.id)
        return SessionContext(
            session_id=voting_session.id,
            code=voting_session.code,
            created_at=voting_session.created_at,
            expires_at=voting_session.expires_at,
            participant_id=participant_id,
            participant_name=display_name,
            participant_count=len(names),
            participants=names,
        )

    async def get_active_session(self, session_id: int) -> VotingSession:
        voting_session = await self.session.get(VotingSession, session_id)
        if not voting_session or not voting_session.is_active(self.clock()):
            raise NotFoundError(INVALID_SESSION_MESSAGE)
        return voting_session

    async def require_membership(self, session_id: int, participant_id: int) -> VotingSession:
        """Return the live session if the participant belongs to it, else raise ``UnauthorizedError``."""
        stmt = (
            select(VotingSession)
            .join(SessionMembership, SessionMembership.session_id == VotingSession.id)
            .where(
                VotingSession.id == session_id,
                SessionMembership.participant_id == participant_id,
            )
        )
        result = await self.session.execute(stmt)
        voting_session = result.scalar_one_or_none()
        if not voting_session or not voting_session.is_active(self.clock()):
            raise UnauthorizedError(NOT_A_MEMBER_MESSAGE)
        return voting_session

    async def list_participant_names(self, session_id: int) -> List[str]:
        stmt = (
            select(Participant.display_name)
            .join(SessionMembership, SessionMembership.participant_id == Participant.id)
            .where(SessionMembership.session_id == session_id)
            .order_by(SessionMembership.joined_at, SessionMembership.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_session_view(self, session_id: int) -> SessionView:
        await self.get_active_session(session_id)
        names = await self.list_participant_names(session_id)
        return SessionView(participant_count=len(names), participants=names)


def _validated_name(name: str) -> str:
    try:
        return clean_display_name(name)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e


def _validated_code(code: str) -> str:
    try:
        return normalize_session_code(code)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e
