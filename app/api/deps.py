"""FastAPI dependency providers: one DB session and fresh services per request."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.services.session_service import SessionService
from app.services.vote_service import VoteService
from app.services.match_service import MatchService
from app.services.query_service import SessionQueryService


def get_session_service(db: AsyncSession = Depends(get_db)) -> SessionService:
    return SessionService(db)


def get_vote_service(db: AsyncSession = Depends(get_db)) -> VoteService:
    return VoteService(db)


def get_match_service(db: AsyncSession = Depends(get_db)) -> MatchService:
    return MatchService(db)


def get_query_service(db: AsyncSession = Depends(get_db)) -> SessionQueryService:
    return SessionQueryService(db)
