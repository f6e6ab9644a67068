"""Session endpoints: create, join, and the read models clients poll."""
from fastapi import APIRouter, Depends, Query
from app.api.deps import get_session_service, get_match_service, get_query_service
from app.schemas.session import CreateSessionRequest, JoinSessionRequest
from app.services.session_service import SessionService
from app.services.match_service import MatchService
from app.services.query_service import SessionQueryService
from app.config.constants import POLL_INTERVAL_SECONDS

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("", status_code=201)
async def create_session(
    req: CreateSessionRequest,
    service: SessionService = Depends(get_session_service),
):
    created = await service.create_session(req.name)
    return {"success": True, **created.model_dump()}


@router.post("/join")
async def join_session(
    req: JoinSessionRequest,
    service: SessionService = Depends(get_session_service),
):
    joined = await service.join_session(req.code, req.name)
    return {"success": True, **joined.model_dump()}


@router.get("/by-code/{code}")
async def resume_session(
    code: str,
    participant_id: int = Query(..., gt=0),
    service: SessionService = Depends(get_session_service),
):
    """Session context for a returning member; declared before the ``/{session_id}`` routes."""
    context = await service.resume_session(code, participant_id)
    return {
        "success": True,
        **context.model_dump(mode="json"),
        "poll_interval_seconds": POLL_INTERVAL_SECONDS,
    }


@router.get("/{session_id}/roster")
async def get_session_roster(
    session_id: int,
    service: SessionQueryService = Depends(get_query_service),
):
    roster = await service.get_roster(session_id)
    return {
        "success": True,
        **roster.model_dump(),
        "poll_interval_seconds": POLL_INTERVAL_SECONDS,
    }


@router.get("/{session_id}/movies")
async def list_unvoted_movies(
    session_id: int,
    participant_id: int = Query(..., gt=0),
    service: SessionQueryService = Depends(get_query_service),
):
    movies = await service.list_unvoted_movies(session_id, participant_id)
    return {
        "success": True,
        "movies": [m.model_dump() for m in movies],
        "total": len(movies),
    }


@router.get("/{session_id}/matches")
async def list_matches(
    session_id: int,
    service: MatchService = Depends(get_match_service),
):
    matches = await service.list_matches(session_id)
    return {
        "success": True,
        "matches": [m.model_dump() for m in matches],
        "total_matches": len(matches),
    }
