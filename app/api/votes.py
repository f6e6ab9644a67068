"""Vote submission endpoint."""
from fastapi import APIRouter, Depends
from app.api.deps import get_vote_service
from app.schemas.vote import VoteRequest
from app.services.vote_service import VoteService

router = APIRouter(prefix="/api/votes", tags=["votes"])


@router.post("")
async def register_vote(
    req: VoteRequest,
    service: VoteService = Depends(get_vote_service),
):
    """Record a like/dislike. A match crossed by this vote is returned inline."""
    result = await service.register_vote(
        req.session_id, req.participant_id, req.movie_id, req.vote.value
    )
    response = {"success": True, "message": "Vote registered"}
    if result.match:
        response["match"] = result.match.model_dump()
    return response
