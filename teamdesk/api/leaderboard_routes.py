from fastapi import APIRouter, Depends, Query

from teamdesk.api.deps import RequestContext, get_request_context, service_errors
from teamdesk.schemas.leaderboard import LEADERBOARD_PATTERN, LeaderboardEntry, LeaderboardResponse
from teamdesk.security import ensure_permission
from teamdesk.services.leaderboard_service import LEADS_BOARD, LeaderboardService

router = APIRouter(prefix="/v1/leaderboard", tags=["leaderboard"])
leaderboard_service = LeaderboardService()


@router.get("", response_model=LeaderboardResponse)
def get_leaderboard(
    board: str = Query(default="members", pattern=LEADERBOARD_PATTERN),
    domain: str | None = Query(default=None),
    ctx: RequestContext = Depends(get_request_context),
) -> LeaderboardResponse:
    with service_errors(ctx.db, "Failed to build leaderboard"):
        if board == LEADS_BOARD:
            ensure_permission(ctx.principal, "leaderboard:leads")
        standings = leaderboard_service.standings(ctx.db, board, domain)
    items = [
        LeaderboardEntry(
            rank=position,
            user_id=standing.principal.id,
            email=standing.principal.email,
            name=standing.principal.name,
            domains=list(standing.principal.domains),
            average_score=standing.average_score,
            rated_count=standing.rated_count,
        )
        for position, standing in enumerate(standings, start=1)
    ]
    return LeaderboardResponse(board=board, domain=domain, items=items, count=len(items))
