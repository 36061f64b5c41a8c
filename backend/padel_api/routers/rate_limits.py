from fastapi import APIRouter, Request

from ..exceptions import ProblemDetail, http_problem
from ..rate_limit import get_client_identifier, get_rate_limiter
from ..schemas import RateLimitStatusOut

router = APIRouter(
    prefix="/rate-limits",
    tags=["rate-limits"],
    responses={404: {"model": ProblemDetail}},
)


# GET /api/v0/rate-limits/match
@router.get("/{limit_type}", response_model=RateLimitStatusOut)
def rate_limit_status(limit_type: str, request: Request):
    """Remaining budget for the caller; does not consume a request."""

    store = get_rate_limiter(request)
    if limit_type not in store.limits:
        raise http_problem(404, f"unknown rate limit type '{limit_type}'", "rate_limit_type_unknown")
    status = store.status(get_client_identifier(request), limit_type)
    return RateLimitStatusOut(
        type=limit_type,
        limit=status.limit,
        remaining=status.remaining,
        reset=status.reset,
    )
