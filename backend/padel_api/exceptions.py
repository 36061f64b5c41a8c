from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code
        self.headers = headers


class NotFound(DomainException):
    """404 for a missing ``resource``; subclasses set the resource name."""

    resource = "resource"

    def __init__(self, identifier: str, *, detail: str | None = None) -> None:
        super().__init__(
            status_code=404,
            title=f"{self.resource.capitalize()} not found",
            detail=detail or f"{self.resource} '{identifier}' not found",
            code=f"{self.resource}_not_found",
        )


class GroupNotFound(NotFound):
    resource = "group"


class PlayerNotFound(NotFound):
    resource = "player"


class PartnershipNotFound(NotFound):
    resource = "partnership"

    def __init__(self, player1_id: str, player2_id: str) -> None:
        super().__init__(
            f"{player1_id}/{player2_id}",
            detail=f"no partnership between '{player1_id}' and '{player2_id}'",
        )


class RateLimitError(DomainException):
    """Raised when a caller exhausts the request budget for a mutation type.

    Carries the same numbers as the failed check so the response can tell the
    user how long to wait.
    """

    def __init__(self, *, limit: int, remaining: int, reset: int, retry_after: int | None) -> None:
        self.limit = limit
        self.remaining = remaining
        self.reset = reset
        self.retry_after = retry_after if retry_after is not None else 60
        super().__init__(
            status_code=429,
            title="Too many requests",
            detail=(
                "Rate limit exceeded. Please wait "
                f"{self.retry_after} seconds before trying again."
            ),
            code="rate_limit_exceeded",
            headers={
                "Retry-After": str(self.retry_after),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": str(remaining),
                "X-RateLimit-Reset": str(reset),
            },
        )

    def to_dict(self) -> dict:
        return {
            "error": self.detail,
            "rateLimitExceeded": True,
            "retryAfter": self.retry_after,
        }


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
