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
    ) -> None:
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class PlayerNotFound(DomainException):
    def __init__(self, name: str) -> None:
        super().__init__(
            status_code=404,
            title="Player not found",
            detail=f"player '{name}' not found",
            code="player_not_found",
        )


class SeriesNotFound(DomainException):
    def __init__(self, name: str) -> None:
        super().__init__(
            status_code=404,
            title="Series not found",
            detail=f"series '{name}' not found",
            code="series_not_found",
        )


class GameNotFound(DomainException):
    def __init__(self, game_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Game not found",
            detail=f"game '{game_id}' not found",
            code="game_not_found",
        )


class PlayerNotInSeries(DomainException):
    def __init__(self, player_name: str, series_name: str) -> None:
        super().__init__(
            status_code=400,
            title="Player not in series",
            detail=f"player '{player_name}' does not belong to series '{series_name}'",
            code="player_not_in_series",
        )


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
