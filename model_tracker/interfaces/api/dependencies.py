"""FastAPI dependency utilities."""

from collections.abc import AsyncGenerator, Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from model_tracker.application.tracker import get_tracker
from model_tracker.infrastructure.database import get_db
from model_tracker.infrastructure.identity import GuardRegistry, get_guard_registry
from model_tracker.infrastructure.repositories import TrackedRepository
from model_tracker.infrastructure.security import decode_access_token, user_id_from_claims

API_GUARD = "api"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)


def get_identity_provider() -> GuardRegistry:
    """Return the guard registry requests are bound to."""

    return get_guard_registry()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def bind_api_user(
    token: str | None = Depends(oauth2_scheme),
    registry: GuardRegistry = Depends(get_identity_provider),
) -> AsyncGenerator[int | None, None]:
    """Authenticate the bearer token's user on the ``api`` guard for the request.

    Requests without a token stay anonymous; records they write carry no
    ``*_by`` attribution.
    """

    if token is None:
        yield None
        return

    try:
        user_id = user_id_from_claims(decode_access_token(token))
    except ValueError as exc:
        raise _unauthorized() from exc

    guard = registry.guard(API_GUARD)
    guard.login(user_id)
    try:
        yield user_id
    finally:
        guard.logout()


def tracked_repository_dependency(
    model: type, **repository_options
) -> Callable[..., Generator[TrackedRepository, None, None]]:
    """Return a dependency yielding a :class:`TrackedRepository` for ``model``."""

    def dependency(db: Session = Depends(get_db)) -> Generator[TrackedRepository, None, None]:
        yield TrackedRepository(db, model, tracker=get_tracker(), **repository_options)

    return dependency


__all__ = [
    "API_GUARD",
    "bind_api_user",
    "get_identity_provider",
    "oauth2_scheme",
    "tracked_repository_dependency",
]
