"""Context-local authentication guards.

Each guard keeps the authenticated user in a :class:`contextvars.ContextVar`,
so concurrent requests, threads and tasks each see their own acting user.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from functools import lru_cache
from typing import Any

from model_tracker.config import get_settings


def user_identifier(user: Any) -> int | None:
    """Return the id of ``user``, which may be an ``int`` or carry an ``id``."""

    if user is None:
        return None
    if isinstance(user, bool):
        raise TypeError("A boolean is not a valid user")
    if isinstance(user, int):
        return user
    user_id = getattr(user, "id", None)
    if user_id is None:
        return None
    return int(user_id)


class Guard:
    """A named authentication context holding at most one user."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._user: ContextVar[Any | None] = ContextVar(f"model_tracker_guard_{name}", default=None)

    def login(self, user: Any) -> None:
        self._user.set(user)

    def logout(self) -> None:
        self._user.set(None)

    def user(self) -> Any | None:
        return self._user.get()

    def id(self) -> int | None:
        return user_identifier(self._user.get())

    def check(self) -> bool:
        return self._user.get() is not None

    @contextmanager
    def acting_as(self, user: Any) -> Iterator[Any]:
        token = self._user.set(user)
        try:
            yield user
        finally:
            self._user.reset(token)


class GuardRegistry:
    """Ordered collection of guards implementing ``IdentityProvider``."""

    def __init__(self, guard_names: Sequence[str], *, default_guard: str | None = None) -> None:
        names = [name for name in dict.fromkeys(guard_names) if name]
        if default_guard is not None and default_guard not in names:
            names.append(default_guard)
        if not names:
            raise ValueError("At least one guard must be configured")
        self._guards = {name: Guard(name) for name in names}
        self.default_guard = default_guard or names[0]

    def list_guards(self) -> list[str]:
        return list(self._guards)

    def guard(self, name: str | None = None) -> Guard:
        """Return the guard called ``name`` (``None`` selects the default guard)."""

        key = name or self.default_guard
        try:
            return self._guards[key]
        except KeyError as exc:
            raise ValueError(f"Authentication guard '{key}' is not defined") from exc

    def resolve_current_user_id(self, guard: str | None = None) -> int | None:
        return self.guard(guard).id()

    def resolve_current_user(self, guard: str | None = None) -> Any | None:
        return self.guard(guard).user()

    def login(self, user: Any, guard: str | None = None) -> None:
        self.guard(guard).login(user)

    def logout(self, guard: str | None = None) -> None:
        self.guard(guard).logout()

    def logout_all(self) -> None:
        for guard in self._guards.values():
            guard.logout()

    @contextmanager
    def acting_as(self, user: Any, guard: str | None = None) -> Iterator[Any]:
        """Authenticate ``user`` on ``guard`` for the duration of the block."""

        with self.guard(guard).acting_as(user) as current:
            yield current


@lru_cache
def get_guard_registry() -> GuardRegistry:
    """Return the process-wide guard registry built from settings."""

    settings = get_settings()
    return GuardRegistry(settings.guards, default_guard=settings.default_guard)


__all__ = ["Guard", "GuardRegistry", "get_guard_registry", "user_identifier"]
