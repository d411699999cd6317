"""
Identity collaborators — who is calling, and which platform user that is.

Authentication itself happens elsewhere. The kernel only receives an
opaque identity (the user's email) and looks the user up.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Dict, Iterator, List, Optional, Protocol

from evolution_kernel.models.evolution import UserSummary
from evolution_kernel.models.identity import User


class IdentityProvider(Protocol):
    def current_identity(self) -> Optional[str]:
        ...


class UserDirectory(Protocol):
    def lookup_user(self, identity: str) -> Optional[User]:
        ...

    def get_user(self, user_id: str) -> Optional[User]:
        ...


_current_identity: ContextVar[Optional[str]] = ContextVar(
    "evolution_kernel_identity", default=None
)


@contextmanager
def bind_identity(identity: Optional[str]) -> Iterator[None]:
    """Make ``identity`` the authenticated caller for the enclosed block."""
    token = _current_identity.set(identity)
    try:
        yield
    finally:
        _current_identity.reset(token)


class ContextIdentityProvider:
    """Reads the identity bound with :func:`bind_identity`."""

    def current_identity(self) -> Optional[str]:
        return _current_identity.get()


class InMemoryUserDirectory:
    """
    In-memory user directory for the prototype.
    Production would query the platform's users table.
    """

    def __init__(self, users: Optional[List[User]] = None):
        self._users: Dict[str, User] = {}
        for user in users or []:
            self.add_user(user)

    def add_user(self, user: User) -> None:
        self._users[user.id] = user

    def lookup_user(self, identity: str) -> Optional[User]:
        """Find a user by the identity supplied by the auth provider."""
        for user in self._users.values():
            if user.email == identity:
                return user
        return None

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)


def summarize_user(directory: UserDirectory, user_id: Optional[str]) -> Optional[UserSummary]:
    """Display identity of a referenced user, or None if unknown."""
    if not user_id:
        return None
    user = directory.get_user(user_id)
    if user is None:
        return None
    return UserSummary(id=user.id, email=user.email or "", name=user.display_name)
