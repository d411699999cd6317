"""Platform users as seen by the governance core."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    EXPLORATEUR = "explorateur"
    CONTRIBUTEUR = "contributeur"
    EDITEUR = "editeur"


class User(BaseModel):
    id: str
    email: str                              # Identity supplied by the auth provider
    name: Optional[str] = None
    role: UserRole = UserRole.EXPLORATEUR

    @property
    def display_name(self) -> str:
        """Name, else the local part of the email, else a generic author label."""
        if self.name:
            return self.name
        local_part = self.email.split("@")[0] if self.email else ""
        return local_part or "Auteur"
