"""
Authenticated user as seen by the RBAC cores.

Users are created and updated by the Users collaborator; the cores only
read ``role`` and ``is_active``.
"""

from dataclasses import dataclass
from typing import Any

from .rbac import Role


@dataclass
class AuthUser:
    """
    Platform-agnostic authenticated user representation.

    ``role`` keeps whatever the Users collaborator stored. Use
    ``resolved_role`` to get a ``Role`` (None if unrecognized).
    """
    id: str
    username: str = ""
    full_name: str | None = None
    email: str | None = None
    role: Role | str = Role.CASHIER
    is_active: bool = True
    branch_id: str | None = None
    created_by: str | None = None

    @property
    def resolved_role(self) -> Role | None:
        """Get the user's role as a ``Role``, or None if unrecognized."""
        return Role.parse(self.role)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        role = self.resolved_role
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "email": self.email,
            "role": role.value if role else str(self.role),
            "is_active": self.is_active,
            "branch_id": self.branch_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthUser":
        """
        Create AuthUser from a Users collaborator record.

        Accepts both snake_case and camelCase keys.
        """
        return cls(
            id=str(data.get("id", "")),
            username=data.get("username", ""),
            full_name=data.get("full_name", data.get("fullName")),
            email=data.get("email"),
            role=data.get("role", Role.CASHIER),
            is_active=bool(data.get("is_active", data.get("isActive", True))),
            branch_id=data.get("branch_id", data.get("branchId")),
            created_by=data.get("created_by", data.get("createdBy")),
        )
