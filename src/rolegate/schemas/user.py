"""
User schemas.

The identity provider owns the user record; the guard only reads the
fields below.
"""

from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rolegate.core.auth import Permission, Role, coerce_permissions


class UserContext(BaseModel):
    """
    Authenticated user state as supplied by the identity layer.

    permissions accepts the identity provider's shapes:
        ["pos:read"]
        [{"module": "pos", "action": "read"}]
        [{"module": "pos", "actions": ["read", "create"]}]
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str | None = None
    role: Role | None = None
    permissions: frozenset[Permission] = Field(default_factory=frozenset)
    is_authenticated: bool = False
    is_loading: bool = False

    @field_validator("permissions", mode="before")
    @classmethod
    def parse_permissions(cls, v: Any) -> frozenset[Permission]:
        return coerce_permissions(v)

    @model_validator(mode="after")
    def check_role(self) -> "UserContext":
        if self.is_authenticated and self.role is None:
            raise ValueError("An authenticated user must have a role")
        return self

    @property
    def key(self) -> str:
        """Per-user key for stored values."""
        return self.id or "anonymous"


ANONYMOUS = UserContext()
