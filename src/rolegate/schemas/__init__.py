"""Pydantic schemas for collaborator input."""

from .user import ANONYMOUS, UserContext

__all__ = ["ANONYMOUS", "UserContext"]
