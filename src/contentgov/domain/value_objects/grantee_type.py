"""Grantee types."""

from enum import StrEnum


class GranteeType(StrEnum):
    """Subject of a permission grant."""

    USER = "user"
    GROUP = "group"
