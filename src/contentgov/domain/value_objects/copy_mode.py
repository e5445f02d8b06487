"""Copy modes for permission propagation."""

from enum import StrEnum


class CopyMode(StrEnum):
    """How source grants are reconciled with a target's existing grants."""

    REPLACE = "replace"
    MERGE = "merge"
    ADDITIVE = "additive"
