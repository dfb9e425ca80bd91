"""Environment-variable-based configuration for the ordering engine."""

from __future__ import annotations

import os

CHECK_INVARIANTS: bool = os.environ.get("ORDERING_CHECK_INVARIANTS", "1").lower() not in (
    "0",
    "false",
    "no",
    "",
)
SUPERSET_ID_PREFIX: str = os.environ.get("ORDERING_SUPERSET_ID_PREFIX", "ss")
