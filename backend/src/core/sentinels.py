"""
Sentinel for partial appointment edits.

The edit endpoint passes MISSING for every field the request body left out,
so `company_id=None` (unlink the patient's company) stays distinct from a
request that never mentioned the company.
"""

from enum import Enum


class MissingType(Enum):
    """Single-member enum so type checkers can narrow `X | MissingType`."""
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = MissingType.MISSING
