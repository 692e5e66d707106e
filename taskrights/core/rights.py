"""
Rights
Ordered capability levels attached to grants and link shares
"""

from enum import IntEnum

from taskrights.core.exceptions import InvalidRightError


class Right(IntEnum):
    # sentinel for "no grant"; never stored or transmitted
    NONE = -1
    READ = 0
    READ_WRITE = 1
    ADMIN = 2


GRANTABLE = (Right.READ, Right.READ_WRITE, Right.ADMIN)


def _coerce(value, allowed) -> Right:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRightError(value)
    if value not in allowed:
        raise InvalidRightError(value)
    return Right(value)


def validate_right(value) -> Right:
    """Return *value* as a grantable Right or raise InvalidRightError.

    NONE and any negative sentinel are rejected, as is every value above ADMIN.
    """
    return _coerce(value, GRANTABLE)


def compare(a, b) -> int:
    """Three-way comparison: -1 if a < b, 0 if equal, 1 if a > b."""
    a = _coerce(a, tuple(Right))
    b = _coerce(b, tuple(Right))
    return (a > b) - (a < b)


def satisfies(have, want) -> bool:
    return compare(have, want) >= 0
