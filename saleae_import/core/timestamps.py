"""Time unit helpers shared by the binary and CSV readers."""

import math

from .errors import SaleaeParseError

NS_PER_SECOND = 1_000_000_000

# Timestamps are stored as signed 64-bit nanoseconds
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def seconds_to_ns(seconds: float) -> int:
    """
    Convert seconds to integer nanoseconds.

    Rounds half away from zero.

    Args:
        seconds: Time in seconds

    Returns:
        Time in nanoseconds

    Raises:
        SaleaeParseError: If ``seconds`` is NaN, infinite, or outside the
            signed 64-bit nanosecond range
    """
    if not math.isfinite(seconds):
        raise SaleaeParseError(f"Non-finite timestamp {seconds!r}")
    scaled = seconds * 1e9
    whole = math.trunc(scaled)
    # Exact: whole is within a factor of two of scaled
    frac = scaled - whole
    if frac >= 0.5:
        whole += 1
    elif frac <= -0.5:
        whole -= 1
    if not INT64_MIN <= whole <= INT64_MAX:
        raise SaleaeParseError(f"Timestamp {seconds!r} s out of range")
    return whole
