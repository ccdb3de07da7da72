"""Session lifetime policy.

Sessions earn a longer lifetime the more often they are read, so one-off
visitors are collected quickly while regular users stay logged in.
Crawlers get a fixed, very short lifetime.
"""

import re

BOT_PATTERN = re.compile(r"bot|crawl|slurp|spider|mediapartners", re.IGNORECASE)

BOT_LIFETIME = 30  # seconds
MAX_LIFETIME = 2_592_000  # 30 days in seconds

# reads ** 3 * 30 passes MAX_LIFETIME well before this
_SATURATION_READS = 100


def is_bot(user_agent: str) -> bool:
    """Whether the user agent looks like a crawler."""
    return BOT_PATTERN.search(user_agent) is not None


def compute_lifetime(reads: int, user_agent: str) -> int:
    """Lifetime in seconds for a session read ``reads`` times.

    Args:
        reads: Read count of the session, including the current request
        user_agent: Client user agent ("" when unknown)

    Raises:
        ValueError: If reads is negative
    """
    if reads < 0:
        raise ValueError(f"reads must be >= 0, got {reads}")

    if is_bot(user_agent):
        return BOT_LIFETIME

    if reads > _SATURATION_READS:
        return MAX_LIFETIME

    return min(reads**3 * 30, MAX_LIFETIME)
