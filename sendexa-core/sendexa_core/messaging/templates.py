"""
Message Templates
=================
Renders the SMS body that carries a verification code.
"""

from typing import Tuple


def describe_ttl(ttl_seconds: int) -> Tuple[int, str]:
    """
    Express a TTL as (amount, duration) for message text.

    Whole hours are shown in hours, everything else in minutes
    (rounded up, never below one).
    """
    if ttl_seconds >= 3600 and ttl_seconds % 3600 == 0:
        hours = ttl_seconds // 3600
        return hours, "hour" if hours == 1 else "hours"

    minutes = max(1, -(-ttl_seconds // 60))
    return minutes, "minute" if minutes == 1 else "minutes"


def render_otp_message(template: str, code: str, ttl_seconds: int) -> str:
    """
    Fill ``{code}``, ``{amount}`` and ``{duration}`` in a message template.

    Args:
        template: Message template
        code: Plain verification code
        ttl_seconds: Code lifetime

    Returns:
        Message body
    """
    amount, duration = describe_ttl(ttl_seconds)
    return (
        template
        .replace("{code}", code)
        .replace("{amount}", str(amount))
        .replace("{duration}", duration)
    )
