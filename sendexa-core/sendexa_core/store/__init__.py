"""
Verification Code Stores
========================
In-memory, Redis and SQL backends for per-phone verification codes.
"""

from .base import CodeStore
from .in_memory import InMemoryCodeStore
from .redis_store import RedisCodeStore, FAILED_ATTEMPT_SCRIPT, MARK_USED_SCRIPT, MARK_UNDELIVERED_SCRIPT
from .sql_store import SQLCodeStore, VerificationCodeRow

__all__ = [
    "CodeStore",
    "InMemoryCodeStore",
    "RedisCodeStore",
    "SQLCodeStore",
    "VerificationCodeRow",
    # Scripts
    "FAILED_ATTEMPT_SCRIPT",
    "MARK_USED_SCRIPT",
    "MARK_UNDELIVERED_SCRIPT",
]
