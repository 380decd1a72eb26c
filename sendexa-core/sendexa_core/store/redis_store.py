"""
Redis Code Store
================
Redis-backed code store using Lua scripts for atomic conditional updates.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
import structlog
from redis.exceptions import NoScriptError, RedisError

from sendexa_core.errors import TransientInfraError
from sendexa_core.otp.models import VerificationCode

from .base import CodeStore

logger = structlog.get_logger(__name__)

# Shared guard: the record must be the same issuance and still active.
# ARGV[1] = code_hash, ARGV[2] = now (epoch ms)
_ACTIVE_GUARD = """
local key = KEYS[1]
local fields = redis.call('HMGET', key, 'code_hash', 'used_at', 'validation_attempts', 'max_validation_attempts', 'expires_ms')

if not fields[1] or fields[1] ~= ARGV[1] then
    return {}
end
if fields[2] and fields[2] ~= '' then
    return {}
end
if tonumber(fields[3]) >= tonumber(fields[4]) then
    return {}
end
if tonumber(ARGV[2]) > tonumber(fields[5]) then
    return {}
end
"""

FAILED_ATTEMPT_SCRIPT = _ACTIVE_GUARD + """
redis.call('HINCRBY', key, 'validation_attempts', 1)
return redis.call('HGETALL', key)
"""

# ARGV[3] = used_at (ISO timestamp)
MARK_USED_SCRIPT = _ACTIVE_GUARD + """
redis.call('HSET', key, 'used_at', ARGV[3])
return {1}
"""

# ARGV[1] = code_hash
MARK_UNDELIVERED_SCRIPT = """
if redis.call('HGET', KEYS[1], 'code_hash') ~= ARGV[1] then
    return {}
end
redis.call('HSET', KEYS[1], 'delivery_failed', '1')
return {1}
"""


def _epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


class RedisCodeStore(CodeStore):
    """
    Redis-backed code store.

    One hash per phone. Keys expire ``retention_seconds`` after the code
    itself so that cooldowns and status lookups still see recent codes.
    """

    name = "redis"

    def __init__(self, redis_client, key_prefix: str = "otp:code", retention_seconds: int = 3600):
        """
        Args:
            redis_client: Async Redis client
            key_prefix: Prefix for per-phone keys
            retention_seconds: How long a record outlives its expiry
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.retention_seconds = retention_seconds
        self._script_shas: Dict[str, str] = {}

    def get_key(self, phone: str) -> str:
        return f"{self.key_prefix}:{phone}"

    async def _eval(self, script: str, key: str, *args: Any) -> List[Any]:
        """Run a Lua script by SHA, loading it if Redis does not know it."""
        for _ in range(2):
            sha = self._script_shas.get(script)
            if sha is None:
                sha = await self.redis.script_load(script)
                self._script_shas[script] = sha
            try:
                return await self.redis.evalsha(sha, 1, key, *args)
            except NoScriptError:
                # Script cache was flushed (e.g. Redis restart)
                self._script_shas.pop(script, None)
        raise TransientInfraError(message="Redis script could not be loaded")

    async def get(self, phone: str) -> Optional[VerificationCode]:
        try:
            data = await self.redis.hgetall(self.get_key(phone))
        except RedisError as e:
            logger.error("Code store read failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e

        if not data:
            return None
        return VerificationCode.from_mapping(data)

    async def replace(self, record: VerificationCode) -> None:
        key = self.get_key(record.phone)
        mapping = record.to_mapping()
        mapping["expires_ms"] = str(_epoch_ms(record.expires_at))
        expire_at = record.expires_at + timedelta(seconds=self.retention_seconds)

        try:
            pipe = self.redis.pipeline(transaction=True)
            pipe.delete(key)
            pipe.hset(key, mapping=mapping)
            pipe.pexpireat(key, _epoch_ms(expire_at))
            await pipe.execute()
        except RedisError as e:
            logger.error("Code store write failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e

    async def register_failed_attempt(
        self,
        phone: str,
        code_hash: str,
        now: datetime,
    ) -> Optional[VerificationCode]:
        try:
            result = await self._eval(
                FAILED_ATTEMPT_SCRIPT,
                self.get_key(phone),
                code_hash,
                _epoch_ms(now),
            )
        except RedisError as e:
            logger.error("Attempt increment failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e

        if not result:
            return None
        # HGETALL from Lua comes back as a flat [field, value, ...] list
        return VerificationCode.from_mapping(dict(zip(result[::2], result[1::2])))

    async def mark_used(self, phone: str, code_hash: str, now: datetime) -> bool:
        try:
            result = await self._eval(
                MARK_USED_SCRIPT,
                self.get_key(phone),
                code_hash,
                _epoch_ms(now),
                now.isoformat(),
            )
        except RedisError as e:
            logger.error("Mark used failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e
        return bool(result)

    async def mark_undelivered(self, phone: str, code_hash: str) -> bool:
        try:
            result = await self._eval(MARK_UNDELIVERED_SCRIPT, self.get_key(phone), code_hash)
        except RedisError as e:
            logger.error("Delivery flag update failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e
        return bool(result)

    async def close(self) -> None:
        await self.redis.aclose()
