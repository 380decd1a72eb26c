"""
SQL Code Store
==============
SQLAlchemy-backed code store. Attempt increments and consumption are
single conditional UPDATE statements, so concurrent requests never lose
an increment.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog
from sqlalchemy import Boolean, DateTime, Integer, String, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from sendexa_core.database import Base
from sendexa_core.errors import TransientInfraError
from sendexa_core.otp.models import VerificationCode

from .base import CodeStore

logger = structlog.get_logger(__name__)


class VerificationCodeRow(Base):
    __tablename__ = "verification_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    phone: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    code_hash: Mapped[str] = mapped_column(String(64))
    salt: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    validation_attempts: Mapped[int] = mapped_column(Integer, default=0)
    max_validation_attempts: Mapped[int] = mapped_column(Integer, default=5)
    used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    delivery_failed: Mapped[bool] = mapped_column(Boolean, default=False)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(row: VerificationCodeRow) -> VerificationCode:
    return VerificationCode(
        phone=row.phone,
        code_hash=row.code_hash,
        salt=row.salt,
        created_at=_as_utc(row.created_at),
        expires_at=_as_utc(row.expires_at),
        validation_attempts=row.validation_attempts,
        max_validation_attempts=row.max_validation_attempts,
        used_at=_as_utc(row.used_at),
        delivery_failed=bool(row.delivery_failed),
    )


def _active_conditions(phone: str, code_hash: str, now: datetime):
    return (
        VerificationCodeRow.phone == phone,
        VerificationCodeRow.code_hash == code_hash,
        VerificationCodeRow.used_at.is_(None),
        VerificationCodeRow.validation_attempts < VerificationCodeRow.max_validation_attempts,
        VerificationCodeRow.expires_at >= now,
    )


class SQLCodeStore(CodeStore):
    """Code store over a relational database."""

    name = "sql"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, phone: str) -> Optional[VerificationCode]:
        try:
            async with self._session_factory() as session:
                row = await session.scalar(
                    select(VerificationCodeRow).where(VerificationCodeRow.phone == phone)
                )
        except SQLAlchemyError as e:
            logger.error("Code store read failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e

        return _to_record(row) if row is not None else None

    async def replace(self, record: VerificationCode) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    delete(VerificationCodeRow).where(VerificationCodeRow.phone == record.phone)
                )
                session.add(
                    VerificationCodeRow(
                        phone=record.phone,
                        code_hash=record.code_hash,
                        salt=record.salt,
                        created_at=record.created_at,
                        expires_at=record.expires_at,
                        validation_attempts=record.validation_attempts,
                        max_validation_attempts=record.max_validation_attempts,
                        used_at=record.used_at,
                        delivery_failed=record.delivery_failed,
                    )
                )
        except SQLAlchemyError as e:
            logger.error("Code store write failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e

    async def register_failed_attempt(
        self,
        phone: str,
        code_hash: str,
        now: datetime,
    ) -> Optional[VerificationCode]:
        stmt = (
            update(VerificationCodeRow)
            .where(*_active_conditions(phone, code_hash, now))
            .values(validation_attempts=VerificationCodeRow.validation_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                if result.rowcount != 1:
                    return None
                row = await session.scalar(
                    select(VerificationCodeRow).where(VerificationCodeRow.phone == phone)
                )
                return _to_record(row)
        except SQLAlchemyError as e:
            logger.error("Attempt increment failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e

    async def mark_used(self, phone: str, code_hash: str, now: datetime) -> bool:
        stmt = (
            update(VerificationCodeRow)
            .where(*_active_conditions(phone, code_hash, now))
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error("Mark used failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e

    async def mark_undelivered(self, phone: str, code_hash: str) -> bool:
        stmt = (
            update(VerificationCodeRow)
            .where(
                VerificationCodeRow.phone == phone,
                VerificationCodeRow.code_hash == code_hash,
            )
            .values(delivery_failed=True)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return result.rowcount == 1
        except SQLAlchemyError as e:
            logger.error("Delivery flag update failed", backend=self.name, error=str(e))
            raise TransientInfraError(details=str(e)) from e
