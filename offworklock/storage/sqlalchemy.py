"""SQLAlchemy storage backend for OffWorkLock."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping

from sqlalchemy import Boolean, Integer, String, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..domain.exceptions import StorageError
from .base import PlayerRecord, RecordBackend

MAX_CONTEXT_LENGTH = 128
MAX_PLAYER_ID_LENGTH = 255


class Base(DeclarativeBase):
    pass


class PlayerTable(Base):
    __tablename__ = "offworklock_players"

    context: Mapped[str] = mapped_column(String(MAX_CONTEXT_LENGTH), primary_key=True)
    player_id: Mapped[str] = mapped_column(String(MAX_PLAYER_ID_LENGTH), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    points: Mapped[int] = mapped_column(Integer, default=0)
    unlocked: Mapped[bool] = mapped_column(Boolean, default=False)
    session_open: Mapped[bool] = mapped_column(Boolean, default=False)
    forced_exit_count: Mapped[int] = mapped_column(Integer, default=0)


class AsyncSQLAlchemyStorage:
    """Engine and session factory shared by the SQL record backend."""

    def __init__(self, dsn: str, *, echo: bool = False) -> None:
        self._engine = create_async_engine(dsn, echo=echo, future=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def init_models(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def record_backend(self) -> "SQLAlchemyRecordBackend":
        return SQLAlchemyRecordBackend(self._session_factory)


class SQLAlchemyRecordBackend(RecordBackend):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load(self, context: str) -> dict[str, PlayerRecord]:
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(PlayerTable)
                    .where(PlayerTable.context == context)
                    .order_by(PlayerTable.position)
                )
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot load context {context}", context=context) from exc
        return {
            row.player_id: PlayerRecord(
                player_id=row.player_id,
                points=row.points,
                unlocked=row.unlocked,
                session_open=row.session_open,
                forced_exit_count=row.forced_exit_count,
            )
            for row in rows
        }

    async def save(self, context: str, records: Mapping[str, PlayerRecord]) -> None:
        if len(context) > MAX_CONTEXT_LENGTH:
            raise StorageError(
                f"Context name longer than {MAX_CONTEXT_LENGTH} characters cannot be stored",
                context=context,
            )
        for player_id in records:
            if len(player_id) > MAX_PLAYER_ID_LENGTH:
                raise StorageError(
                    f"Player id longer than {MAX_PLAYER_ID_LENGTH} characters cannot be stored",
                    context=context,
                )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(delete(PlayerTable).where(PlayerTable.context == context))
                    session.add_all(
                        PlayerTable(
                            context=context,
                            player_id=record.player_id,
                            position=position,
                            points=record.points,
                            unlocked=record.unlocked,
                            session_open=record.session_open,
                            forced_exit_count=record.forced_exit_count,
                        )
                        for position, record in enumerate(records.values())
                    )
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot save context {context}", context=context) from exc
