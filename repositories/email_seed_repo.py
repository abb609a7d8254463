from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.attributes import set_committed_value

from core.database import AsyncSessionLocal
from models.email_seed import EmailSeed
from repositories.base import BaseRepository


class EmailSeedRepository(BaseRepository[EmailSeed]):
    """Seed registry: per-user mailboxes tracked for newsletters"""

    def __init__(
        self,
        db: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
    ):
        super().__init__(db, EmailSeed)
        self.session_factory = session_factory

    async def get_by_id_and_user(self, seed_id: str, user_id: str) -> EmailSeed | None:
        """Get seed by ID and verify it belongs to the user"""
        result = await self.db.execute(
            select(EmailSeed).where(
                EmailSeed.id == seed_id, EmailSeed.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def get_by_user(
        self, user_id: str, skip: int = 0, limit: int = 100
    ) -> list[EmailSeed]:
        """Get all seeds of a user, newest first, with pagination"""
        result = await self.db.execute(
            select(EmailSeed)
            .where(EmailSeed.user_id == user_id)
            .order_by(EmailSeed.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_active(self) -> list[EmailSeed]:
        """Get every active seed with a stored password, across all users (batch sync)"""
        result = await self.db.execute(
            select(EmailSeed).where(
                EmailSeed.is_active.is_(True),
                EmailSeed.encrypted_password.is_not(None),
            )
        )
        return list(result.scalars().all())

    async def set_password(self, seed: EmailSeed, encrypted_password: str) -> EmailSeed:
        """
        Store a new encrypted credential on the seed and commit it immediately.

        Runs in its own session and transaction, so the new password survives
        even when the surrounding sync request fails and rolls back.
        """
        async with self.session_factory.begin() as session:
            await session.execute(
                update(EmailSeed)
                .where(EmailSeed.id == seed.id)
                .values(encrypted_password=encrypted_password)
            )
        # Already persisted; keep the request session from writing it again
        set_committed_value(seed, "encrypted_password", encrypted_password)
        return seed

    async def mark_synced(self, seed: EmailSeed, synced_at: datetime) -> EmailSeed:
        """Record a completed sync and (re)activate the seed"""
        seed.last_sync_at = synced_at
        seed.is_active = True
        return await self.update(seed)

    async def deactivate(self, seed: EmailSeed) -> EmailSeed:
        """Stop tracking the seed without deleting its captured newsletters"""
        seed.is_active = False
        return await self.update(seed)
