from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import PersistenceError
from integrations.imap.protocols import EmailMessage
from models.captured_newsletter import CapturedNewsletter
from repositories.base import BaseRepository


class CapturedNewsletterRepository(BaseRepository[CapturedNewsletter]):
    """Message store for newsletters pulled from seed mailboxes"""

    def __init__(self, db: AsyncSession):
        super().__init__(db, CapturedNewsletter)

    async def create_from_message(
        self, seed_id: str, message: EmailMessage
    ) -> CapturedNewsletter:
        """
        Insert one fetched message as an unprocessed newsletter.

        Runs inside a savepoint so a failed insert only discards this row,
        not the rest of the sync's transaction.

        Raises:
            PersistenceError: If the insert fails
        """
        newsletter = CapturedNewsletter(
            seed_id=seed_id,
            from_email=message.from_address,
            from_name=message.from_name,
            subject=message.subject,
            received_at=message.date,
            html_content=message.html_content,
            text_content=message.text_content,
            is_processed=False,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(newsletter)
                await self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to store message {message.uid} for seed {seed_id}: {e}"
            ) from e
        return newsletter

    async def get_by_seed(
        self, seed_id: str, skip: int = 0, limit: int = 100
    ) -> list[CapturedNewsletter]:
        """Get newsletters captured by a seed, most recent first"""
        result = await self.db.execute(
            select(CapturedNewsletter)
            .where(CapturedNewsletter.seed_id == seed_id)
            .order_by(CapturedNewsletter.received_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())
