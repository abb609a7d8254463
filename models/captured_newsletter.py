from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from core.database import Base
from models.mixins import CuidMixin


class CapturedNewsletter(CuidMixin, Base):
    """
    A message pulled from a seed mailbox.

    Rows are append-only from the sync side; is_processed is flipped later by
    the content-analysis pipeline.
    """

    __tablename__ = "captured_newsletters"

    seed_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("email_seeds.id", ondelete="CASCADE"), nullable=True
    )
    from_email: Mapped[str] = mapped_column(String, nullable=False)
    from_name: Mapped[str | None] = mapped_column(String, nullable=True)
    subject: Mapped[str] = mapped_column(String, nullable=False)
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    html_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    text_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_processed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_captured_newsletters_seed_received", "seed_id", "received_at"),
    )
