"""Email seed model: a user-controlled mailbox that receives tracked newsletters"""
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from models.mixins import UserOwnedModel


class EmailSeed(UserOwnedModel, Base):
    """
    Seed (alias) mailbox and its IMAP connection settings.

    Inherits from UserOwnedModel:
        - id: CUID primary key
        - user_id: Owning user
        - created_at: Creation timestamp
        - updated_at: Last update timestamp

    imap_host/imap_port/use_ssl are optional; when absent they are resolved
    from the provider defaults at sync time.
    """

    __tablename__ = "email_seeds"

    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, index=True)

    # gmail, outlook, yahoo, imap_custom
    provider: Mapped[str] = mapped_column(String, nullable=False)

    imap_host: Mapped[str | None] = mapped_column(String, nullable=True)
    imap_port: Mapped[int | None] = mapped_column(Integer, nullable=True)
    use_ssl: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Fernet token, see integrations/imap/encryption.py
    encrypted_password: Mapped[str | None] = mapped_column(String, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_sync_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<EmailSeed(id={self.id}, email={self.email}, provider={self.provider})>"
