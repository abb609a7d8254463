from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from integrations.imap.protocols import EmailMessage, IImapClient, ImapConnectionParams
    from models.captured_newsletter import CapturedNewsletter
    from models.email_seed import EmailSeed


class ISeedRepository(Protocol):
    """Protocol for the seed registry (DIP)"""

    async def get_by_id_and_user(self, seed_id: str, user_id: str) -> EmailSeed | None:
        """Get a seed only if it belongs to the user"""
        ...

    async def get_active(self) -> list[EmailSeed]:
        """Get every active seed"""
        ...

    async def set_password(self, seed: EmailSeed, encrypted_password: str) -> EmailSeed:
        """Replace the stored encrypted password; committed before any IMAP I/O"""
        ...

    async def mark_synced(self, seed: EmailSeed, synced_at: datetime) -> EmailSeed:
        """Record the last successful sync"""
        ...


class INewsletterRepository(Protocol):
    """Protocol for the captured newsletter store (DIP)"""

    async def create_from_message(
        self, seed_id: str, message: EmailMessage
    ) -> CapturedNewsletter:
        """Insert one fetched message"""
        ...


class ICredentialEncryptor(Protocol):
    """Protocol for seed password encryption"""

    def encrypt(self, password: str) -> str:
        ...

    def decrypt(self, encrypted_str: str) -> str:
        ...


class IImapClientFactory(Protocol):
    """Protocol for resolving connection parameters and building IMAP clients"""

    def resolve_connection_params(
        self, seed: EmailSeed, default_port: int = 993
    ) -> ImapConnectionParams:
        ...

    def create_client(self, params: ImapConnectionParams) -> IImapClient:
        ...
