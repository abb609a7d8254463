"""IMAP session data structures and the client interface the sync service depends on"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass(frozen=True)
class ImapConnectionParams:
    """Where to connect; fixed for the lifetime of one client instance"""
    host: str
    port: int = 993
    use_tls: bool = True


@dataclass(frozen=True)
class EmailMessage:
    """
    A message parsed from a single FETCH response.

    At most one of html_content / text_content is populated: the fetched
    body is classified as HTML or plain text as a whole.
    """
    uid: str
    from_address: str  # "" when the From header could not be parsed
    from_name: Optional[str]
    subject: str
    date: datetime
    html_content: Optional[str] = None
    text_content: Optional[str] = None


class IImapClient(Protocol):
    """Sequential single-mailbox IMAP session (connect -> ... -> close)"""

    async def connect(self) -> None:
        """Open the stream and consume the server greeting"""
        ...

    async def login(self, email: str, password: str) -> bool:
        """Authenticate; False when the server rejects the credentials"""
        ...

    async def select_mailbox(self, name: str = "INBOX") -> int:
        """Select a mailbox and return its message count"""
        ...

    async def search_unseen(self) -> list[str]:
        """IDs of unseen messages in the selected mailbox"""
        ...

    async def fetch_message(self, uid: str) -> Optional[EmailMessage]:
        """Fetch and parse one message; None when it cannot be parsed"""
        ...

    async def logout(self) -> None:
        """Best-effort LOGOUT"""
        ...

    async def close(self) -> None:
        """Release the stream; safe to call more than once"""
        ...
