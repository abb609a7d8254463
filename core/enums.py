from enum import Enum


class SeedProvider(str, Enum):
    """Mailbox provider of a seed"""
    GMAIL = "gmail"
    OUTLOOK = "outlook"
    YAHOO = "yahoo"
    IMAP_CUSTOM = "imap_custom"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [provider.value for provider in cls]
