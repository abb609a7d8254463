"""Resolves seed connection settings and instantiates IMAP clients"""
from typing import ClassVar

from core.exceptions import ConfigurationError
from core.logging import get_logger
from integrations.imap.client import ImapClient
from integrations.imap.protocols import IImapClient, ImapConnectionParams
from models.email_seed import EmailSeed

logger = get_logger(__name__)


class ImapClientFactory:
    """Factory for IMAP connection parameters and client instances"""

    _default_hosts: ClassVar[dict[str, str]] = {
        'gmail': 'imap.gmail.com',
        'outlook': 'outlook.office365.com',
        'yahoo': 'imap.mail.yahoo.com',
    }

    @classmethod
    def resolve_connection_params(
        cls, seed: EmailSeed, default_port: int = 993
    ) -> ImapConnectionParams:
        """
        Build connection parameters for a seed.

        An explicit imap_host on the seed wins; otherwise the provider's
        default host is used. Port falls back to default_port, TLS to on.

        Raises:
            ConfigurationError: If no host is configured and the provider has
                no default (imap_custom)
        """
        host = seed.imap_host or cls._default_hosts.get((seed.provider or '').lower())
        if not host:
            raise ConfigurationError("IMAP host not configured")

        return ImapConnectionParams(
            host=host,
            port=seed.imap_port or default_port,
            use_tls=True if seed.use_ssl is None else seed.use_ssl,
        )

    @classmethod
    def create_client(cls, params: ImapConnectionParams) -> IImapClient:
        """Create a fresh client; one instance per sync attempt, never reused"""
        logger.debug(f"Creating ImapClient for {params.host}:{params.port}")
        return ImapClient(params)
