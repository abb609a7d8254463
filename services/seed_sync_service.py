"""IMAP seed sync service: pulls unseen mail from a seed mailbox into the message store"""
from dataclasses import dataclass
from datetime import UTC, datetime

from core.exceptions import (
    ConfigurationError,
    ImapAuthenticationError,
    SeedNotFoundError,
)
from core.logging import get_logger
from core.protocols import (
    ICredentialEncryptor,
    IImapClientFactory,
    INewsletterRepository,
    ISeedRepository,
)
from integrations.imap.protocols import IImapClient
from models.email_seed import EmailSeed

logger = get_logger(__name__)

DEFAULT_MAX_MESSAGES = 20


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one successful seed sync"""
    synced_count: int
    total_unseen: int
    host: str
    port: int
    email: str
    last_sync: datetime


@dataclass(frozen=True)
class SeedSyncOutcome:
    """Per-seed entry of a batch sync"""
    seed_id: str
    success: bool
    message: str


class SeedSyncService:
    """
    Drives one IMAP session per seed:
    connect -> login -> select -> search unseen -> fetch (capped) -> logout -> close.

    Every collaborator is injected so tests can substitute fakes. The service
    flushes through the repositories and, except for a changed password (committed
    on its own by the seed repository), never commits; the caller owns the
    transaction.
    """

    def __init__(
        self,
        seed_repo: ISeedRepository,
        newsletter_repo: INewsletterRepository,
        encryptor: ICredentialEncryptor,
        client_factory: IImapClientFactory,
        max_messages: int = DEFAULT_MAX_MESSAGES,
        mailbox: str = "INBOX",
        default_port: int = 993,
    ):
        self.seed_repo = seed_repo
        self.newsletter_repo = newsletter_repo
        self.encryptor = encryptor
        self.client_factory = client_factory
        self.max_messages = max_messages
        self.mailbox = mailbox
        self.default_port = default_port

    async def sync_seed(
        self, user_id: str, seed_id: str, password: str | None = None
    ) -> SyncResult:
        """
        Sync one seed owned by user_id.

        Args:
            user_id: Authenticated caller; the seed must belong to them
            seed_id: Seed to sync
            password: Optional password; stored on the seed first if it
                differs from the saved one

        Raises:
            SeedNotFoundError: Seed missing or owned by another user
            ConfigurationError: No host or no usable password (before any I/O)
            ConnectivityError: Socket/TLS failure
            ImapAuthenticationError: Server rejected the credentials
        """
        seed = await self.seed_repo.get_by_id_and_user(seed_id, user_id)
        if not seed:
            raise SeedNotFoundError("Seed not found or access denied")

        return await self._sync(seed, password)

    async def sync_active_seeds(self) -> list[SeedSyncOutcome]:
        """
        Sync every active seed with its stored password.

        Each seed gets its own client; a failing seed is recorded and the
        batch moves on.
        """
        seeds = await self.seed_repo.get_active()
        logger.info(f"Found {len(seeds)} active seeds to sync")

        outcomes: list[SeedSyncOutcome] = []
        for seed in seeds:
            try:
                result = await self._sync(seed)
                outcomes.append(
                    SeedSyncOutcome(
                        seed_id=seed.id,
                        success=True,
                        message=(
                            f"Synced {result.synced_count} of {result.total_unseen} "
                            f"unseen messages for {seed.email} via {result.host}"
                        ),
                    )
                )
            except Exception as e:
                logger.error(f"Sync failed for seed {seed.id} ({seed.email}): {e}", exc_info=True)
                outcomes.append(SeedSyncOutcome(seed_id=seed.id, success=False, message=str(e)))

        succeeded = sum(1 for outcome in outcomes if outcome.success)
        logger.info(f"Batch sync completed: {succeeded}/{len(outcomes)} seeds succeeded")
        return outcomes

    async def _sync(self, seed: EmailSeed, password: str | None = None) -> SyncResult:
        password = await self._resolve_password(seed, password)
        params = self.client_factory.resolve_connection_params(
            seed, default_port=self.default_port
        )

        logger.info(
            f"Attempting IMAP connection to {params.host}:{params.port} for {seed.email}"
        )

        client = self.client_factory.create_client(params)
        synced_count = 0
        total_unseen = 0
        try:
            await client.connect()

            if not await client.login(seed.email, password):
                raise ImapAuthenticationError(
                    f"IMAP authentication failed for {seed.email}. "
                    f"Check the password (or app password) for this seed."
                )

            await client.select_mailbox(self.mailbox)
            unseen = await client.search_unseen()
            total_unseen = len(unseen)
            logger.info(
                f"Found {total_unseen} unseen messages for {seed.email}, "
                f"fetching up to {self.max_messages}"
            )

            for uid in unseen[: self.max_messages]:
                if await self._capture_message(client, seed, uid):
                    synced_count += 1
        finally:
            await client.logout()
            await client.close()

        synced_at = datetime.now(UTC)
        await self.seed_repo.mark_synced(seed, synced_at)

        logger.info(f"Sync completed for {seed.email}: {synced_count}/{total_unseen} captured")
        return SyncResult(
            synced_count=synced_count,
            total_unseen=total_unseen,
            host=params.host,
            port=params.port,
            email=seed.email,
            last_sync=synced_at,
        )

    async def _capture_message(self, client: IImapClient, seed: EmailSeed, uid: str) -> bool:
        """Fetch and store one message; failures are logged and skipped"""
        try:
            message = await client.fetch_message(uid)
        except Exception as e:
            logger.error(f"Failed to fetch message {uid} for {seed.email}: {e}", exc_info=True)
            return False

        if message is None:
            logger.warning(f"Skipping message {uid} for {seed.email}: response could not be parsed")
            return False

        try:
            await self.newsletter_repo.create_from_message(seed.id, message)
        except Exception as e:
            logger.error(
                f"Failed to store message {uid} for {seed.email}: {e}", exc_info=True
            )
            return False
        return True

    async def _resolve_password(self, seed: EmailSeed, password: str | None) -> str:
        """
        Pick the password for this sync, storing a changed one on the seed.

        Raises:
            ConfigurationError: No password supplied and none usable on record
        """
        stored = self._decrypt_stored(seed)

        if password:
            if password != stored:
                await self.seed_repo.set_password(seed, self.encryptor.encrypt(password))
                logger.info(f"Updated stored password for {seed.email}")
            return password

        if stored is None:
            raise ConfigurationError("IMAP password not configured")
        return stored

    def _decrypt_stored(self, seed: EmailSeed) -> str | None:
        if not seed.encrypted_password:
            return None
        try:
            return self.encryptor.decrypt(seed.encrypted_password)
        except ValueError as e:
            logger.warning(f"Stored password for {seed.email} could not be decrypted: {e}")
            return None
