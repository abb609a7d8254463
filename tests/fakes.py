"""In-memory stand-ins for sockets, IMAP sessions and repositories"""
from datetime import UTC, datetime
from typing import Callable, Iterable, Optional

from core.exceptions import PersistenceError
from integrations.imap.factory import ImapClientFactory
from integrations.imap.protocols import EmailMessage, ImapConnectionParams
from models.captured_newsletter import CapturedNewsletter
from models.email_seed import EmailSeed
from models.mixins import generate_cuid


class ScriptedReader:
    """StreamReader stand-in returning pre-recorded server bytes in fixed chunks"""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = list(chunks)
        self.read_calls = 0

    @classmethod
    def from_bytes(cls, data: bytes, chunk_size: int | None = None) -> "ScriptedReader":
        if not chunk_size:
            return cls([data])
        return cls(data[i:i + chunk_size] for i in range(0, len(data), chunk_size))

    async def read(self, n: int = -1) -> bytes:
        self.read_calls += 1
        if not self._chunks:
            return b""
        return self._chunks.pop(0)


class RecordingWriter:
    """StreamWriter stand-in recording what the client sends"""

    def __init__(self):
        self.written = bytearray()
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    @property
    def lines(self) -> list[str]:
        return [line for line in self.written.decode().split("\r\n") if line]

    @property
    def tags(self) -> list[str]:
        return [line.split(" ", 1)[0] for line in self.lines]

    def write(self, data: bytes) -> None:
        self.written.extend(data)

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.close_calls += 1

    async def wait_closed(self) -> None:
        pass


class FakeImapClient:
    """Scripted IMAP session for sync service tests"""

    def __init__(
        self,
        login_result: bool = True,
        unseen: Optional[list[str]] = None,
        messages: Optional[dict[str, object]] = None,
        connect_error: Optional[Exception] = None,
    ):
        self.login_result = login_result
        self.unseen = unseen or []
        # uid -> EmailMessage, None (unparsable) or an exception to raise
        self.messages = messages or {}
        self.connect_error = connect_error
        self.calls: list[str] = []
        self.login_args: Optional[tuple[str, str]] = None
        self.fetched: list[str] = []
        self.close_calls = 0

    async def connect(self) -> None:
        self.calls.append("connect")
        if self.connect_error:
            raise self.connect_error

    async def login(self, email: str, password: str) -> bool:
        self.calls.append("login")
        self.login_args = (email, password)
        return self.login_result

    async def select_mailbox(self, name: str = "INBOX") -> int:
        self.calls.append("select")
        return len(self.unseen)

    async def search_unseen(self) -> list[str]:
        self.calls.append("search")
        return list(self.unseen)

    async def fetch_message(self, uid: str) -> Optional[EmailMessage]:
        self.fetched.append(uid)
        result = self.messages.get(uid, make_message(uid))
        if isinstance(result, Exception):
            raise result
        return result

    async def logout(self) -> None:
        self.calls.append("logout")

    async def close(self) -> None:
        self.calls.append("close")
        self.close_calls += 1


class FakeClientFactory(ImapClientFactory):
    """Real connection resolution, scripted clients"""

    def __init__(self, clients: FakeImapClient | Callable[[], FakeImapClient]):
        self._clients = clients
        self.created: list[tuple[ImapConnectionParams, FakeImapClient]] = []

    def create_client(self, params: ImapConnectionParams) -> FakeImapClient:
        client = self._clients() if callable(self._clients) else self._clients
        self.created.append((params, client))
        return client


class FakeEncryptor:
    """Reversible, keyless encryptor"""

    def encrypt(self, password: str) -> str:
        return f"enc:{password}"

    def decrypt(self, encrypted_str: str) -> str:
        if not encrypted_str.startswith("enc:"):
            raise ValueError("Failed to decrypt seed password - invalid or corrupted data")
        return encrypted_str[len("enc:"):]


class InMemorySeedRepository:
    def __init__(self, seeds: Iterable[EmailSeed] = ()):
        self.seeds = {seed.id: seed for seed in seeds}
        self.password_updates: list[str] = []

    async def get_by_id(self, seed_id: str) -> EmailSeed | None:
        return self.seeds.get(seed_id)

    async def get_by_id_and_user(self, seed_id: str, user_id: str) -> EmailSeed | None:
        seed = self.seeds.get(seed_id)
        if seed and seed.user_id == user_id:
            return seed
        return None

    async def get_by_user(self, user_id: str, skip: int = 0, limit: int = 100) -> list[EmailSeed]:
        owned = [seed for seed in self.seeds.values() if seed.user_id == user_id]
        return owned[skip:skip + limit]

    async def get_active(self) -> list[EmailSeed]:
        return [
            seed for seed in self.seeds.values()
            if seed.is_active and seed.encrypted_password is not None
        ]

    async def create(self, seed: EmailSeed) -> EmailSeed:
        now = datetime.now(UTC)
        seed.id = seed.id or generate_cuid()
        seed.created_at = now
        seed.updated_at = now
        if seed.is_active is None:
            seed.is_active = True
        self.seeds[seed.id] = seed
        return seed

    async def set_password(self, seed: EmailSeed, encrypted_password: str) -> EmailSeed:
        seed.encrypted_password = encrypted_password
        self.password_updates.append(seed.id)
        return seed

    async def mark_synced(self, seed: EmailSeed, synced_at: datetime) -> EmailSeed:
        seed.last_sync_at = synced_at
        seed.is_active = True
        return seed

    async def deactivate(self, seed: EmailSeed) -> EmailSeed:
        seed.is_active = False
        return seed


class InMemoryNewsletterRepository:
    def __init__(self, fail_for: Iterable[str] = ()):
        self.fail_for = set(fail_for)
        self.rows: list[CapturedNewsletter] = []
        self.stored_uids: list[str] = []

    async def create_from_message(self, seed_id: str, message: EmailMessage) -> CapturedNewsletter:
        if message.uid in self.fail_for:
            raise PersistenceError(f"Failed to store message {message.uid} for seed {seed_id}")
        newsletter = CapturedNewsletter(
            id=generate_cuid(),
            seed_id=seed_id,
            from_email=message.from_address,
            from_name=message.from_name,
            subject=message.subject,
            received_at=message.date,
            html_content=message.html_content,
            text_content=message.text_content,
            is_processed=False,
        )
        self.rows.append(newsletter)
        self.stored_uids.append(message.uid)
        return newsletter

    async def get_by_seed(self, seed_id: str, skip: int = 0, limit: int = 100) -> list[CapturedNewsletter]:
        rows = [row for row in self.rows if row.seed_id == seed_id]
        rows.sort(key=lambda row: row.received_at, reverse=True)
        return rows[skip:skip + limit]


def make_message(uid: str, **overrides) -> EmailMessage:
    fields = dict(
        uid=uid,
        from_address=f"sender{uid}@example.com",
        from_name=f"Sender {uid}",
        subject=f"Newsletter {uid}",
        date=datetime(2025, 1, 1, 10, 0, 0, tzinfo=UTC),
        html_content="<html><body>Hello</body></html>",
        text_content=None,
    )
    fields.update(overrides)
    return EmailMessage(**fields)


def make_seed(**overrides) -> EmailSeed:
    now = datetime.now(UTC)
    fields = dict(
        id=generate_cuid(),
        user_id="user-1",
        name="Promo seed",
        email="seed@gmail.com",
        provider="gmail",
        imap_host=None,
        imap_port=None,
        use_ssl=None,
        encrypted_password="enc:app-password",
        is_active=True,
        last_sync_at=None,
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return EmailSeed(**fields)
