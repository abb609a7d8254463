"""
Minimal IMAP4 client over a raw asyncio stream (plain TCP or TLS).

Implements just enough of the protocol to pull unseen messages from one
mailbox: LOGIN, SELECT, SEARCH UNSEEN, FETCH and LOGOUT. FETCH responses are
parsed with regular expressions on a best-effort basis: literal lengths
({n}) are not enforced and no MIME or charset decoding is attempted.
"""
import asyncio
import re
import ssl
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from core.exceptions import ConnectivityError
from core.logging import get_logger
from integrations.imap.protocols import EmailMessage, ImapConnectionParams

logger = get_logger(__name__)

CRLF = b"\r\n"
READ_CHUNK_SIZE = 4096

FETCH_ITEMS = "(ENVELOPE BODY[TEXT] BODY[HEADER.FIELDS (FROM SUBJECT DATE CONTENT-TYPE)])"
HTML_MARKERS = ("<html", "<body", "<div")

EXISTS_PATTERN = re.compile(r"^\*\s+(\d+)\s+EXISTS\b", re.IGNORECASE)
SEARCH_PATTERN = re.compile(r"^\*\s+SEARCH\b(.*)$", re.IGNORECASE)
FETCH_PATTERN = re.compile(r"^\*\s+\d+\s+FETCH\b", re.IGNORECASE)

FROM_PATTERN = re.compile(r"^From:[ \t]*([^\r\n]*)", re.IGNORECASE | re.MULTILINE)
FROM_ANGLE_PATTERN = re.compile(r'^\s*"?([^"<]*?)"?\s*<([^<>\s]+)>')
FROM_BARE_PATTERN = re.compile(r'([^\s<>"]+@[^\s<>"]+)')
SUBJECT_PATTERN = re.compile(
    r"^Subject:[ \t]*([^\r\n]*(?:\r\n[ \t]+[^\r\n]*)*)", re.IGNORECASE | re.MULTILINE
)
DATE_PATTERN = re.compile(r"^Date:[ \t]*([^\r\n]*)", re.IGNORECASE | re.MULTILINE)
BODY_TEXT_PATTERN = re.compile(r"BODY\[TEXT\]\s*\{\d+\}", re.IGNORECASE)
HEADER_FIELDS_PATTERN = re.compile(r"BODY\[HEADER\.FIELDS", re.IGNORECASE)


def parse_from_header(text: str) -> tuple[str, Optional[str]]:
    """
    Extract (address, display name) from the first From header in text.

    Handles `"Jane Doe" <jane@example.com>`, `Jane Doe <jane@example.com>`
    and a bare `jane@example.com`. Returns ("", None) when nothing matches.
    """
    match = FROM_PATTERN.search(text)
    if not match:
        return "", None

    value = match.group(1).strip()
    angle = FROM_ANGLE_PATTERN.match(value)
    if angle:
        name = angle.group(1).strip()
        return angle.group(2), name or None

    bare = FROM_BARE_PATTERN.search(value)
    if bare:
        return bare.group(1), None
    return "", None


def parse_subject(text: str) -> str:
    """Extract the Subject header, unfolding continuation lines"""
    match = SUBJECT_PATTERN.search(text)
    if not match:
        return ""
    return " ".join(match.group(1).split())


def parse_date(text: str) -> datetime:
    """Parse the Date header; falls back to the current time"""
    match = DATE_PATTERN.search(text)
    if match:
        try:
            parsed = parsedate_to_datetime(match.group(1).strip())
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        except (TypeError, ValueError, IndexError, OverflowError):
            logger.debug(f"Unparsable Date header: {match.group(1)!r}")
    return datetime.now(timezone.utc)


def extract_body(text: str) -> tuple[Optional[str], Optional[str]]:
    """
    Return (html_content, text_content) from a FETCH payload.

    Everything after the {n} literal marker that follows BODY[TEXT] is taken
    as the body; n itself is not used to trim.
    """
    match = BODY_TEXT_PATTERN.search(text)
    if not match:
        return None, None

    body = text[match.end():].strip()
    if not body:
        return None, None

    lowered = body.lower()
    if any(marker in lowered for marker in HTML_MARKERS):
        return body, None
    return None, body


class ImapClient:
    """
    One IMAP session against one mailbox.

    Commands are strictly sequential: each one is written with a fresh tag
    and its tagged completion line is read before the next is sent.
    """

    def __init__(self, params: ImapConnectionParams):
        self._params = params
        self._tag_counter = 0
        self._buffer = bytearray()
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    @property
    def params(self) -> ImapConnectionParams:
        return self._params

    @property
    def is_connected(self) -> bool:
        return self._writer is not None

    async def connect(self) -> None:
        """
        Open the stream and consume the untagged server greeting.

        Raises:
            ConnectivityError: DNS failure, refused connection, TLS handshake
                failure, or a BYE greeting
        """
        host, port = self._params.host, self._params.port
        ssl_context = ssl.create_default_context() if self._params.use_tls else None

        logger.info(f"Connecting to IMAP server: {host}:{port} (tls={self._params.use_tls})")
        try:
            self._reader, self._writer = await asyncio.open_connection(
                host, port, ssl=ssl_context
            )
        except OSError as e:
            raise ConnectivityError(f"Could not connect to {host}:{port}: {e}") from e

        greeting = await self._read_line()
        if greeting.upper().startswith("* BYE"):
            raise ConnectivityError(f"IMAP server refused the connection: {greeting}")
        logger.debug(f"IMAP greeting: {greeting}")

    async def login(self, email: str, password: str) -> bool:
        """
        Authenticate with LOGIN.

        Credentials are quoted verbatim (embedded quotes are not escaped).
        A rejected login returns False rather than raising.
        """
        lines = await self.send_command(f'LOGIN "{email}" "{password}"')
        success = self._is_ok(lines[-1])
        if success:
            logger.info(f"IMAP login succeeded for {email}")
        else:
            logger.warning(f"IMAP login rejected for {email}: {lines[-1]}")
        return success

    async def select_mailbox(self, name: str = "INBOX") -> int:
        """Select a mailbox and return its EXISTS count (0 if not reported)"""
        lines = await self.send_command(f'SELECT "{name}"')
        for line in lines:
            match = EXISTS_PATTERN.match(line)
            if match:
                count = int(match.group(1))
                logger.info(f"Selected {name}: {count} messages")
                return count
        return 0

    async def search_unseen(self) -> list[str]:
        """Return the IDs listed in the untagged SEARCH response"""
        lines = await self.send_command("SEARCH UNSEEN")
        for line in lines:
            match = SEARCH_PATTERN.match(line)
            if match:
                return match.group(1).split()
        return []

    async def fetch_message(self, uid: str) -> Optional[EmailMessage]:
        """
        Fetch one message and parse it.

        Parsing failures are logged and yield None so the caller can skip the
        message; transport failures still raise ConnectivityError.
        """
        lines = await self.send_command(f"FETCH {uid} {FETCH_ITEMS}")
        try:
            return self._parse_fetch_response(uid, lines)
        except Exception as e:
            logger.error(f"Error parsing message {uid}: {e}", exc_info=True)
            return None

    async def logout(self) -> None:
        """Send LOGOUT; errors are logged and ignored"""
        if not self.is_connected:
            return
        try:
            await self.send_command("LOGOUT")
        except Exception as e:
            logger.warning(f"IMAP logout failed: {e}")

    async def close(self) -> None:
        """Close the stream; later calls are no-ops"""
        if self._writer is None:
            return

        writer = self._writer
        self._reader = None
        self._writer = None
        self._buffer.clear()
        try:
            writer.close()
            await writer.wait_closed()
        except Exception as e:
            logger.warning(f"Error closing IMAP connection: {e}")
        logger.info(f"Disconnected from IMAP server {self._params.host}")

    def get_tag(self) -> str:
        """Next command tag: A0001, A0002, ..."""
        self._tag_counter += 1
        return f"A{self._tag_counter:04d}"

    async def send_command(self, command: str) -> list[str]:
        """Write a tagged command and return its full response"""
        if self._writer is None:
            raise ConnectivityError("Not connected to IMAP server")

        tag = self.get_tag()
        # never log arguments; LOGIN carries the password
        logger.debug(f"IMAP > {tag} {command.split(' ', 1)[0]}")
        try:
            self._writer.write(f"{tag} {command}\r\n".encode("utf-8"))
            await self._writer.drain()
        except OSError as e:
            raise ConnectivityError(f"Failed to send IMAP command: {e}") from e
        return await self.read_response(tag)

    async def read_response(self, tag: str) -> list[str]:
        """
        Read lines until the tagged completion line for tag.

        Untagged lines and literal content come first; the tagged line is the
        last element of the returned list.
        """
        prefix = f"{tag} "
        lines: list[str] = []
        while True:
            line = await self._read_line()
            lines.append(line)
            if line.startswith(prefix):
                return lines

    async def _read_line(self) -> str:
        """Pop one CRLF-terminated line, reading from the stream as needed"""
        while True:
            index = self._buffer.find(CRLF)
            if index >= 0:
                raw = bytes(self._buffer[:index])
                del self._buffer[:index + len(CRLF)]
                return raw.decode("utf-8", errors="replace")

            if self._reader is None:
                raise ConnectivityError("Not connected to IMAP server")
            try:
                chunk = await self._reader.read(READ_CHUNK_SIZE)
            except OSError as e:
                raise ConnectivityError(f"Failed to read from IMAP server: {e}") from e
            if not chunk:
                raise ConnectivityError("Connection closed by IMAP server")
            self._buffer.extend(chunk)

    @staticmethod
    def _is_ok(line: str) -> bool:
        return " OK " in f"{line} "

    def _parse_fetch_response(self, uid: str, lines: list[str]) -> Optional[EmailMessage]:
        payload_lines = lines[:-1]
        if not any(FETCH_PATTERN.match(line) for line in payload_lines):
            logger.warning(f"No FETCH data returned for message {uid}: {lines[-1]}")
            return None

        payload = "\r\n".join(payload_lines)
        header_match = HEADER_FIELDS_PATTERN.search(payload)
        headers = payload[header_match.start():] if header_match else payload

        from_address, from_name = parse_from_header(headers)
        html_content, text_content = extract_body(payload)

        return EmailMessage(
            uid=uid,
            from_address=from_address,
            from_name=from_name,
            subject=parse_subject(headers),
            date=parse_date(headers),
            html_content=html_content,
            text_content=text_content,
        )
