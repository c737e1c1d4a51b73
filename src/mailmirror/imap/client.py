# =============================================================================
# IMAP Client
# =============================================================================
# The production RemoteMailSession: an async wrapper around aioimaplib.
#
# Key responsibilities:
#   - Connection management (connect, disconnect, reconnect)
#   - Authentication (supports STARTTLS and SSL, password from keyring)
#   - Folder operations (list, status, select, create, delete)
#   - Envelope download by sequence range
#   - Message commands by UID (flags, move, delete)
#
# Design notes:
#   - Every failure surfaces as a TransportError subclass; aioimaplib's own
#     exceptions and socket errors never leak to the mailbox core.
#   - The client remembers which folder is selected, but does not skip a
#     SELECT on its own. Deciding when to select is the caller's job.
# =============================================================================

import asyncio
import email.header
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Awaitable, Sequence

import keyring
from aioimaplib import aioimaplib

from mailmirror.core import BodySummary, EnvelopeSummary, Folder, MessageFlags
from mailmirror.imap.session import (
    EnvelopeParts,
    FlagAction,
    FolderStatus,
    RemoteMailSession,
    SequenceRange,
    TransportError,
)

if TYPE_CHECKING:
    from mailmirror.core import Account

# Set up logging for this module
logger = logging.getLogger(__name__)

# Bytes of body text requested for the preview line
PREVIEW_BYTES = 200


def _quote_folder_name(name: str) -> str:
    """
    Quote an IMAP folder name if it contains special characters.

    Args:
        name: The folder name to quote.

    Returns:
        Properly quoted folder name for IMAP commands.
    """
    if ' ' in name or '"' in name or '\\' in name or any(c in name for c in '(){}[]'):
        escaped = name.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'
    return name


def _uid_set(uids: Sequence[int]) -> str:
    return ",".join(str(u) for u in uids)


def _to_text(line: Any) -> str:
    if isinstance(line, (bytes, bytearray)):
        return bytes(line).decode("utf-8", errors="replace")
    return str(line)


@dataclass
class ConnectionState:
    """
    Tracks the current state of an IMAP connection.

    Attributes:
        connected: Whether we have an active connection.
        authenticated: Whether we've successfully logged in.
        selected_folder: Currently selected folder, if any.
        capabilities: Server capabilities (from CAPABILITY response).
    """
    connected: bool = False
    authenticated: bool = False
    selected_folder: str | None = None
    capabilities: list[str] = field(default_factory=list)


class IMAPClient(RemoteMailSession):
    """
    Async IMAP session for the mailbox mirror.

    Usage:
        >>> client = IMAPClient(account)
        >>> await client.connect()
        >>> folders = await client.list_folders()
        >>> await client.select_folder("INBOX")
        >>> envelopes = await client.fetch_envelopes(
        ...     SequenceRange(51, 100), EnvelopeParts.ALL, 1000)
        >>> await client.disconnect()

    Attributes:
        account: The Account configuration for this connection.
        state: Current connection state.
    """

    def __init__(self, account: "Account", *, preview_bytes: int = PREVIEW_BYTES) -> None:
        """
        Initialize the IMAP client.

        Args:
            account: Account configuration with IMAP server details.
            preview_bytes: How much body text to request for previews.
        """
        self.account = account
        self.preview_bytes = preview_bytes
        self.state = ConnectionState()
        self._client: aioimaplib.IMAP4_SSL | aioimaplib.IMAP4 | None = None

    @property
    def is_connected(self) -> bool:
        """Check if client is connected and authenticated."""
        return self.state.connected and self.state.authenticated and self._client is not None

    @property
    def selected_folder(self) -> str | None:
        return self.state.selected_folder

    # =========================================================================
    # Connection Management
    # =========================================================================

    async def connect(self) -> bool:
        """
        Establish connection to the IMAP server.

        Handles both SSL and STARTTLS connections based on account config.

        Returns:
            True if connection and authentication succeeded.

        Raises:
            IMAPConnectionError: If unable to connect to server.
            IMAPAuthenticationError: If login fails.
        """
        logger.info(f"Connecting to {self.account.imap_host}:{self.account.imap_port}")

        try:
            if self.account.imap_security == "ssl":
                # Direct SSL connection (usually port 993)
                self._client = aioimaplib.IMAP4_SSL(
                    host=self.account.imap_host,
                    port=self.account.imap_port,
                    timeout=self.account.timeout,
                )
            else:
                # Plain connection, will upgrade with STARTTLS (usually port 143)
                self._client = aioimaplib.IMAP4(
                    host=self.account.imap_host,
                    port=self.account.imap_port,
                    timeout=self.account.timeout,
                )

            await self._client.wait_hello_from_server()
            self.state.connected = True

            # aioimaplib stores capabilities after wait_hello_from_server()
            self.state.capabilities = list(self._client.protocol.capabilities)
            logger.debug(f"Server capabilities: {self.state.capabilities}")

            if self.account.imap_security == "starttls":
                if not self._client.has_capability("STARTTLS"):
                    raise IMAPConnectionError("Server does not support STARTTLS")
                logger.debug("Upgrading to TLS via STARTTLS")
                await self._client.starttls()

            await self._authenticate()

            logger.info(f"Successfully connected to {self.account.imap_host}")
            return True

        except asyncio.TimeoutError as e:
            self.state.connected = False
            raise IMAPConnectionError(
                f"Connection timed out to {self.account.imap_host}:{self.account.imap_port}"
            ) from e
        except OSError as e:
            self.state.connected = False
            raise IMAPConnectionError(
                f"Failed to connect to {self.account.imap_host}:{self.account.imap_port}: {e}"
            ) from e

    async def _authenticate(self) -> None:
        """
        Authenticate with the IMAP server using credentials from keyring.

        Raises:
            IMAPAuthenticationError: If login fails or password not found.
        """
        password = keyring.get_password(
            self.account.keyring_service,
            self.account.email
        )

        if not password:
            raise IMAPAuthenticationError(
                f"No password found in keyring for {self.account.email}. "
                f"Set it with: keyring set {self.account.keyring_service} {self.account.email}"
            )

        logger.debug(f"Authenticating as {self.account.email}")
        response = await self._client.login(self.account.email, password)

        if response.result != "OK":
            raise IMAPAuthenticationError(
                f"Authentication failed for {self.account.email}: {response.lines}"
            )

        self.state.authenticated = True
        logger.debug("Authentication successful")

    async def disconnect(self) -> None:
        """
        Gracefully disconnect from the IMAP server.

        Sends LOGOUT command and closes the connection.
        """
        if self._client and self.state.connected:
            try:
                logger.debug("Sending LOGOUT")
                await self._client.logout()
            except Exception as e:
                logger.warning(f"Error during logout: {e}")
            finally:
                self._client = None
                self.state = ConnectionState()

    async def ensure_connected(self) -> None:
        """
        Ensure we have an active connection, reconnecting if necessary.

        A reconnect starts a new IMAP session, so nothing is selected anymore.

        Raises:
            IMAPConnectionError: If reconnection fails.
        """
        if not self.state.connected or not self._client:
            self.state.selected_folder = None
            await self.connect()

    async def _run(self, command: Awaitable, what: str):
        """
        Await an aioimaplib command, translating transport failures.

        Raises:
            IMAPConnectionError: On timeout or socket/protocol failure.
            IMAPCommandError: If the server answered anything but OK.
        """
        try:
            response = await command
        except (asyncio.TimeoutError, aioimaplib.CommandTimeout) as e:
            raise IMAPConnectionError(f"{what} timed out") from e
        except (aioimaplib.Abort, OSError) as e:
            # The connection is unusable; force a reconnect next time
            self.state.connected = False
            raise IMAPConnectionError(f"{what} failed: {e}") from e

        if response.result != "OK":
            raise IMAPCommandError(f"{what} failed: {response.lines}")
        return response

    # =========================================================================
    # Folder Operations
    # =========================================================================

    async def list_folders(self) -> list[Folder]:
        """
        Fetch list of all selectable folders.

        Returns:
            Folders in server order.
        """
        await self.ensure_connected()

        logger.debug("Listing folders")

        # Pattern "" "*" means all folders from root
        response = await self._run(self._client.list('""', "*"), "LIST")

        folders = []
        for line in response.lines:
            folder = parse_folder_line(line)
            if folder:
                folders.append(folder)

        logger.debug(f"Found {len(folders)} folders")
        return folders

    async def folder_status(self, name: str) -> FolderStatus:
        """
        Get message counts of a folder without selecting it.

        Args:
            name: Name of the folder.

        Returns:
            FolderStatus with MESSAGES and UNSEEN counts.
        """
        await self.ensure_connected()

        response = await self._run(
            self._client.status(_quote_folder_name(name), "(MESSAGES UNSEEN)"),
            f"STATUS {name}",
        )
        status = parse_status_response(response.lines)
        return FolderStatus(
            message_count=status.get("MESSAGES", 0),
            unread_count=status.get("UNSEEN", 0),
        )

    async def select_folder(self, name: str) -> None:
        """
        Select a folder for subsequent operations.

        Raises:
            IMAPCommandError: If folder selection fails.
        """
        await self.ensure_connected()

        logger.debug(f"Selecting folder: {name}")
        try:
            response = await self._run(self._client.select(_quote_folder_name(name)), f"SELECT {name}")
        except TransportError:
            # A failed SELECT leaves no folder selected
            self.state.selected_folder = None
            raise

        status = parse_select_response(response.lines)
        self.state.selected_folder = name
        logger.debug(f"Selected folder: {name}, {status}")

    async def create_folder(self, name: str) -> None:
        await self.ensure_connected()
        logger.info(f"Creating folder: {name}")
        await self._run(self._client.create(_quote_folder_name(name)), f"CREATE {name}")

    async def delete_folder(self, name: str) -> None:
        await self.ensure_connected()
        logger.info(f"Deleting folder: {name}")
        await self._run(self._client.delete(_quote_folder_name(name)), f"DELETE {name}")
        if self.state.selected_folder == name:
            self.state.selected_folder = None

    def _require_selected(self) -> str:
        if not self.state.selected_folder:
            raise IMAPCommandError("No folder selected")
        return self.state.selected_folder

    # =========================================================================
    # Envelope Fetching
    # =========================================================================

    def _fetch_items(self, parts: EnvelopeParts) -> str:
        """Build the FETCH item list for the requested envelope parts."""
        # UID and ENVELOPE are always needed to build a summary
        items = ["UID", "ENVELOPE"]
        if parts & EnvelopeParts.FLAGS:
            items.append("FLAGS")
        if parts & EnvelopeParts.DATE:
            items.append("INTERNALDATE")
        if parts & EnvelopeParts.STRUCTURE:
            items.append("BODYSTRUCTURE")
        if parts & EnvelopeParts.PREVIEW:
            items.append(f"BODY.PEEK[TEXT]<0.{self.preview_bytes}>")
        return "(" + " ".join(items) + ")"

    async def fetch_envelopes(
        self,
        seq_range: SequenceRange,
        parts: EnvelopeParts,
        max_per_call: int,
    ) -> list[EnvelopeSummary]:
        """
        Fetch envelopes for a sequence range of the selected folder.

        Args:
            seq_range: Sequence numbers to fetch.
            parts: Which envelope parts to download.
            max_per_call: Upper bound on messages in one FETCH. Larger ranges
                          are trimmed to their newest end.

        Returns:
            Envelope summaries ordered oldest-to-newest.
        """
        await self.ensure_connected()
        folder_name = self._require_selected()

        if len(seq_range) > max_per_call:
            seq_range = SequenceRange(seq_range.high - max_per_call + 1, seq_range.high)

        logger.debug(f"Fetching envelopes {seq_range} from {folder_name}")
        response = await self._run(
            self._client.fetch(str(seq_range), self._fetch_items(parts)),
            f"FETCH {seq_range}",
        )

        summaries = parse_fetch_response(response.lines)
        summaries.sort(key=lambda s: s.sequence)

        logger.debug(f"Fetched {len(summaries)} envelopes")
        return summaries

    # =========================================================================
    # Message Operations
    # =========================================================================

    async def set_flags(self, uids: Sequence[int], flag: str, action: FlagAction) -> None:
        """
        Add or remove a flag on messages of the selected folder.

        Args:
            uids: UIDs of messages to modify.
            flag: Flag to change (e.g., "\\Seen").
            action: FlagAction.ADD or FlagAction.REMOVE.
        """
        await self.ensure_connected()
        self._require_selected()

        uid_set = _uid_set(uids)
        logger.debug(f"Setting flags on {uid_set}: {action.value} ({flag})")
        await self._run(
            self._client.uid("STORE", uid_set, action.value, f"({flag})"),
            "UID STORE",
        )

    async def move_messages(self, uids: Sequence[int], destination: str) -> None:
        """
        Move messages from the selected folder to another one.

        Uses MOVE if supported, otherwise COPY + \\Deleted + EXPUNGE.

        Args:
            uids: UIDs of messages to move.
            destination: Destination folder name.
        """
        await self.ensure_connected()
        self._require_selected()

        quoted_dest = _quote_folder_name(destination)
        uid_set = _uid_set(uids)

        if self._client.has_capability("MOVE"):
            logger.debug(f"Moving {len(uids)} messages to {destination} using MOVE")
            await self._run(self._client.uid("MOVE", uid_set, quoted_dest), "UID MOVE")
        else:
            logger.debug(f"Moving {len(uids)} messages to {destination} using COPY+DELETE")
            await self._run(self._client.uid("COPY", uid_set, quoted_dest), "UID COPY")
            await self.set_flags(uids, "\\Deleted", FlagAction.ADD)
            await self._expunge(uids)

    async def delete_messages(self, uids: Sequence[int]) -> None:
        """
        Mark messages as deleted and expunge them.

        Args:
            uids: UIDs of messages to delete.
        """
        await self.ensure_connected()
        folder_name = self._require_selected()

        await self.set_flags(uids, "\\Deleted", FlagAction.ADD)
        logger.debug(f"Expunging {len(uids)} deleted messages in {folder_name}")
        await self._expunge(uids)

    async def clear_folder(self) -> None:
        """
        Delete every message in the selected folder.

        Issued even when the last SELECT reported an empty folder.
        """
        await self.ensure_connected()
        folder_name = self._require_selected()

        logger.info(f"Clearing all messages in {folder_name}")
        await self._run(self._client.store("1:*", "+FLAGS", "(\\Deleted)"), "STORE 1:*")
        await self._run(self._client.expunge(), "EXPUNGE")

    async def _expunge(self, uids: Sequence[int]) -> None:
        # UID EXPUNGE only touches our messages; plain EXPUNGE also purges
        # anything another client flagged \Deleted
        if self._client.has_capability("UIDPLUS"):
            await self._run(self._client.uid("EXPUNGE", _uid_set(uids)), "UID EXPUNGE")
        else:
            await self._run(self._client.expunge(), "EXPUNGE")


# =============================================================================
# Response Parsing
# =============================================================================

def parse_folder_line(line: bytes | str) -> Folder | None:
    """
    Parse a single LIST response line into a Folder.

    LIST response format:
        (\\HasNoChildren) "/" "INBOX"
        (\\HasNoChildren \\Sent) "/" "Sent"

    Folders flagged \\Noselect cannot be opened and are skipped.
    """
    line = _to_text(line)

    # Skip empty lines and status/completion messages
    if not line or not line.startswith("("):
        return None

    match = re.match(r'\(([^)]*)\)\s+(?:"([^"]*)"|NIL)\s+"?([^"]+)"?', line)
    if not match:
        logger.warning(f"Could not parse folder line: {line}")
        return None

    flags_str, delimiter, name = match.groups()
    flags = [f.upper() for f in flags_str.split()] if flags_str else []

    if "\\NOSELECT" in flags or "\\NONEXISTENT" in flags:
        return None

    name = name.strip().strip('"')
    return Folder.from_path(name, delimiter=delimiter or "")


def parse_status_response(lines: list) -> dict[str, int]:
    """Parse `* STATUS name (MESSAGES 3 UNSEEN 1)` lines into a dict."""
    status: dict[str, int] = {}
    for line in lines:
        match = re.search(r"\(([^()]*)\)\s*$", _to_text(line).strip())
        if not match:
            continue
        items = match.group(1).split()
        for i in range(0, len(items) - 1, 2):
            try:
                status[items[i].upper()] = int(items[i + 1])
            except ValueError:
                pass
    return status


def parse_select_response(lines: list) -> dict[str, int]:
    """Parse SELECT/EXAMINE response into a status dictionary."""
    status = {}
    for line in lines:
        line = _to_text(line)

        match = re.search(r"(\d+)\s+EXISTS", line, re.IGNORECASE)
        if match:
            status["EXISTS"] = int(match.group(1))

        match = re.search(r"UIDVALIDITY\s+(\d+)", line, re.IGNORECASE)
        if match:
            status["UIDVALIDITY"] = int(match.group(1))

        match = re.search(r"UNSEEN\s+(\d+)", line, re.IGNORECASE)
        if match:
            status["UNSEEN"] = int(match.group(1))

    return status


_FETCH_START = re.compile(r"^(\d+)\s+FETCH\s*\(", re.IGNORECASE)
_LITERAL_MARKER = re.compile(r"\{(\d+)\}\s*$")
_PREVIEW_MARKER = re.compile(r"BODY\[TEXT\](?:<\d+>)?\s*\{\d+\}\s*$", re.IGNORECASE)


def parse_fetch_response(lines: list) -> list[EnvelopeSummary]:
    """
    Parse FETCH response lines into EnvelopeSummary objects.

    aioimaplib splits the response at every literal: a text line ending in
    {N} is followed by an item holding exactly that literal's bytes. The
    preview literal (BODY[TEXT]) is captured separately; any other literal
    (e.g. a subject containing quotes) is inlined back into the text as a
    quoted string so the envelope can be parsed as a whole.
    """
    groups: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None
    pending_literal: str | None = None   # "preview" or "inline"

    for item in lines:
        if pending_literal is not None and current is not None:
            raw = bytes(item) if isinstance(item, (bytes, bytearray)) else str(item).encode()
            if pending_literal == "preview":
                current["preview"] = raw
                quoted = '""'
            else:
                value = raw.decode("utf-8", errors="replace")
                quoted = '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
            current["text"] = _LITERAL_MARKER.sub(lambda _: quoted, current["text"])
            pending_literal = None
            continue

        line = _to_text(item)
        if _FETCH_START.match(line):
            current = {"text": line, "preview": None}
            groups.append(current)
        elif current is not None:
            current["text"] += line
        else:
            continue

        if _LITERAL_MARKER.search(current["text"]):
            pending_literal = "preview" if _PREVIEW_MARKER.search(current["text"]) else "inline"

    summaries = []
    for group in groups:
        summary = _build_summary(group["text"], group["preview"])
        if summary:
            summaries.append(summary)
    return summaries


def _build_summary(text: str, preview: bytes | None) -> EnvelopeSummary | None:
    """Build an EnvelopeSummary from one FETCH response."""
    seq_match = _FETCH_START.match(text)
    uid_match = re.search(r"\bUID\s+(\d+)", text, re.IGNORECASE)
    if not seq_match or not uid_match:
        logger.warning(f"FETCH response without UID: {text[:80]}")
        return None

    flags = MessageFlags.NONE
    flags_match = re.search(r"FLAGS\s*\(([^)]*)\)", text, re.IGNORECASE)
    if flags_match:
        flags = MessageFlags.parse(flags_match.group(1))

    date = None
    date_match = re.search(r'INTERNALDATE\s+"([^"]+)"', text, re.IGNORECASE)
    if date_match:
        date = _parse_internaldate(date_match.group(1))

    envelope: dict[str, Any] = {}
    envelope_str = _extract_group(text, "ENVELOPE")
    if envelope_str is not None:
        envelope = _parse_envelope(envelope_str)

    body = BodySummary()
    structure_str = _extract_group(text, "BODYSTRUCTURE")
    if structure_str is not None:
        body = _parse_bodystructure(structure_str)

    from_list = envelope.get("from", [])

    return EnvelopeSummary(
        uid=int(uid_match.group(1)),
        sequence=int(seq_match.group(1)),
        subject=envelope.get("subject", ""),
        sender=from_list[0]["email"] if from_list else "",
        sender_name=from_list[0].get("name", "") if from_list else "",
        date=date,
        flags=flags,
        preview=_clean_preview(preview),
        body=body,
        message_id=envelope.get("message_id", ""),
    )


def _parse_internaldate(value: str) -> datetime | None:
    """Parse an INTERNALDATE ("17-Jul-1996 02:44:25 -0700") as UTC."""
    try:
        parsed = datetime.strptime(value.strip(), "%d-%b-%Y %H:%M:%S %z")
    except ValueError:
        logger.debug(f"Unparseable INTERNALDATE: {value}")
        return None
    return parsed.astimezone(timezone.utc)


def _clean_preview(raw: bytes | None) -> str:
    if not raw:
        return ""
    text = raw.decode("utf-8", errors="replace")
    return " ".join(text.split())


def _extract_group(text: str, keyword: str) -> str | None:
    """
    Return the contents of the parenthesized group following `keyword`,
    honouring nesting and quoted strings.
    """
    match = re.search(rf"\b{keyword}\s*\(", text, re.IGNORECASE)
    if not match:
        return None

    start = match.end()
    depth = 1
    in_quote = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if escaped:
            escaped = False
        elif char == "\\" and in_quote:
            escaped = True
        elif char == '"':
            in_quote = not in_quote
        elif not in_quote and char == "(":
            depth += 1
        elif not in_quote and char == ")":
            depth -= 1
            if depth == 0:
                return text[start:i]
    return None


def _tokenize(s: str) -> list[str]:
    """
    Split a parenthesized list into its top-level tokens, keeping nested
    groups and quoted strings intact.
    """
    tokens = []
    current = ""
    depth = 0
    in_quote = False
    escaped = False

    for char in s:
        if escaped:
            current += char
            escaped = False
        elif char == "\\" and in_quote:
            current += char
            escaped = True
        elif char == '"':
            in_quote = not in_quote
            current += char
        elif char == "(" and not in_quote:
            depth += 1
            current += char
        elif char == ")" and not in_quote:
            depth -= 1
            current += char
        elif char == " " and depth == 0 and not in_quote:
            if current:
                tokens.append(current)
                current = ""
        else:
            current += char

    if current:
        tokens.append(current)

    return tokens


def _clean_string(s: str) -> str:
    """Turn an IMAP string token into a Python string ("" for NIL)."""
    if not s or s.upper() == "NIL":
        return ""
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        s = s[1:-1]
    return s.replace('\\"', '"').replace("\\\\", "\\")


def _parse_envelope(envelope_str: str) -> dict[str, Any]:
    """
    Parse IMAP ENVELOPE structure.

    Format: (date subject from sender reply-to to cc bcc in-reply-to message-id)
    """
    envelope: dict[str, Any] = {}
    parts = _tokenize(envelope_str)

    if len(parts) >= 2:
        envelope["subject"] = _decode_header(_clean_string(parts[1]))
    if len(parts) >= 3:
        envelope["from"] = _parse_address_list(parts[2])
    if len(parts) >= 10:
        envelope["message_id"] = _clean_string(parts[9])

    return envelope


def _parse_address_list(addr_str: str) -> list[dict[str, str]]:
    """Parse an address list: ((name adl mailbox host)(...))."""
    if not addr_str or addr_str.upper() == "NIL":
        return []

    addresses = []
    for group in re.findall(r'\(((?:[^()"]|"(?:[^"\\]|\\.)*")*)\)', addr_str):
        fields = _tokenize(group)
        if len(fields) != 4:
            continue
        name, _, user, host = (_clean_string(f) for f in fields)
        if user and host:
            addresses.append({
                "name": _decode_header(name),
                "email": f"{user}@{host}",
            })

    return addresses


def _parse_bodystructure(structure: str) -> BodySummary:
    """
    Condense a BODYSTRUCTURE into its top-level type and attachment presence.

    A multipart structure starts with nested part lists followed by the
    subtype; a single part starts with its type and subtype strings.
    """
    tokens = _tokenize(structure)
    if not tokens:
        return BodySummary()

    if tokens[0].startswith("("):
        subtypes = [t for t in tokens if not t.startswith("(")]
        subtype = _clean_string(subtypes[0]).lower() if subtypes else "mixed"
        content_type = f"multipart/{subtype}"
    elif len(tokens) >= 2:
        content_type = f"{_clean_string(tokens[0])}/{_clean_string(tokens[1])}".lower()
    else:
        content_type = "text/plain"

    return BodySummary(
        content_type=content_type,
        has_attachments='"ATTACHMENT"' in structure.upper(),
    )


def _decode_header(value: str) -> str:
    """Decode RFC 2047 encoded header value."""
    if not value:
        return ""
    try:
        decoded_parts = email.header.decode_header(value)
        result = ""
        for part, charset in decoded_parts:
            if isinstance(part, bytes):
                result += part.decode(charset or "utf-8", errors="replace")
            else:
                result += part
        return result
    except (LookupError, ValueError):
        return value


# =============================================================================
# Exceptions
# =============================================================================

class IMAPConnectionError(TransportError):
    """Raised when the server cannot be reached or the connection drops."""
    pass


class IMAPAuthenticationError(TransportError):
    """Raised when IMAP authentication fails."""
    pass


class IMAPCommandError(TransportError):
    """Raised when the server answers a command with NO or BAD."""
    pass
