# =============================================================================
# Remote Mail Session Interface
# =============================================================================
# The narrow interface the mailbox core talks to. The core never builds IMAP
# commands itself; it only calls these methods.
#
# Contract notes:
#   - A session has at most one selected folder at a time.
#   - fetch_envelopes() and the message commands (delete/move/set_flags)
#     operate on the currently selected folder. Callers select first.
#   - fetch_envelopes() returns summaries oldest-to-newest within the range.
#   - Any failure (lost connection, timeout, NO/BAD response) is raised as a
#     TransportError subclass.
#
# IMAPClient (client.py) is the production implementation; the test suite
# uses an in-memory fake.
# =============================================================================

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Sequence

from mailmirror.core import EnvelopeSummary, Folder


class EnvelopeParts(IntFlag):
    """Which pieces of an envelope a fetch should download."""
    NONE = 0
    STRUCTURE = 1 << 0      # BODYSTRUCTURE summary
    PREVIEW = 1 << 1        # First bytes of body text
    DATE = 1 << 2           # INTERNALDATE
    FLAGS = 1 << 3          # FLAGS
    UID = 1 << 4            # UID

    ALL = STRUCTURE | PREVIEW | DATE | FLAGS | UID


class FlagAction(Enum):
    """Whether set_flags() adds or removes the given flag."""
    ADD = "+FLAGS"
    REMOVE = "-FLAGS"


@dataclass(frozen=True)
class FolderStatus:
    """Counts returned by a STATUS command."""
    message_count: int = 0
    unread_count: int = 0


@dataclass(frozen=True)
class SequenceRange:
    """
    A contiguous, 1-based range of sequence numbers.

    Rendered high-to-low ("<hi>:<lo>") for the wire. IMAP treats a:b and b:a
    as the same set, so the order is purely cosmetic.
    """
    low: int
    high: int

    def __post_init__(self) -> None:
        if self.low < 1 or self.high < self.low:
            raise ValueError(f"Invalid sequence range {self.low}..{self.high}")

    def __len__(self) -> int:
        return self.high - self.low + 1

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.low <= index <= self.high

    def __str__(self) -> str:
        return f"{self.high}:{self.low}"


class RemoteMailSession(ABC):
    """Abstract interface for the stateful remote mailbox session."""

    @abstractmethod
    async def list_folders(self) -> list[Folder]:
        """Return every folder on the server, in server order."""

    @abstractmethod
    async def folder_status(self, name: str) -> FolderStatus:
        """Return message/unread counts for a folder without selecting it."""

    @abstractmethod
    async def select_folder(self, name: str) -> None:
        """Make `name` the selected folder for subsequent message commands."""

    @abstractmethod
    async def fetch_envelopes(
        self,
        seq_range: SequenceRange,
        parts: EnvelopeParts,
        max_per_call: int,
    ) -> list[EnvelopeSummary]:
        """Download envelopes in a sequence range of the selected folder."""

    @abstractmethod
    async def delete_messages(self, uids: Sequence[int]) -> None:
        """Permanently delete messages (by UID) from the selected folder."""

    @abstractmethod
    async def move_messages(self, uids: Sequence[int], destination: str) -> None:
        """Move messages (by UID) from the selected folder to `destination`."""

    @abstractmethod
    async def set_flags(self, uids: Sequence[int], flag: str, action: FlagAction) -> None:
        """Add or remove one system flag (e.g. "\\Seen") on messages."""

    @abstractmethod
    async def clear_folder(self) -> None:
        """Delete every message in the selected folder."""

    @abstractmethod
    async def create_folder(self, name: str) -> None:
        """Create a new folder."""

    @abstractmethod
    async def delete_folder(self, name: str) -> None:
        """Delete a folder and everything in it."""


# =============================================================================
# Exceptions
# =============================================================================

class TransportError(Exception):
    """Raised by a session when a remote operation fails for any reason."""
    pass
