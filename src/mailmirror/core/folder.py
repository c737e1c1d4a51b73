# =============================================================================
# Folder Models
# =============================================================================
# Two views of a mailbox folder:
#   - Folder: what the server told us in a LIST response. Immutable; a new
#     instance is produced on every registry refresh.
#   - FolderState: our local bookkeeping for that folder (cached counts, the
#     pagination cursor and the envelopes loaded so far).
#
# IMAP allows arbitrary folder hierarchies, so users may have custom folders
# like "Work/Projects/Alpha" or "Receipts/2024".
# =============================================================================

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mailmirror.mailbox.store import EnvelopeStore


@dataclass(frozen=True)
class Folder:
    """
    A remote folder as returned by a folder listing.

    Attributes:
        name: Full hierarchical identifier (e.g., "Work/Projects/Alpha").
              This is what gets sent back to the server in SELECT/STATUS.
        short_name: Display label, the last path component ("Alpha").
        delimiter: Hierarchy delimiter reported by the server.

    Example:
        >>> Folder.from_path("Work/Projects", delimiter="/")
        Folder(name='Work/Projects', short_name='Projects', delimiter='/')
    """

    name: str
    short_name: str
    delimiter: str = "/"

    @classmethod
    def from_path(cls, name: str, *, delimiter: str = "/") -> "Folder":
        """Build a Folder, deriving short_name from the last path component."""
        if delimiter and delimiter in name:
            short_name = name.rsplit(delimiter, 1)[1]
        else:
            short_name = name
        return cls(name=name, short_name=short_name, delimiter=delimiter)

    def __str__(self) -> str:
        return self.name


@dataclass
class FolderState:
    """
    Local, mutable state for one remote folder.

    Attributes:
        folder: The listed Folder this state belongs to.
        message_count: Total messages on the server (from STATUS).
        unread_count: Unseen messages on the server (from STATUS), adjusted
                      locally by optimistic read/unread toggles.
        last_loaded_index: Highest sequence number not yet paged in. Starts
                           at message_count and walks down to 0 as pages
                           load. Only meaningful once envelopes is set.
        envelopes: Envelopes loaded so far, newest first. None until the
                   first successful page load.
    """

    folder: Folder
    message_count: int = 0
    unread_count: int = 0
    last_loaded_index: int = 0
    envelopes: "EnvelopeStore | None" = field(default=None, repr=False)

    @classmethod
    def fresh(cls, folder: Folder, message_count: int, unread_count: int) -> "FolderState":
        """A freshly listed folder: nothing loaded, cursor at the top."""
        return cls(
            folder=folder,
            message_count=message_count,
            unread_count=unread_count,
            last_loaded_index=message_count,
        )

    @property
    def name(self) -> str:
        return self.folder.name

    @property
    def short_name(self) -> str:
        return self.folder.short_name

    @property
    def is_loaded(self) -> bool:
        """True once at least one page load has initialized the envelope list."""
        return self.envelopes is not None

    def reset(self) -> None:
        """Drop loaded envelopes so the next selection reloads from the top."""
        self.envelopes = None
        self.last_loaded_index = self.message_count

    def __str__(self) -> str:
        """Human-readable representation."""
        unread_indicator = f" ({self.unread_count})" if self.unread_count > 0 else ""
        return f"{self.folder.name}{unread_indicator}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return (
            f"FolderState(name={self.folder.name!r}, messages={self.message_count}, "
            f"unread={self.unread_count}, cursor={self.last_loaded_index}, "
            f"loaded={0 if self.envelopes is None else len(self.envelopes)})"
        )
