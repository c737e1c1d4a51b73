# =============================================================================
# Envelope Models
# =============================================================================
# An envelope is the header/preview summary of a message, without its body.
# It is what the message list shows and all that pagination downloads.
#
#   - EnvelopeSummary: immutable data as the server returned it.
#   - Envelope: wraps a summary with local-only state (checked for a bulk
#     action, and a seen/unseen flag that may be flipped locally before the
#     server confirms anything).
#
# Identity is the IMAP UID. A UID is stable for the lifetime of a message in
# its folder; once a message is deleted or moved the envelope must be dropped.
# =============================================================================

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntFlag


class MessageFlags(IntFlag):
    """
    Standard IMAP system flags (RFC 3501), stored as a bitmask.

    Usage:
        if summary.flags & MessageFlags.SEEN:
            print("Message has been read")
    """
    NONE = 0            # No flags set
    SEEN = 1 << 0       # Message has been read (\\Seen)
    ANSWERED = 1 << 1   # Message has been replied to (\\Answered)
    FLAGGED = 1 << 2    # User-flagged / starred (\\Flagged)
    DELETED = 1 << 3    # Marked for deletion (\\Deleted)
    DRAFT = 1 << 4      # Is a draft (\\Draft)

    @classmethod
    def parse(cls, flags_str: str) -> "MessageFlags":
        """Convert an IMAP FLAGS list (e.g. "\\Seen \\Flagged") to MessageFlags."""
        result = cls.NONE

        flags_upper = flags_str.upper()
        if "\\SEEN" in flags_upper:
            result |= cls.SEEN
        if "\\ANSWERED" in flags_upper:
            result |= cls.ANSWERED
        if "\\FLAGGED" in flags_upper:
            result |= cls.FLAGGED
        if "\\DELETED" in flags_upper:
            result |= cls.DELETED
        if "\\DRAFT" in flags_upper:
            result |= cls.DRAFT

        return result


@dataclass(frozen=True)
class BodySummary:
    """
    Condensed BODYSTRUCTURE: enough to draw an attachment icon.

    Attributes:
        content_type: Top-level MIME type ("text/plain", "multipart/mixed").
        has_attachments: True if any part is declared as an attachment.
    """
    content_type: str = "text/plain"
    has_attachments: bool = False


@dataclass(frozen=True)
class EnvelopeSummary:
    """
    Header/preview metadata for one message, as downloaded from the server.

    Attributes:
        uid: IMAP UID, unique within the folder. Used for batched commands.
        sequence: Sequence number at fetch time. Positional and unstable
                  across deletions, kept only for ordering a fetch result.
        subject: Decoded Subject header.
        sender: From address.
        sender_name: From display name.
        date: INTERNALDATE (when the server received the message).
        flags: IMAP flags at fetch time.
        preview: First few hundred bytes of body text.
        body: Condensed body structure.
        message_id: RFC 5322 Message-ID header.
    """

    uid: int
    sequence: int = 0
    subject: str = ""
    sender: str = ""
    sender_name: str = ""
    date: datetime | None = None
    flags: MessageFlags = MessageFlags.NONE
    preview: str = ""
    body: BodySummary = field(default_factory=BodySummary)
    message_id: str = ""

    @property
    def display_sender(self) -> str:
        """Prefers sender_name if available, falls back to email address."""
        return self.sender_name or self.sender


class Envelope:
    """
    A downloaded EnvelopeSummary plus local UI state.

    Attributes:
        summary: The immutable server data.
        is_checked: Selected for a bulk action.
        is_unseen: Local read state. Starts from the server's \\Seen flag but
                   may be flipped locally without contacting the server.
    """

    __slots__ = ("summary", "is_checked", "is_unseen")

    def __init__(self, summary: EnvelopeSummary) -> None:
        self.summary = summary
        self.is_checked = False
        self.is_unseen = not (summary.flags & MessageFlags.SEEN)

    @property
    def uid(self) -> int:
        return self.summary.uid

    @property
    def subject(self) -> str:
        return self.summary.subject

    @property
    def date(self) -> datetime | None:
        return self.summary.date

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Envelope):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self) -> int:
        return hash(self.uid)

    def __str__(self) -> str:
        """Human-readable representation."""
        read_marker = "*" if self.is_unseen else " "
        check_marker = "x" if self.is_checked else " "
        return f"[{check_marker}]{read_marker} {self.summary.display_sender}: {self.subject}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return (
            f"Envelope(uid={self.uid}, subject={self.subject!r}, "
            f"unseen={self.is_unseen}, checked={self.is_checked})"
        )
