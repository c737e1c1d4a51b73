# =============================================================================
# IMAP Module
# =============================================================================
# The remote side of the mailbox mirror:
#   - RemoteMailSession: the interface the mailbox core is written against
#   - IMAPClient: its implementation on top of aioimaplib
#
# All session failures are raised as TransportError subclasses.
# =============================================================================

from mailmirror.imap.client import (
    IMAPClient,
    IMAPConnectionError,
    IMAPAuthenticationError,
    IMAPCommandError,
    ConnectionState,
)
from mailmirror.imap.session import (
    EnvelopeParts,
    FlagAction,
    FolderStatus,
    RemoteMailSession,
    SequenceRange,
    TransportError,
)

__all__ = [
    # Interface
    "RemoteMailSession",
    "EnvelopeParts",
    "FlagAction",
    "FolderStatus",
    "SequenceRange",
    "TransportError",
    # Client
    "IMAPClient",
    "IMAPConnectionError",
    "IMAPAuthenticationError",
    "IMAPCommandError",
    "ConnectionState",
]
