# =============================================================================
# Mailbox Module
# =============================================================================
# The local mirror of a remote mailbox:
#   - SessionGuard: serialized access to the session and its selected folder
#   - EnvelopeStore: the loaded envelopes of one folder, newest first
#   - FolderRegistry: every folder with its counts
#   - PaginationEngine: newest-first page loading
#   - MutationCoordinator: delete / move / mark, remote first then local
#   - MailboxController: the facade a UI binds to
# =============================================================================

from mailmirror.mailbox.controller import ChangeListener, MailboxController
from mailmirror.mailbox.mutations import MarkAs, MutationCoordinator, MutationResult
from mailmirror.mailbox.pagination import (
    MAX_PAGE_SIZE,
    OutOfRangeError,
    PageResult,
    PaginationEngine,
    more_available,
)
from mailmirror.mailbox.registry import FolderRegistry
from mailmirror.mailbox.selection import SessionGuard
from mailmirror.mailbox.store import EnvelopeStore

__all__ = [
    "ChangeListener",
    "MailboxController",
    "MarkAs",
    "MutationCoordinator",
    "MutationResult",
    "MAX_PAGE_SIZE",
    "OutOfRangeError",
    "PageResult",
    "PaginationEngine",
    "more_available",
    "FolderRegistry",
    "SessionGuard",
    "EnvelopeStore",
]
