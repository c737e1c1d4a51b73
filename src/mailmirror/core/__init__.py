# =============================================================================
# mailmirror Core Module
# =============================================================================
# Plain dataclasses with no external dependencies, importable from anywhere
# without circular imports:
#   - Account: IMAP connection details for one mail account
#   - Folder / FolderState: a listed remote folder and our local view of it
#   - EnvelopeSummary / Envelope: message header summaries and their UI state
# =============================================================================

from mailmirror.core.account import Account
from mailmirror.core.envelope import BodySummary, Envelope, EnvelopeSummary, MessageFlags
from mailmirror.core.folder import Folder, FolderState

__all__ = [
    "Account",
    "Folder",
    "FolderState",
    "BodySummary",
    "Envelope",
    "EnvelopeSummary",
    "MessageFlags",
]
