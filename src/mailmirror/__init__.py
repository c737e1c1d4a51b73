# =============================================================================
# mailmirror: A Paged Mirror of a Remote IMAP Mailbox
# =============================================================================
#
# mailmirror keeps a local, paged view of the folders and message envelopes
# of a remote IMAP account, and applies delete / move / mark operations to
# the server first and to the local view second.
#
# Features:
#   - Folder list with message and unread counts
#   - Newest-first page loading of envelopes (50 per page)
#   - Batched delete, move and read/unread marking
#   - Folder create / delete / clear
#   - XDG Base Directory compliant configuration
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailmirror"

# Main entry point - this is what gets called by the 'mailmirror' command
from mailmirror.app import main

__all__ = ["main", "__version__", "__app_name__"]
