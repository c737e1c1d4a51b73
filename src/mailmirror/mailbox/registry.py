# =============================================================================
# Folder Registry
# =============================================================================
# The ordered list of known folders and their cached counts.
#
# Refresh strategy:
#   - refresh() rebuilds everything from a LIST plus one STATUS per folder
#     and swaps in the new snapshot only when every call succeeded. Loaded
#     envelopes and pagination cursors are discarded; every folder reloads
#     from the top.
#   - update_counts() re-STATUSes every folder in place. Folders other than
#     the active one are reset so they reload next time they are opened: a
#     move or delete may have changed them behind our back.
#
# Both are all-or-nothing: on failure the error is reported and nothing
# local changes.
# =============================================================================

import logging

from mailmirror.core import FolderState
from mailmirror.diagnostics import ErrorReporter
from mailmirror.imap.session import FolderStatus
from mailmirror.mailbox.selection import SessionGuard

logger = logging.getLogger(__name__)


class FolderRegistry:
    """
    Owns the FolderState of every remote folder.

    Usage:
        >>> registry = FolderRegistry(guard, reporter)
        >>> if await registry.refresh():
        ...     inbox = registry.find("INBOX")

    Attributes:
        folders: Current snapshot, in server order. Replaced wholesale by
                 refresh(); never mutated as a sequence.
    """

    def __init__(self, guard: SessionGuard, reporter: ErrorReporter) -> None:
        self._guard = guard
        self._reporter = reporter
        self.folders: tuple[FolderState, ...] = ()

    def __len__(self) -> int:
        return len(self.folders)

    def __getitem__(self, index: int) -> FolderState:
        return self.folders[index]

    def __iter__(self):
        return iter(self.folders)

    @property
    def names(self) -> list[str]:
        return [state.name for state in self.folders]

    def find(self, name: str) -> FolderState | None:
        for state in self.folders:
            if state.name == name:
                return state
        return None

    def index_of(self, name: str) -> int | None:
        for i, state in enumerate(self.folders):
            if state.name == name:
                return i
        return None

    async def refresh(self) -> bool:
        """
        Rebuild the folder list from the server.

        Returns:
            True if the new snapshot was committed, False if the previous
            one was kept because a remote call failed.
        """
        logger.debug("Refreshing folder list")
        try:
            async with self._guard.exclusive() as session:
                listed = await session.list_folders()
                snapshot = []
                for folder in listed:
                    status = await session.folder_status(folder.name)
                    snapshot.append(
                        FolderState.fresh(folder, status.message_count, status.unread_count)
                    )
        except Exception as e:
            self._reporter.report("refresh", e)
            return False

        self.folders = tuple(snapshot)
        logger.info(f"Folder list refreshed: {len(self.folders)} folders")
        return True

    async def update_counts(self, active: str | None = None) -> bool:
        """
        Re-read message and unread counts for every known folder.

        Args:
            active: Name of the folder currently shown. Its loaded envelopes
                    are kept; every other folder is reset.

        Returns:
            True if the counts were applied.
        """
        folders = self.folders
        try:
            statuses: list[FolderStatus] = []
            async with self._guard.exclusive() as session:
                for state in folders:
                    statuses.append(await session.folder_status(state.name))
        except Exception as e:
            self._reporter.report("update_counts", e)
            return False

        for state, status in zip(folders, statuses):
            state.message_count = status.message_count
            state.unread_count = status.unread_count
            if state.name != active:
                state.reset()

        logger.debug(f"Updated counts for {len(folders)} folders (kept {active})")
        return True
