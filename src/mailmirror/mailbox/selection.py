# =============================================================================
# Session Guard
# =============================================================================
# Owns the one piece of state that IMAP hides inside the connection: which
# folder is currently selected.
#
# Rules:
#   - All remote calls go through the guard and run one at a time under a
#     single asyncio.Lock. The core never has two commands in flight.
#   - A folder-scoped call enters `guard.folder(name)`, which selects `name`
#     (unless it is already selected) and runs the dependent command while
#     still holding the lock, so no other selection can sneak in between.
#   - Any failure inside a guarded block, folder-scoped or exclusive,
#     forgets the selection. The next folder-scoped call re-issues SELECT,
#     which also covers reconnects.
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from mailmirror.imap.session import RemoteMailSession

logger = logging.getLogger(__name__)


class SessionGuard:
    """
    Serializes access to a RemoteMailSession and tracks its selected folder.

    Usage:
        >>> guard = SessionGuard(session)
        >>> async with guard.folder("INBOX") as session:
        ...     await session.fetch_envelopes(...)
        >>> async with guard.exclusive() as session:
        ...     await session.list_folders()
    """

    def __init__(self, session: RemoteMailSession) -> None:
        self.session = session
        self._lock = asyncio.Lock()
        self._selected: str | None = None

    @property
    def selected_folder(self) -> str | None:
        """Folder currently selected on the session, as far as we know."""
        return self._selected

    def forget(self) -> None:
        """Drop the selection (e.g. after the selected folder was deleted)."""
        self._selected = None

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[RemoteMailSession]:
        """Hold the session for a command that does not need a folder."""
        async with self._lock:
            try:
                yield self.session
            except BaseException:
                # The session may have reconnected and lost its selection
                self._selected = None
                raise

    @asynccontextmanager
    async def folder(self, name: str) -> AsyncIterator[RemoteMailSession]:
        """Hold the session with `name` selected."""
        async with self._lock:
            if self._selected != name:
                logger.debug(f"Selecting {name} (was {self._selected})")
                self._selected = None
                await self.session.select_folder(name)
                self._selected = name
            try:
                yield self.session
            except BaseException:
                self._selected = None
                raise
