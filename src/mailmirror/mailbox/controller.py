# =============================================================================
# Mailbox Controller
# =============================================================================
# The facade a user interface binds to. It wires the registry, pagination
# engine and mutation coordinator to one session guard, and exposes:
#
#   - observable state: folder list, selected folder, its envelopes, busy
#     flags, "load more" visibility and the select-all checkbox
#   - commands: refresh, load more, per-envelope and bulk mutations, and
#     folder management (create / delete / clear)
#
# Change notification is a plain list of callbacks receiving the name of the
# property that changed. Selecting a folder calls the reload routine
# directly; there is no event bus.
# =============================================================================

import logging
from typing import TYPE_CHECKING, Callable

from mailmirror.core import Envelope, FolderState
from mailmirror.diagnostics import ErrorReporter
from mailmirror.imap.session import RemoteMailSession
from mailmirror.mailbox.mutations import MarkAs, MutationCoordinator, MutationResult
from mailmirror.mailbox.pagination import (
    DEFAULT_MAX_PER_CALL,
    MAX_PAGE_SIZE,
    PageResult,
    PaginationEngine,
    more_available,
)
from mailmirror.mailbox.registry import FolderRegistry
from mailmirror.mailbox.selection import SessionGuard
from mailmirror.mailbox.store import EnvelopeStore

if TYPE_CHECKING:
    from mailmirror.config import MailboxConfig

logger = logging.getLogger(__name__)

# Type alias for change listeners; receives the changed property's name
ChangeListener = Callable[[str], None]


class MailboxController:
    """
    View-model for one mailbox session.

    Usage:
        >>> controller = MailboxController(IMAPClient(account))
        >>> controller.add_listener(lambda prop: redraw(prop))
        >>> await controller.load_info()
        >>> await controller.select_folder(2)
        >>> controller.envelopes[0].subject
    """

    def __init__(
        self,
        session: RemoteMailSession,
        *,
        reporter: ErrorReporter | None = None,
        page_size: int = MAX_PAGE_SIZE,
        max_per_call: int = DEFAULT_MAX_PER_CALL,
        initial_folder: str | None = None,
    ) -> None:
        """
        Args:
            session: The remote session (connected or able to connect).
            reporter: Error channel; a fresh one is created if omitted.
            page_size: Envelopes per page (capped at 50).
            max_per_call: Passed through to the session's fetch.
            initial_folder: Folder to select after the first refresh, if it
                            exists; otherwise the first listed folder.
        """
        self.reporter = reporter or ErrorReporter()
        self.guard = SessionGuard(session)
        self.registry = FolderRegistry(self.guard, self.reporter)
        self.pagination = PaginationEngine(
            self.guard, self.reporter, page_size=page_size, max_per_call=max_per_call
        )
        self.mutations = MutationCoordinator(self.guard, self.registry, self.reporter)
        self.initial_folder = initial_folder

        self._listeners: list[ChangeListener] = []
        self._selected_folder = 0
        self._is_working = False
        self._is_messages_loading = False
        self._at_list_bottom = False
        self._is_load_more_visible = False
        self._all_checked = False

    @classmethod
    def from_config(
        cls,
        session: RemoteMailSession,
        config: "MailboxConfig",
        *,
        reporter: ErrorReporter | None = None,
    ) -> "MailboxController":
        """Build a controller using the [mailbox] section of the config."""
        return cls(
            session,
            reporter=reporter,
            page_size=config.page_size,
            max_per_call=config.max_per_call,
            initial_folder=config.initial_folder or None,
        )

    # =========================================================================
    # Change notification
    # =========================================================================

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self, prop: str) -> None:
        for listener in list(self._listeners):
            listener(prop)

    def _set(self, attr: str, value) -> None:
        if getattr(self, f"_{attr}") == value:
            return
        setattr(self, f"_{attr}", value)
        self._changed(attr)

    # =========================================================================
    # Observable state
    # =========================================================================

    @property
    def folders(self) -> tuple[FolderState, ...]:
        return self.registry.folders

    @property
    def selected_folder(self) -> int:
        """Index of the active folder in `folders`."""
        return self._selected_folder

    @property
    def active_folder(self) -> FolderState | None:
        if not self.registry.folders:
            return None
        return self.registry.folders[self._selected_folder]

    @property
    def envelopes(self) -> EnvelopeStore | None:
        """Envelopes of the active folder, newest first."""
        active = self.active_folder
        return active.envelopes if active else None

    @property
    def is_working(self) -> bool:
        """True while the folder list is being (re)built."""
        return self._is_working

    @property
    def is_messages_loading(self) -> bool:
        """True while a page of envelopes is being fetched."""
        return self._is_messages_loading

    @property
    def more_available(self) -> bool:
        active = self.active_folder
        return bool(active) and more_available(active)

    @property
    def at_list_bottom(self) -> bool:
        return self._at_list_bottom

    @at_list_bottom.setter
    def at_list_bottom(self, value: bool) -> None:
        """Set by the UI when the list is scrolled to its end."""
        self._set("at_list_bottom", value)
        self._set("is_load_more_visible", value and self.more_available)

    @property
    def is_load_more_visible(self) -> bool:
        return self._is_load_more_visible

    @property
    def all_checked(self) -> bool:
        return self._all_checked

    @all_checked.setter
    def all_checked(self, value: bool) -> None:
        """The select-all checkbox: (un)checks every envelope of the active folder."""
        self._all_checked = value
        if self.envelopes is not None:
            self.envelopes.set_all_checked(value)
        self._changed("all_checked")
        self._changed("envelopes")

    @property
    def checked_count(self) -> int:
        return self.envelopes.checked_count if self.envelopes is not None else 0

    @property
    def move_targets(self) -> list[str]:
        """Folder names offered as destinations for "move to"."""
        active = self.active_folder
        return [name for name in self.registry.names if not active or name != active.name]

    # =========================================================================
    # Folder list and selection
    # =========================================================================

    async def load_info(self) -> bool:
        """
        Rebuild the folder list, then load the first page of the selected
        folder. Used at startup and after folder management operations.
        """
        self._set("is_working", True)
        previous = self.active_folder.name if self.active_folder else self.initial_folder
        try:
            refreshed = await self.registry.refresh()
        finally:
            self._set("is_working", False)

        if refreshed:
            index = self.registry.index_of(previous) if previous else None
            self._selected_folder = index if index is not None else 0
            self._changed("folders")
            self._changed("selected_folder")

        if self.active_folder is None:
            return refreshed

        await self._load_page(self.active_folder)
        return refreshed

    async def select_folder(self, index: int) -> None:
        """
        Make folder `index` active and load it if it has nothing loaded yet.

        Raises:
            IndexError: If index is not a valid folder index.
        """
        if not 0 <= index < len(self.registry.folders):
            raise IndexError(f"Folder index {index} out of range (0..{len(self.registry.folders) - 1})")

        self._selected_folder = index
        self._all_checked = False
        self._changed("selected_folder")
        await self._on_selected_folder_changed()

    async def _on_selected_folder_changed(self) -> None:
        active = self.active_folder
        if active is None:
            return

        if not active.is_loaded or len(active.envelopes) == 0:
            await self._load_page(active)
        else:
            # Already loaded: only the session needs to follow the selection
            try:
                async with self.guard.folder(active.name):
                    pass
            except Exception as e:
                self.reporter.report("select_folder", e)
        self._changed("envelopes")

    async def load_more(self) -> PageResult:
        """Fetch the next older page of the active folder."""
        active = self.active_folder
        if active is None:
            return PageResult()
        return await self._load_page(active)

    async def _load_page(self, state: FolderState) -> PageResult:
        self._set("is_messages_loading", True)
        self.at_list_bottom = False
        try:
            result = await self.pagination.load_next_page(state)
        finally:
            self._set("is_messages_loading", False)
        self._changed("envelopes")
        return result

    async def update_folders(self) -> bool:
        """Re-read counts for every folder, keeping the active one loaded."""
        active = self.active_folder
        updated = await self.registry.update_counts(active=active.name if active else None)
        if updated:
            self._changed("folders")
        return updated

    async def read_message(self, envelope: Envelope) -> None:
        """
        Called when the reader for `envelope` is closed. The server marks a
        message \\Seen when its body is fetched, so counts are re-read.
        """
        logger.debug(f"Closed message {envelope.uid}")
        await self.update_folders()

    # =========================================================================
    # Mutations
    # =========================================================================

    async def delete_message(self, envelope: Envelope) -> MutationResult:
        return await self._mutate(self.mutations.delete_message, envelope)

    def mark_message(self, envelope: Envelope) -> int:
        """Optimistically toggle one envelope's read state (no server call)."""
        active = self.active_folder
        if active is None:
            return 0
        delta = self.mutations.mark_message(active, envelope)
        if delta:
            self._changed("envelopes")
            self._changed("folders")
        return delta

    async def delete_messages(self) -> MutationResult:
        return await self._mutate(self.mutations.delete_messages)

    async def move_messages(self, destination: str) -> MutationResult:
        return await self._mutate(self.mutations.move_messages, destination)

    async def mark_messages(self, mark_as: MarkAs) -> MutationResult:
        return await self._mutate(self.mutations.mark_messages, mark_as)

    async def _mutate(self, operation, *args) -> MutationResult:
        active = self.active_folder
        if active is None:
            return MutationResult()
        result = await operation(active, *args)
        if result.affected:
            self._changed("envelopes")
            self._changed("folders")
        return result

    # =========================================================================
    # Folder management
    # =========================================================================
    # Confirmation prompts are the UI's business; these run unconditionally.

    async def create_folder(self, name: str) -> bool:
        try:
            async with self.guard.exclusive() as session:
                await session.create_folder(name)
        except Exception as e:
            self.reporter.report("create_folder", e)
            return False
        await self.load_info()
        return True

    async def delete_folder(self) -> bool:
        """Delete the active folder on the server and reload the folder list."""
        active = self.active_folder
        if active is None:
            return False
        try:
            async with self.guard.exclusive() as session:
                await session.delete_folder(active.name)
                if self.guard.selected_folder == active.name:
                    self.guard.forget()
        except Exception as e:
            self.reporter.report("delete_folder", e)
            return False
        await self.load_info()
        return True

    async def clear_folder(self) -> MutationResult:
        """Delete every message of the active folder."""
        active = self.active_folder
        if active is None:
            return MutationResult()
        result = await self.mutations.clear_folder(active)
        if result.success:
            await self.load_info()
        return result
