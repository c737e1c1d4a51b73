# =============================================================================
# Mutation Coordinator
# =============================================================================
# Runs delete / move / mark operations against envelopes of the active folder.
#
# Every batched operation follows the same steps:
#   1. Collect   the target envelopes (one explicit envelope, or all checked)
#   2. Guard     an empty target set is a silent no-op
#   3. Translate targets to UIDs
#   4. Remote    exactly one batched session call carrying every UID
#   5. Reconcile local state, only after the remote call succeeded
#   6. Refresh   counts of every folder (a move changes two of them)
#
# If step 4 fails the error is reported and nothing local changes: no
# envelope removed, no flag flipped, no count touched.
#
# The single-envelope read/unread toggle (mark_message) is different: it is
# purely local and optimistic and never contacts the server.
# =============================================================================

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Sequence

from mailmirror.core import Envelope, FolderState
from mailmirror.diagnostics import ErrorReporter
from mailmirror.imap.session import FlagAction, RemoteMailSession
from mailmirror.mailbox.registry import FolderRegistry
from mailmirror.mailbox.selection import SessionGuard
from mailmirror.mailbox.store import EnvelopeStore

logger = logging.getLogger(__name__)

SEEN_FLAG = "\\Seen"

# A batched remote call: (session, uids) -> None
RemoteCall = Callable[[RemoteMailSession, list[int]], Awaitable[None]]


class MarkAs(Enum):
    """Target state for a bulk read/unread operation."""
    READ = "read"
    UNREAD = "unread"


@dataclass
class MutationResult:
    """
    Result of a mutation.

    Attributes:
        success: False if the remote call failed (local state untouched).
        affected: Envelopes the operation applied to (0 for a no-op).
        counts_refreshed: Whether the follow-up count refresh succeeded.
        errors: Error messages, if any.
    """
    success: bool = True
    affected: int = 0
    counts_refreshed: bool = False
    errors: list[str] = field(default_factory=list)


class MutationCoordinator:
    """
    Applies user mutations remotely first, then locally.

    Usage:
        >>> coordinator = MutationCoordinator(guard, registry, reporter)
        >>> result = await coordinator.delete_messages(active_state)
        >>> result.affected
        3
    """

    def __init__(
        self,
        guard: SessionGuard,
        registry: FolderRegistry,
        reporter: ErrorReporter,
    ) -> None:
        self._guard = guard
        self._registry = registry
        self._reporter = reporter

    # =========================================================================
    # Batched operations
    # =========================================================================

    async def delete_message(self, state: FolderState, envelope: Envelope) -> MutationResult:
        """Delete one envelope from the server, then from the store."""
        targets = [envelope] if state.envelopes and envelope in state.envelopes else []
        return await self._execute(
            state,
            "delete_message",
            targets,
            lambda session, uids: session.delete_messages(uids),
            self._remove_targets,
        )

    async def delete_messages(self, state: FolderState) -> MutationResult:
        """Delete every checked envelope of `state`."""
        return await self._execute(
            state,
            "delete_messages",
            self._checked(state),
            lambda session, uids: session.delete_messages(uids),
            self._remove_targets,
        )

    async def move_messages(self, state: FolderState, destination: str) -> MutationResult:
        """Move every checked envelope of `state` to the `destination` folder."""
        if destination == state.name:
            logger.warning(f"Ignoring move of messages from {destination} to itself")
            return MutationResult()

        return await self._execute(
            state,
            "move_messages",
            self._checked(state),
            lambda session, uids: session.move_messages(uids, destination),
            self._remove_targets,
        )

    async def mark_messages(self, state: FolderState, mark_as: MarkAs) -> MutationResult:
        """Set or clear \\Seen on every checked envelope of `state`."""
        seen = mark_as is MarkAs.READ
        action = FlagAction.ADD if seen else FlagAction.REMOVE

        def reconcile(store: EnvelopeStore, targets: Sequence[Envelope]) -> None:
            for envelope in targets:
                if envelope in store:
                    state.unread_count += store.set_seen(envelope, seen)

        return await self._execute(
            state,
            f"mark_messages({mark_as.value})",
            self._checked(state),
            lambda session, uids: session.set_flags(uids, SEEN_FLAG, action),
            reconcile,
        )

    async def clear_folder(self, state: FolderState) -> MutationResult:
        """
        Delete every message in `state`, loaded or not.

        On success the folder is left loaded and empty.
        """
        try:
            async with self._guard.folder(state.name) as session:
                await session.clear_folder()
        except Exception as e:
            report = self._reporter.report("clear_folder", e)
            return MutationResult(success=False, errors=[report.message])

        affected = state.message_count
        state.envelopes = EnvelopeStore()
        state.last_loaded_index = 0
        refreshed = await self._registry.update_counts(active=state.name)
        logger.info(f"Cleared {state.name} ({affected} messages)")
        return MutationResult(affected=affected, counts_refreshed=refreshed)

    # =========================================================================
    # Local-only toggle
    # =========================================================================

    def mark_message(self, state: FolderState, envelope: Envelope) -> int:
        """
        Toggle one envelope's read state locally, without a server round trip.

        Returns:
            The delta applied to the folder's unread counter.
        """
        if state.envelopes is None or envelope not in state.envelopes:
            return 0
        delta = state.envelopes.toggle_seen(envelope)
        state.unread_count += delta
        return delta

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _checked(state: FolderState) -> list[Envelope]:
        if state.envelopes is None:
            return []
        return state.envelopes.checked_envelopes()

    @staticmethod
    def _remove_targets(store: EnvelopeStore, targets: Sequence[Envelope]) -> None:
        uids = {e.uid for e in targets}
        store.remove_all(lambda e: e.uid in uids)

    async def _execute(
        self,
        state: FolderState,
        operation: str,
        targets: list[Envelope],
        remote_call: RemoteCall,
        reconcile: Callable[[EnvelopeStore, Sequence[Envelope]], None],
    ) -> MutationResult:
        """Run the collect / guard / translate / remote / reconcile / refresh steps."""
        if not targets or state.envelopes is None:
            logger.debug(f"{operation}: nothing selected")
            return MutationResult()

        uids = [e.uid for e in targets]
        logger.debug(f"{operation}: {len(uids)} messages in {state.name}")

        try:
            async with self._guard.folder(state.name) as session:
                await remote_call(session, uids)

                # A count refresh queued ahead of us may have reset this
                # folder; it reloads from the server, so there is nothing
                # local left to reconcile
                store = state.envelopes
                if store is not None:
                    reconcile(store, targets)
                else:
                    logger.debug(f"{operation}: {state.name} was reset, skipping reconcile")
        except Exception as e:
            report = self._reporter.report(operation, e)
            return MutationResult(success=False, errors=[report.message])

        refreshed = await self._registry.update_counts(active=state.name)

        logger.info(f"{operation}: applied to {len(uids)} messages in {state.name}")
        return MutationResult(affected=len(uids), counts_refreshed=refreshed)
