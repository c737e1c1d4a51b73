# =============================================================================
# Pagination Engine
# =============================================================================
# Loads a folder's envelopes newest-first, one page at a time.
#
# Each folder carries a cursor, last_loaded_index: the highest sequence
# number not yet downloaded. A page is the contiguous range ending at the
# cursor:
#
#     messages:  1 ............................................. 100
#     page 1:                                  [51 ........... 100]  cursor 100 -> 50
#     page 2:    [1 ............ 50]                                 cursor  50 -> 0
#     page 3:    no-op (cursor is 0)
#
# The server returns a page oldest-to-newest; it is reversed before being
# appended so the whole list stays newest-first. The cursor only moves after
# a successful fetch, so retrying a failed page asks for the same range.
# =============================================================================

import logging
from dataclasses import dataclass, field

from mailmirror.core import FolderState
from mailmirror.diagnostics import ErrorReporter
from mailmirror.imap.session import EnvelopeParts, SequenceRange
from mailmirror.mailbox.selection import SessionGuard
from mailmirror.mailbox.store import EnvelopeStore

logger = logging.getLogger(__name__)

# Most messages requested by one page load
MAX_PAGE_SIZE = 50

# "More available" is offered while the cursor is above this value.
# NOTE: the cursor counts messages still to load, so "> 0" would be exact;
# "> 1" hides the load-more button when exactly one message remains.
MORE_AVAILABLE_THRESHOLD = 1

# Upper bound passed to the session for a single FETCH
DEFAULT_MAX_PER_CALL = 1000

# Everything a message list row needs
PAGE_PARTS = (
    EnvelopeParts.STRUCTURE
    | EnvelopeParts.PREVIEW
    | EnvelopeParts.DATE
    | EnvelopeParts.FLAGS
    | EnvelopeParts.UID
)


def more_available(state: FolderState) -> bool:
    """Whether the UI should offer to load another page of `state`."""
    return state.last_loaded_index > MORE_AVAILABLE_THRESHOLD


@dataclass
class PageResult:
    """
    Outcome of one load_next_page() call.

    Attributes:
        success: False if the remote fetch failed (cursor unchanged).
        requested: The range asked for, or None for a no-op.
        loaded: Envelopes actually appended.
        more_available: Whether another page can be offered.
        errors: Error messages, if any.
    """
    success: bool = True
    requested: SequenceRange | None = None
    loaded: int = 0
    more_available: bool = False
    errors: list[str] = field(default_factory=list)


class PaginationEngine:
    """
    Pulls pages of envelopes for a folder into its EnvelopeStore.

    Usage:
        >>> engine = PaginationEngine(guard, reporter)
        >>> result = await engine.load_next_page(inbox_state)
        >>> result.more_available
        True
    """

    def __init__(
        self,
        guard: SessionGuard,
        reporter: ErrorReporter,
        *,
        page_size: int = MAX_PAGE_SIZE,
        max_per_call: int = DEFAULT_MAX_PER_CALL,
    ) -> None:
        """
        Args:
            guard: Serialized access to the remote session.
            reporter: Where fetch failures go.
            page_size: Messages per page; capped at MAX_PAGE_SIZE and at
                       max_per_call.
            max_per_call: Passed through to the session's fetch.
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        if max_per_call < 1:
            raise ValueError(f"max_per_call must be positive, got {max_per_call}")
        self._guard = guard
        self._reporter = reporter
        self.page_size = min(page_size, MAX_PAGE_SIZE, max_per_call)
        self.max_per_call = max_per_call

    def next_range(self, state: FolderState) -> SequenceRange | None:
        """
        The range the next page would request, or None when exhausted.

        Raises:
            OutOfRangeError: If the cursor is above the folder's message
                             count (the cursor and the counts disagree).
        """
        last = state.last_loaded_index
        if last <= 0:
            return None
        if last > state.message_count:
            raise OutOfRangeError(
                f"Cursor {last} is beyond {state.message_count} messages in {state.name}"
            )
        count = min(self.page_size, last)
        return SequenceRange(last - count + 1, last)

    async def load_next_page(self, state: FolderState) -> PageResult:
        """
        Fetch the next (older) page of `state` and append it.

        Concurrent calls are serialized by the session guard; a second call
        waits for the first and then computes its range from the updated
        cursor.

        Returns:
            PageResult describing what happened. Never raises for remote
            failures; those are reported and leave the state untouched.
        """
        if state.last_loaded_index <= 0:
            logger.debug(f"{state.name}: all messages loaded")
            return PageResult(more_available=False)

        try:
            async with self._guard.folder(state.name) as session:
                # Re-read the cursor now that we hold the session; a call
                # queued ahead of us may have moved it
                seq_range = self.next_range(state)
                if seq_range is None:
                    logger.debug(f"{state.name}: all messages loaded")
                    return PageResult(more_available=more_available(state))

                logger.debug(f"{state.name}: loading {seq_range}")
                summaries = await session.fetch_envelopes(
                    seq_range, PAGE_PARTS, self.max_per_call
                )

                # Commit before releasing the session so a queued call sees
                # the moved cursor
                if state.envelopes is None:
                    state.envelopes = EnvelopeStore()
                added = state.envelopes.append(reversed(summaries))
                state.last_loaded_index -= len(seq_range)
        except Exception as e:
            report = self._reporter.report("load_next_page", e)
            return PageResult(
                success=False,
                more_available=more_available(state),
                errors=[report.message],
            )

        logger.info(
            f"{state.name}: loaded {len(added)} envelopes ({seq_range}), "
            f"cursor now {state.last_loaded_index}"
        )
        return PageResult(
            requested=seq_range,
            loaded=len(added),
            more_available=more_available(state),
        )


# =============================================================================
# Exceptions
# =============================================================================

class OutOfRangeError(Exception):
    """Raised when a page would fall outside the folder's sequence numbers."""
    pass
