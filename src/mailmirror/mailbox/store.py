# =============================================================================
# Envelope Store
# =============================================================================
# The ordered, in-memory list of envelopes loaded for one folder.
#
# Ordering: newest first. Pagination walks backwards through the folder, so
# each new page holds older messages than anything already loaded and is
# appended at the tail.
#
# Identity is the UID: removing or looking up an envelope goes by UID, never
# by object identity or list position.
# =============================================================================

from typing import Callable, Iterable, Iterator

from mailmirror.core import Envelope, EnvelopeSummary


class EnvelopeStore:
    """
    Per-folder collection of downloaded envelopes with local UI state.

    Usage:
        >>> store = EnvelopeStore()
        >>> store.append(newest_first_summaries)
        >>> store.set_checked(store[0], True)
        >>> [e.uid for e in store.checked_envelopes()]
    """

    def __init__(self, summaries: Iterable[EnvelopeSummary] = ()) -> None:
        self._envelopes: list[Envelope] = []
        self._by_uid: dict[int, Envelope] = {}
        self.append(summaries)

    # -------------------------------------------------------------------------
    # Collection protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._envelopes)

    def __iter__(self) -> Iterator[Envelope]:
        return iter(self._envelopes)

    def __getitem__(self, index: int) -> Envelope:
        return self._envelopes[index]

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Envelope):
            return item.uid in self._by_uid
        return item in self._by_uid

    def __repr__(self) -> str:
        return f"EnvelopeStore({len(self._envelopes)} envelopes)"

    def get(self, uid: int) -> Envelope | None:
        return self._by_uid.get(uid)

    @property
    def uids(self) -> list[int]:
        """UIDs in list order (newest first)."""
        return [e.uid for e in self._envelopes]

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def append(self, summaries: Iterable[EnvelopeSummary]) -> list[Envelope]:
        """
        Wrap summaries and add them to the tail of the list.

        Summaries must already be newest-first. A UID that is already in the
        store is skipped (sequence numbers shift when messages are expunged
        between page loads, so a page can overlap the previous one).

        Returns:
            The envelopes actually added.
        """
        added = []
        for summary in summaries:
            if summary.uid in self._by_uid:
                continue
            envelope = Envelope(summary)
            self._envelopes.append(envelope)
            self._by_uid[envelope.uid] = envelope
            added.append(envelope)
        return added

    def remove(self, envelope: Envelope | int) -> bool:
        """
        Remove one envelope by UID.

        Returns:
            True if it was present.
        """
        uid = envelope if isinstance(envelope, int) else envelope.uid
        existing = self._by_uid.pop(uid, None)
        if existing is None:
            return False
        self._envelopes = [e for e in self._envelopes if e.uid != uid]
        return True

    def remove_all(self, predicate: Callable[[Envelope], bool]) -> list[Envelope]:
        """
        Remove every envelope matching `predicate`.

        The matches are snapshotted before anything is removed, so the
        predicate always sees the list as it was when the call started.

        Returns:
            The removed envelopes, in list order.
        """
        doomed = [e for e in self._envelopes if predicate(e)]
        if not doomed:
            return []

        doomed_uids = {e.uid for e in doomed}
        self._envelopes = [e for e in self._envelopes if e.uid not in doomed_uids]
        for uid in doomed_uids:
            del self._by_uid[uid]
        return doomed

    # -------------------------------------------------------------------------
    # Local UI state
    # -------------------------------------------------------------------------

    def set_checked(self, envelope: Envelope | int, checked: bool) -> None:
        self._require(envelope).is_checked = checked

    def set_all_checked(self, checked: bool) -> None:
        """Check or uncheck every envelope (the "select all" box)."""
        for envelope in self._envelopes:
            envelope.is_checked = checked

    def toggle_seen(self, envelope: Envelope | int) -> int:
        """
        Flip an envelope's local read state.

        Returns:
            The change to apply to the folder's unread counter: +1 if the
            envelope became unseen, -1 if it became seen.
        """
        target = self._require(envelope)
        target.is_unseen = not target.is_unseen
        return 1 if target.is_unseen else -1

    def set_seen(self, envelope: Envelope | int, seen: bool) -> int:
        """
        Force an envelope's local read state.

        Returns:
            The unread counter delta (0 if nothing changed).
        """
        target = self._require(envelope)
        if target.is_unseen == (not seen):
            return 0
        target.is_unseen = not seen
        return 1 if target.is_unseen else -1

    def checked_envelopes(self) -> list[Envelope]:
        """
        All checked envelopes, oldest-to-newest relative to the list.
        """
        return [e for e in reversed(self._envelopes) if e.is_checked]

    @property
    def checked_count(self) -> int:
        return sum(1 for e in self._envelopes if e.is_checked)

    @property
    def unseen_count(self) -> int:
        return sum(1 for e in self._envelopes if e.is_unseen)

    def _require(self, envelope: Envelope | int) -> Envelope:
        uid = envelope if isinstance(envelope, int) else envelope.uid
        try:
            return self._by_uid[uid]
        except KeyError:
            raise KeyError(f"Envelope with UID {uid} is not in this store") from None
