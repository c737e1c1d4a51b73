# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailmirror test suite.
#
# FakeMailSession is an in-memory RemoteMailSession. Every folder is a list
# of FakeMessage in sequence order (index 0 is sequence number 1). It records
# every call, can be told to fail (or run a callback during) the next call
# of a given method, and tracks how many calls were ever in flight at once.
# =============================================================================

import asyncio
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Sequence

import pytest

from mailmirror.core import Account, EnvelopeSummary, Folder, FolderState, MessageFlags
from mailmirror.diagnostics import ErrorReporter
from mailmirror.imap.session import (
    EnvelopeParts,
    FlagAction,
    FolderStatus,
    RemoteMailSession,
    SequenceRange,
    TransportError,
)
from mailmirror.mailbox import (
    FolderRegistry,
    MailboxController,
    MutationCoordinator,
    PaginationEngine,
    SessionGuard,
)


# =============================================================================
# Fake session
# =============================================================================

@dataclass
class FakeMessage:
    uid: int
    subject: str
    seen: bool = True


class FakeMailSession(RemoteMailSession):
    """In-memory stand-in for an IMAP server holding one account."""

    def __init__(self) -> None:
        self.mailboxes: dict[str, list[FakeMessage]] = {}
        self.selected: str | None = None
        self.calls: list[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._failures: dict[str, list[Exception]] = {}
        self._hooks: dict[str, list[Callable[[], None]]] = {}
        self._next_uid = 101

    # -------------------------------------------------------------------------
    # Test setup helpers
    # -------------------------------------------------------------------------

    def add_folder(self, name: str, count: int = 0, unread: int = 0) -> list[FakeMessage]:
        """Create a folder with `count` messages; the newest `unread` are unseen."""
        messages = []
        for seq in range(1, count + 1):
            messages.append(
                FakeMessage(
                    uid=self._allocate_uid(),
                    subject=f"{name} message {seq}",
                    seen=seq <= count - unread,
                )
            )
        self.mailboxes[name] = messages
        return messages

    def fail_next(self, method: str, error: Exception | None = None) -> None:
        """Make the next call of `method` raise."""
        self._failures.setdefault(method, []).append(
            error or TransportError(f"{method} failed (injected)")
        )

    def on_next_call(self, method: str, callback: Callable[[], None]) -> None:
        """Run `callback` while the next call of `method` is in flight."""
        self._hooks.setdefault(method, []).append(callback)

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    def _allocate_uid(self) -> int:
        uid = self._next_uid
        self._next_uid += 1
        return uid

    async def _enter(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield so that concurrent callers get a chance to interleave
            await asyncio.sleep(0)
            hooks = self._hooks.get(method)
            if hooks:
                hooks.pop(0)()
            failures = self._failures.get(method)
            if failures:
                raise failures.pop(0)
        finally:
            self.in_flight -= 1

    def _selected_messages(self) -> list[FakeMessage]:
        if self.selected is None:
            raise TransportError("No folder selected")
        return self.mailboxes[self.selected]

    # -------------------------------------------------------------------------
    # RemoteMailSession
    # -------------------------------------------------------------------------

    async def list_folders(self) -> list[Folder]:
        await self._enter("list_folders")
        return [Folder.from_path(name) for name in self.mailboxes]

    async def folder_status(self, name: str) -> FolderStatus:
        await self._enter("folder_status", name)
        if name not in self.mailboxes:
            raise TransportError(f"No such folder: {name}")
        messages = self.mailboxes[name]
        return FolderStatus(
            message_count=len(messages),
            unread_count=sum(1 for m in messages if not m.seen),
        )

    async def select_folder(self, name: str) -> None:
        self.selected = None
        await self._enter("select_folder", name)
        if name not in self.mailboxes:
            raise TransportError(f"No such folder: {name}")
        self.selected = name

    async def fetch_envelopes(
        self,
        seq_range: SequenceRange,
        parts: EnvelopeParts,
        max_per_call: int,
    ) -> list[EnvelopeSummary]:
        await self._enter("fetch_envelopes", str(seq_range))
        messages = self._selected_messages()
        low = max(seq_range.low, seq_range.high - max_per_call + 1)
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)

        summaries = []
        for seq in range(low, min(seq_range.high, len(messages)) + 1):
            message = messages[seq - 1]
            summaries.append(
                EnvelopeSummary(
                    uid=message.uid,
                    sequence=seq,
                    subject=message.subject,
                    sender="sender@example.com",
                    date=base + timedelta(minutes=seq),
                    flags=MessageFlags.SEEN if message.seen else MessageFlags.NONE,
                )
            )
        return summaries

    async def delete_messages(self, uids: Sequence[int]) -> None:
        await self._enter("delete_messages", list(uids))
        messages = self._selected_messages()
        messages[:] = [m for m in messages if m.uid not in uids]

    async def move_messages(self, uids: Sequence[int], destination: str) -> None:
        await self._enter("move_messages", list(uids), destination)
        messages = self._selected_messages()
        if destination not in self.mailboxes:
            raise TransportError(f"No such folder: {destination}")
        moving = [m for m in messages if m.uid in uids]
        messages[:] = [m for m in messages if m.uid not in uids]
        for message in moving:
            # A move assigns a new UID in the destination
            self.mailboxes[destination].append(
                FakeMessage(uid=self._allocate_uid(), subject=message.subject, seen=message.seen)
            )

    async def set_flags(self, uids: Sequence[int], flag: str, action: FlagAction) -> None:
        await self._enter("set_flags", list(uids), flag, action)
        for message in self._selected_messages():
            if message.uid in uids and flag == "\\Seen":
                message.seen = action is FlagAction.ADD

    async def clear_folder(self) -> None:
        await self._enter("clear_folder", self.selected)
        self._selected_messages().clear()

    async def create_folder(self, name: str) -> None:
        await self._enter("create_folder", name)
        if name in self.mailboxes:
            raise TransportError(f"Folder exists: {name}")
        self.mailboxes[name] = []

    async def delete_folder(self, name: str) -> None:
        await self._enter("delete_folder", name)
        if name not in self.mailboxes:
            raise TransportError(f"No such folder: {name}")
        del self.mailboxes[name]
        if self.selected == name:
            self.selected = None


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_account():
    """Create a sample Account for testing."""
    return Account(
        name="test",
        email="test@example.com",
        imap_host="imap.example.com",
        imap_port=993,
        imap_security="ssl",
    )


@pytest.fixture
def session():
    """A fake server with INBOX (100 messages, 5 unread), Archive (3) and Trash (0)."""
    fake = FakeMailSession()
    fake.add_folder("INBOX", 100, unread=5)
    fake.add_folder("Archive", 3)
    fake.add_folder("Trash", 0)
    return fake


@pytest.fixture
def reporter():
    return ErrorReporter()


@pytest.fixture
def guard(session):
    return SessionGuard(session)


@pytest.fixture
def registry(guard, reporter):
    return FolderRegistry(guard, reporter)


@pytest.fixture
def engine(guard, reporter):
    return PaginationEngine(guard, reporter)


@pytest.fixture
def coordinator(guard, registry, reporter):
    return MutationCoordinator(guard, registry, reporter)


@pytest.fixture
def controller(session, reporter):
    return MailboxController(session, reporter=reporter, initial_folder="INBOX")


@pytest.fixture
def inbox_state():
    """A freshly listed INBOX matching the `session` fixture."""
    return FolderState.fresh(Folder.from_path("INBOX"), message_count=100, unread_count=5)
