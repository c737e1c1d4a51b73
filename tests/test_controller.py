# =============================================================================
# Mailbox Controller Tests
# =============================================================================

import pytest
import pytest_asyncio

from mailmirror.mailbox import MailboxController, MarkAs


@pytest_asyncio.fixture
async def started(controller):
    """Controller after startup: folders listed, first INBOX page loaded."""
    assert await controller.load_info()
    return controller


# =============================================================================
# Startup and selection
# =============================================================================

class TestLoadInfo:
    @pytest.mark.asyncio
    async def test_lists_folders_and_loads_first_page(self, started, session):
        assert [f.name for f in started.folders] == ["INBOX", "Archive", "Trash"]
        assert started.active_folder.name == "INBOX"
        assert len(started.envelopes) == 50
        assert started.more_available
        assert not started.is_working
        assert not started.is_messages_loading

    @pytest.mark.asyncio
    async def test_initial_folder_is_honoured(self, session, reporter):
        controller = MailboxController(session, reporter=reporter, initial_folder="Archive")
        await controller.load_info()
        assert controller.selected_folder == 1
        assert len(controller.envelopes) == 3

    @pytest.mark.asyncio
    async def test_unknown_initial_folder_falls_back_to_first(self, session, reporter):
        controller = MailboxController(session, reporter=reporter, initial_folder="Nope")
        await controller.load_info()
        assert controller.active_folder.name == "INBOX"

    @pytest.mark.asyncio
    async def test_refresh_failure(self, controller, session, reporter):
        session.fail_next("list_folders")
        assert not await controller.load_info()
        assert controller.folders == ()
        assert controller.active_folder is None
        assert controller.envelopes is None
        assert reporter.last.operation == "refresh"


class TestSelectFolder:
    @pytest.mark.asyncio
    async def test_loads_unloaded_folder(self, started, session):
        await started.select_folder(1)
        assert started.active_folder.name == "Archive"
        assert [e.subject for e in started.envelopes] == [
            "Archive message 3",
            "Archive message 2",
            "Archive message 1",
        ]

    @pytest.mark.asyncio
    async def test_loaded_folder_is_only_reselected(self, started, session):
        await started.select_folder(1)
        fetches = len(session.calls_to("fetch_envelopes"))

        await started.select_folder(0)
        assert len(session.calls_to("fetch_envelopes")) == fetches
        assert session.calls_to("select_folder")[-1] == ("select_folder", "INBOX")
        assert len(started.envelopes) == 50

    @pytest.mark.asyncio
    async def test_empty_folder(self, started, session):
        await started.select_folder(2)
        assert not started.envelopes
        assert not started.more_available

    @pytest.mark.asyncio
    async def test_index_out_of_range(self, started):
        with pytest.raises(IndexError):
            await started.select_folder(3)

    @pytest.mark.asyncio
    async def test_listeners_are_notified(self, started):
        seen = []
        started.add_listener(seen.append)
        await started.select_folder(1)
        assert "selected_folder" in seen
        assert "envelopes" in seen

        started.remove_listener(seen.append)
        seen.clear()
        await started.select_folder(0)
        assert seen == []


# =============================================================================
# Paging and list state
# =============================================================================

class TestListState:
    @pytest.mark.asyncio
    async def test_load_more(self, started):
        result = await started.load_more()
        assert result.loaded == 50
        assert len(started.envelopes) == 100
        assert not started.more_available

    @pytest.mark.asyncio
    async def test_load_more_button_follows_list_bottom(self, started):
        assert not started.is_load_more_visible
        started.at_list_bottom = True
        assert started.is_load_more_visible

        await started.load_more()
        assert not started.at_list_bottom
        started.at_list_bottom = True
        assert not started.is_load_more_visible

    @pytest.mark.asyncio
    async def test_all_checked(self, started):
        started.all_checked = True
        assert started.checked_count == 50
        started.all_checked = False
        assert started.checked_count == 0

    @pytest.mark.asyncio
    async def test_move_targets_exclude_active_folder(self, started):
        assert started.move_targets == ["Archive", "Trash"]
        await started.select_folder(1)
        assert started.move_targets == ["INBOX", "Trash"]


# =============================================================================
# Commands
# =============================================================================

class TestCommands:
    @pytest.mark.asyncio
    async def test_read_message_refreshes_counts(self, started, session):
        envelope = started.envelopes[0]
        # Opening the message in a reader marks it \Seen on the server
        session.mailboxes["INBOX"][-1].seen = True

        await started.read_message(envelope)
        assert started.active_folder.unread_count == 4
        assert len(started.envelopes) == 50

    @pytest.mark.asyncio
    async def test_bulk_mutations(self, started, session):
        started.envelopes[0].is_checked = True
        started.envelopes[1].is_checked = True

        result = await started.mark_messages(MarkAs.READ)
        assert result.affected == 2
        assert started.active_folder.unread_count == 3

        result = await started.move_messages("Trash")
        assert result.affected == 2
        assert len(started.envelopes) == 48
        assert started.folders[2].message_count == 2

        started.envelopes[0].is_checked = True
        result = await started.delete_messages()
        assert result.affected == 1
        assert started.active_folder.message_count == 97

    @pytest.mark.asyncio
    async def test_delete_and_mark_single(self, started):
        envelope = started.envelopes[0]
        assert started.mark_message(envelope) == -1
        assert started.active_folder.unread_count == 4

        result = await started.delete_message(envelope)
        assert result.affected == 1
        assert envelope not in started.envelopes


class TestFolderManagement:
    @pytest.mark.asyncio
    async def test_create_folder(self, started, session):
        assert await started.create_folder("Projects")
        assert "Projects" in [f.name for f in started.folders]
        assert started.active_folder.name == "INBOX"

    @pytest.mark.asyncio
    async def test_create_existing_folder_fails(self, started, reporter):
        assert not await started.create_folder("Archive")
        assert reporter.last.operation == "create_folder"

    @pytest.mark.asyncio
    async def test_delete_active_folder(self, started, session):
        await started.select_folder(1)
        assert await started.delete_folder()
        assert [f.name for f in started.folders] == ["INBOX", "Trash"]
        assert started.active_folder.name == "INBOX"
        assert len(started.envelopes) == 50

    @pytest.mark.asyncio
    async def test_clear_folder(self, started, session):
        await started.select_folder(1)
        result = await started.clear_folder()
        assert result.success
        assert started.active_folder.name == "Archive"
        assert started.active_folder.message_count == 0
        assert not started.envelopes
        assert session.mailboxes["Archive"] == []
