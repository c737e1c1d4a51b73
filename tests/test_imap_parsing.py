# =============================================================================
# IMAP Response Parsing Tests
# =============================================================================
# aioimaplib hands back response lines as bytes, with every literal as a
# separate bytearray item following the line that announced it.
# =============================================================================

from datetime import datetime, timezone

from mailmirror.core import MessageFlags
from mailmirror.imap.client import (
    parse_fetch_response,
    parse_folder_line,
    parse_select_response,
    parse_status_response,
)


class TestFolderLines:
    def test_plain_folder(self):
        folder = parse_folder_line(b'(\\HasNoChildren) "/" "INBOX"')
        assert folder.name == "INBOX"
        assert folder.short_name == "INBOX"
        assert folder.delimiter == "/"

    def test_special_use_flag_is_not_noselect(self):
        folder = parse_folder_line(b'(\\HasNoChildren \\Sent) "/" "Sent Messages"')
        assert folder.name == "Sent Messages"

    def test_nested_folder(self):
        folder = parse_folder_line(b'(\\HasNoChildren) "." "Work.Projects"')
        assert folder.name == "Work.Projects"
        assert folder.short_name == "Projects"
        assert folder.delimiter == "."

    def test_noselect_is_skipped(self):
        assert parse_folder_line(b'(\\Noselect \\HasChildren) "/" "[Gmail]"') is None

    def test_completion_line_is_skipped(self):
        assert parse_folder_line(b"LIST completed.") is None

    def test_folder_named_like_a_status_word(self):
        assert parse_folder_line(b'(\\HasNoChildren) "/" "Completed"').name == "Completed"


class TestStatusAndSelect:
    def test_status(self):
        lines = [b'INBOX (MESSAGES 231 UNSEEN 5)', b"STATUS completed."]
        assert parse_status_response(lines) == {"MESSAGES": 231, "UNSEEN": 5}

    def test_select(self):
        lines = [
            b"172 EXISTS",
            b"1 RECENT",
            b"OK [UNSEEN 12] Message 12 is first unseen",
            b"OK [UIDVALIDITY 3857529045] UIDs valid",
        ]
        status = parse_select_response(lines)
        assert status["EXISTS"] == 172
        assert status["UIDVALIDITY"] == 3857529045


class TestFetch:
    def test_full_envelope_with_preview(self):
        lines = [
            b'7 FETCH (UID 1007 FLAGS (\\Seen \\Flagged) INTERNALDATE "17-Jul-1996 02:44:25 -0700" '
            b'ENVELOPE ("Wed, 17 Jul 1996 02:23:25 -0700" "Status report" '
            b'(("Alice Smith" NIL "alice" "example.com")) NIL NIL NIL NIL NIL NIL "<m1@example.com>") '
            b'BODYSTRUCTURE (("TEXT" "PLAIN" ("CHARSET" "utf-8") NIL NIL "7BIT" 11 1 NIL NIL NIL)'
            b'("APPLICATION" "PDF" ("NAME" "r.pdf") NIL NIL "BASE64" 900 NIL ("ATTACHMENT" ("FILENAME" "r.pdf")) NIL) "MIXED") '
            b"BODY[TEXT]<0> {12}",
            bytearray(b"Hello\r\nWorld"),
            b")",
            b"FETCH completed.",
        ]
        [summary] = parse_fetch_response(lines)

        assert summary.uid == 1007
        assert summary.sequence == 7
        assert summary.subject == "Status report"
        assert summary.sender == "alice@example.com"
        assert summary.sender_name == "Alice Smith"
        assert summary.message_id == "<m1@example.com>"
        assert summary.flags == MessageFlags.SEEN | MessageFlags.FLAGGED
        assert summary.date == datetime(1996, 7, 17, 9, 44, 25, tzinfo=timezone.utc)
        assert summary.preview == "Hello World"
        assert summary.body.content_type == "multipart/mixed"
        assert summary.body.has_attachments

    def test_subject_literal_is_inlined(self):
        lines = [
            b"3 FETCH (UID 55 FLAGS () ENVELOPE (NIL {8}",
            bytearray(b'Say "hi"'),
            b" NIL NIL NIL NIL NIL NIL NIL NIL))",
        ]
        [summary] = parse_fetch_response(lines)
        assert summary.uid == 55
        assert summary.subject == 'Say "hi"'
        assert summary.flags == MessageFlags.NONE
        assert summary.preview == ""

    def test_encoded_subject(self):
        lines = [
            b'1 FETCH (UID 9 ENVELOPE (NIL "=?utf-8?q?Gr=C3=BC=C3=9Fe?=" NIL NIL NIL NIL NIL NIL NIL NIL))',
        ]
        [summary] = parse_fetch_response(lines)
        assert summary.subject == "Grüße"

    def test_several_messages(self):
        lines = [
            b"2 FETCH (UID 12 FLAGS ())",
            b"1 FETCH (UID 11 FLAGS (\\Seen))",
        ]
        summaries = parse_fetch_response(lines)
        assert [s.uid for s in summaries] == [12, 11]
        assert [s.sequence for s in summaries] == [2, 1]
