"""Tests for client payload parsing."""

import pytest

from relay.engine.payloads import (
    DEFAULT_MEDIA_TYPE,
    parse_attachments,
    parse_create,
    parse_delete,
    parse_edit,
    parse_reply_to,
)
from relay.errors import InvalidPayload
from relay.models import Attachment, ReplyRef


class TestParseCreate:
    """Tests for parse_create."""

    def test_full_payload(self):
        """Test that all fields are carried over."""
        request = parse_create(
            {
                "id": "m1",
                "userId": "u1",
                "name": "Alice",
                "text": "hi",
                "attachments": [{"name": "a.png", "mediaType": "image/png", "url": "/uploads/x"}],
                "replyTo": "m0",
            }
        )
        assert request.message_id == "m1"
        assert request.author_id == "u1"
        assert request.display_name == "Alice"
        assert request.body == "hi"
        assert request.attachments == [Attachment("a.png", "image/png", "/uploads/x")]
        assert request.reply_to == ReplyRef(id="m0")

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "not an object",
            {"userId": "u1"},
            {"id": "", "userId": "u1"},
            {"id": "m1"},
            {"id": "m1", "userId": ""},
            {"id": True, "userId": "u1"},
            {"id": ["m1"], "userId": "u1"},
        ],
    )
    def test_missing_identifiers_rejected(self, payload):
        """Test that id and userId are required."""
        with pytest.raises(InvalidPayload):
            parse_create(payload)

    def test_numeric_ids_accepted(self):
        """Test that numeric identifiers become strings."""
        request = parse_create({"id": 17, "userId": 4})
        assert request.message_id == "17"
        assert request.author_id == "4"

    def test_non_text_fields_normalized(self):
        """Test that wrong-typed optional fields fall back to defaults."""
        request = parse_create(
            {"id": "m1", "userId": "u1", "name": 5, "text": {"x": 1}, "attachments": "nope"}
        )
        assert request.display_name == ""
        assert request.body == ""
        assert request.attachments == []
        assert request.reply_to is None


class TestParseAttachments:
    """Tests for parse_attachments."""

    def test_drops_malformed_items(self):
        """Test that non-objects and url-less entries are skipped."""
        attachments = parse_attachments(
            ["x", 3, {"name": "no-url"}, {"name": "ok", "mediaType": "text/plain", "url": "/u/1"}]
        )
        assert attachments == [Attachment("ok", "text/plain", "/u/1")]

    def test_type_alias_and_default(self):
        """Test `type` as mediaType alias and the fallback media type."""
        attachments = parse_attachments(
            [{"name": "a", "type": "image/gif", "url": "/u/a"}, {"url": "/u/b"}]
        )
        assert attachments[0].media_type == "image/gif"
        assert attachments[1].media_type == DEFAULT_MEDIA_TYPE
        assert attachments[1].name == ""


class TestParseReplyTo:
    """Tests for parse_reply_to."""

    def test_object_reference(self):
        """Test a {id, name, text} reference."""
        assert parse_reply_to({"id": "m0", "name": "Bob", "text": "yo"}) == ReplyRef(
            id="m0", name="Bob", text="yo"
        )

    @pytest.mark.parametrize("raw", [None, "", 5, {"name": "no id"}, []])
    def test_unusable_reference(self, raw):
        """Test that unusable references are dropped."""
        assert parse_reply_to(raw) is None


class TestParseEdit:
    """Tests for parse_edit."""

    def test_message_id_and_new_text(self):
        """Test the messageId / newText spelling."""
        request = parse_edit({"messageId": "m1", "userId": "u1", "newText": "x"})
        assert (request.message_id, request.author_id, request.new_body) == ("m1", "u1", "x")

    def test_id_and_text_aliases(self):
        """Test the id / text spelling."""
        request = parse_edit({"id": "m1", "userId": "u1", "text": "y"})
        assert (request.message_id, request.new_body) == ("m1", "y")

    def test_non_text_body_is_none(self):
        """Test that a non-string new text leaves the body unchanged."""
        assert parse_edit({"id": "m1", "userId": "u1", "newText": 42}).new_body is None

    def test_missing_user_rejected(self):
        """Test that userId is required."""
        with pytest.raises(InvalidPayload):
            parse_edit({"id": "m1", "newText": "x"})


class TestParseDelete:
    """Tests for parse_delete."""

    def test_aliases(self):
        """Test both id spellings."""
        assert parse_delete({"messageId": "m1", "userId": "u1"}).message_id == "m1"
        assert parse_delete({"id": "m2", "userId": "u1"}).message_id == "m2"

    def test_missing_id_rejected(self):
        """Test that the target id is required."""
        with pytest.raises(InvalidPayload):
            parse_delete({"userId": "u1"})
