"""Tests for data models."""

from datetime import datetime, timezone

from relay.models import Ack, Attachment, Message, OutboundEvent, ReplyRef, ServerEvent


class TestMessage:
    """Tests for Message."""

    def test_defaults(self):
        """Test that new messages are neither edited nor deleted."""
        msg = Message(
            id="m1",
            author_id="u1",
            display_name="Alice",
            body="hi",
            created_at=datetime.now(timezone.utc),
        )
        assert msg.deleted is False
        assert msg.edited is False
        assert msg.attachments == []
        assert msg.reply_to is None

    def test_to_wire(self):
        """Test the client-facing field names."""
        ts = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        msg = Message(
            id="m1",
            author_id="u1",
            display_name="Alice",
            body="hi",
            created_at=ts,
            attachments=[Attachment("a.png", "image/png", "/uploads/x")],
            reply_to=ReplyRef(id="m0"),
        )
        assert msg.to_wire() == {
            "id": "m1",
            "userId": "u1",
            "name": "Alice",
            "text": "hi",
            "createdAt": "2024-01-01T12:00:00+00:00",
            "attachments": [{"name": "a.png", "mediaType": "image/png", "url": "/uploads/x"}],
            "replyTo": {"id": "m0", "name": None, "text": None},
            "deleted": False,
            "deletedAt": None,
            "edited": False,
            "editedAt": None,
        }


class TestAck:
    """Tests for Ack."""

    def test_success(self):
        """Test success payload is merged into the ack."""
        assert Ack.success().to_wire() == {"ok": True}
        assert Ack.success(msg={"id": "m1"}).to_wire() == {"ok": True, "msg": {"id": "m1"}}

    def test_failure(self):
        """Test failure carries the error."""
        assert Ack.failure("nope").to_wire() == {"ok": False, "error": "nope"}


class TestOutboundEvent:
    """Tests for OutboundEvent."""

    def test_to_wire_without_ack_id(self):
        """Test broadcast frames have no ackId."""
        event = OutboundEvent(event=ServerEvent.MESSAGE_CREATED, data={"id": "m1"})
        assert event.to_wire() == {"event": "messageCreated", "data": {"id": "m1"}}

    def test_to_wire_with_ack_id(self):
        """Test ack frames echo the request's ackId."""
        event = OutboundEvent(event=ServerEvent.ACK, data={"ok": True}, ack_id=7)
        assert event.to_wire() == {"event": "ack", "data": {"ok": True}, "ackId": 7}
