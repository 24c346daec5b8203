"""Tests for the session table and pending-reply ledger."""

from agentmonitor.services.session_tracker import PendingReplies, SessionTracker


class TestSessionTracker:
    def test_touch_and_end(self, clock):
        tracker = SessionTracker(clock)
        tracker.touch("alice", "product-owner__alice")
        assert tracker.is_active("alice", "product-owner__alice")
        assert tracker.has_active_chat("alice")
        assert tracker.end("alice", "product-owner__alice") is True
        assert not tracker.has_active_chat("alice")
        assert tracker.end("alice", "product-owner__alice") is False

    def test_touch_refreshes(self, clock):
        tracker = SessionTracker(clock)
        tracker.touch("alice", "c")
        clock.advance(100)
        tracker.touch("alice", "c")
        assert tracker.last_activity("alice", "c") == clock.now
        assert len(tracker) == 1

    def test_expired_at_boundary(self, clock):
        tracker = SessionTracker(clock)
        tracker.touch("alice", "c1")
        clock.advance(200)
        tracker.touch("bob", "c2")
        clock.advance(100)
        expired = tracker.expired(300)
        assert [str(k) for k in expired] == ["alice::c1"]

    def test_active_chat_since_is_latest(self, clock):
        tracker = SessionTracker(clock)
        tracker.touch("alice", "c1")
        clock.advance(10)
        tracker.touch("alice", "c2")
        assert tracker.active_chat_since("alice") == clock.now
        assert tracker.active_chat_since("bob") is None


class TestPendingReplies:
    def test_unanswered_is_pending(self, clock):
        pending = PendingReplies(clock)
        pending.record_message("alice", "product-owner")
        reply = pending.get("alice")
        assert reply.is_pending
        assert reply.last_message_from == "product-owner"

    def test_response_clears(self, clock):
        pending = PendingReplies(clock)
        pending.record_message("alice", "product-owner")
        clock.advance(5)
        pending.record_response("alice")
        assert not pending.get("alice").is_pending

    def test_overdue(self, clock):
        pending = PendingReplies(clock)
        pending.record_message("alice", "product-owner")
        clock.advance(60)
        pending.record_message("bob", "product-owner")
        clock.advance(60)
        assert [p.agent_id for p in pending.overdue(120)] == ["alice"]

    def test_no_message_not_tracked(self, clock):
        pending = PendingReplies(clock)
        pending.record_response("alice")
        assert pending.get("alice") is None
        assert pending.overdue(0) == []


class TestRecheck:
    def test_is_expired(self, clock):
        tracker = SessionTracker(clock)
        key = tracker.touch("alice", "c")
        clock.advance(300)
        assert tracker.is_expired(key, 300)
        tracker.touch("alice", "c")
        assert not tracker.is_expired(key, 300)
        tracker.end("alice", "c")
        assert not tracker.is_expired(key, 0)

    def test_is_overdue(self, clock):
        pending = PendingReplies(clock)
        pending.record_message("alice", "product-owner")
        clock.advance(120)
        assert pending.is_overdue("alice", 120)
        pending.record_response("alice")
        assert not pending.is_overdue("alice", 120)
        assert not pending.is_overdue("bob", 0)
