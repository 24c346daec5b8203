"""Tests for the chat log repository."""

from __future__ import annotations

import pytest

from agentmonitor.infra.store.chat_log import ChatLogRepo


@pytest.fixture
def repo(tmp_path):
    return ChatLogRepo(tmp_path / "chat")


class TestChatLogRepo:
    def test_append_then_read_latest(self, repo):
        repo.append("alice__product-owner", "product-owner", "hello")
        page = repo.read("product-owner__alice", limit=1, before=0)
        assert page.channel == "product-owner__alice"
        assert [m.message for m in page.messages] == ["hello"]
        assert page.total == 1
        assert page.next_before == 1

    def test_append_writes_canonical_file(self, repo, tmp_path):
        repo.append("bob__alice", "alice", "hey")
        assert (tmp_path / "chat" / "alice__bob.log").exists()
        assert repo.list_channels() == ["alice__bob"]

    def test_missing_channel_is_empty(self, repo):
        page = repo.read("product-owner__nobody")
        assert page.messages == ()
        assert page.total == 0
        assert page.next_before == 0

    def test_paging_covers_history(self, repo):
        for i in range(7):
            repo.append("product-owner__alice", "alice", f"m{i}")
        seen = []
        before = 0
        while True:
            page = repo.read("product-owner__alice", limit=3, before=before)
            if not page.messages:
                break
            seen = [m.message for m in page.messages] + seen
            before = page.next_before
        assert seen == [f"m{i}" for i in range(7)]

    def test_page_is_oldest_first(self, repo):
        for i in range(5):
            repo.append("product-owner__alice", "alice", f"m{i}")
        page = repo.read("product-owner__alice", limit=2, before=1)
        assert [m.message for m in page.messages] == ["m2", "m3"]
        assert page.next_before == 3

    def test_before_past_history(self, repo):
        repo.append("product-owner__alice", "alice", "only")
        page = repo.read("product-owner__alice", limit=5, before=10)
        assert page.messages == ()
        assert page.next_before == 1

    def test_clear(self, repo):
        repo.append("product-owner__alice", "alice", "a")
        repo.append("product-owner__alice", "product-owner", "b")
        assert repo.clear("alice__product-owner") == 2
        assert repo.read("product-owner__alice").messages == ()
        assert repo.clear("product-owner__alice") == 0

    def test_clear_missing(self, repo):
        assert repo.clear("product-owner__ghost") == 0

    def test_corrupt_lines_skipped(self, repo, tmp_path):
        repo.append("product-owner__alice", "alice", "good")
        with open(tmp_path / "chat" / "product-owner__alice.log", "a") as f:
            f.write("{not json\n\n")
        repo.append("product-owner__alice", "alice", "also good")
        page = repo.read("product-owner__alice")
        assert [m.message for m in page.messages] == ["good", "also good"]

    @pytest.mark.parametrize("channel", ["", "../escape", ".hidden"])
    def test_rejects_unsafe_names(self, repo, channel):
        with pytest.raises(ValueError):
            repo.append(channel, "alice", "x")

    def test_message_timestamp_format(self, repo):
        entry = repo.append("product-owner__alice", "alice", "hi")
        assert entry.ts.endswith("Z")
        assert len(entry.ts) == len("2024-05-01T10:00:00.000Z")

    def test_invalid_utf8_line_skipped(self, repo, tmp_path):
        repo.append("product-owner__alice", "alice", "good")
        with open(tmp_path / "chat" / "product-owner__alice.log", "ab") as f:
            f.write(b"\xff\xfe garbage\n")
        repo.append("product-owner__alice", "alice", "also good")
        page = repo.read("product-owner__alice")
        assert [m.message for m in page.messages] == ["good", "also good"]
        assert repo.clear("product-owner__alice") == 3
