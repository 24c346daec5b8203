"""Tests for channel canonicalization."""

import pytest

from agentmonitor.services.channels import (
    canonicalize,
    hub_channel,
    normalize_channel,
    other_participant,
    parse_participants,
    validate_name,
)


class TestParseParticipants:
    def test_single_participant(self):
        assert parse_participants("alice") == ["alice"]

    def test_splits_on_delimiter(self):
        assert parse_participants("bob__alice") == ["bob", "alice"]

    def test_drops_empty_parts(self):
        assert parse_participants("__alice__ __bob") == ["alice", "bob"]


class TestCanonicalize:
    def test_hub_leads(self):
        assert canonicalize(["alice", "product-owner"]) == "product-owner__alice"

    def test_sorted_without_hub(self):
        assert canonicalize(["zed", "bob", "alice"]) == "alice__bob__zed"

    def test_duplicates_collapse(self):
        assert canonicalize(["alice", "alice"]) == "alice"

    def test_empty(self):
        assert canonicalize([]) == ""
        assert canonicalize(["", ""]) == ""

    def test_custom_hub(self):
        assert canonicalize(["alice", "zz-lead"], hub="zz-lead") == "zz-lead__alice"

    @pytest.mark.parametrize("a,b", [
        ("alice__bob", "bob__alice"),
        ("product-owner__alice", "alice__product-owner"),
        ("alice__product-owner__bob", "bob__alice__product-owner"),
    ])
    def test_order_independent(self, a, b):
        assert normalize_channel(a) == normalize_channel(b)

    @pytest.mark.parametrize("raw", ["alice", "bob__alice", "alice__product-owner", "x__y__x"])
    def test_idempotent(self, raw):
        once = normalize_channel(raw)
        assert normalize_channel(once) == once

    def test_normalize_falls_back_to_raw(self):
        assert normalize_channel("____") == "____"


class TestHelpers:
    def test_hub_channel(self):
        assert hub_channel("alice") == "product-owner__alice"

    def test_other_participant(self):
        assert other_participant(["product-owner", "alice"]) == "alice"
        assert other_participant(["product-owner"]) == "product-owner"

    @pytest.mark.parametrize("name", ["", ".hidden", "../etc", "a/b", "a\\b", "a\x00b"])
    def test_validate_name_rejects(self, name):
        with pytest.raises(ValueError):
            validate_name(name)

    def test_validate_name_accepts(self):
        assert validate_name("product-owner__alice") == "product-owner__alice"
