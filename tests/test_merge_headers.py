"""Tests for master_sdk.request.merge_headers."""

from master_sdk.request import merge_headers


class TestMergeHeaders:
    def test_returns_new_mapping(self) -> None:
        base = {"A": "1"}
        merged = merge_headers(base, "B", "2")
        assert merged == {"A": "1", "B": "2"}
        assert merged is not base

    def test_base_not_mutated(self) -> None:
        base = {"A": "1"}
        merge_headers(base, "A", "changed", "B", "2")
        assert base == {"A": "1"}

    def test_added_overwrites_base(self) -> None:
        assert merge_headers({"A": "1"}, "A", "2") == {"A": "2"}

    def test_later_pair_wins(self) -> None:
        assert merge_headers({}, "K", "1", "K", "2", "K", "3") == {"K": "3"}

    def test_no_added(self) -> None:
        assert merge_headers({"A": "1"}) == {"A": "1"}

    def test_none_base(self) -> None:
        assert merge_headers(None, "A", "1") == {"A": "1"}

    def test_odd_length_drops_trailing_key_quirk(self) -> None:
        """Documented quirk: an unpaired trailing key is silently ignored."""
        assert merge_headers({"A": "1"}, "B", "2", "dangling") == {"A": "1", "B": "2"}

    def test_single_unpaired_element_quirk(self) -> None:
        assert merge_headers({"A": "1"}, "dangling") == {"A": "1"}
