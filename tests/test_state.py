"""
Tests for selection state transitions and the copy text they produce.

Run with: pytest tests/test_state.py -v
"""

from src.catalog import CatalogSnapshot
from src.state import (
    SelectionState,
    copy_text,
    current_tags,
    feature_options,
    filtered_bases,
    initial_state,
    select_base,
    select_category,
    set_query,
    toggle_feature,
)


class TestTransitions:
    """Pure transitions over the sample snapshot."""

    def test_initial_state(self, snapshot):
        state = initial_state(snapshot)
        assert state.category == "short_tee"
        assert state.base_code == "3001U"
        assert state.features == frozenset()

    def test_initial_state_empty_catalog(self):
        assert initial_state(CatalogSnapshot()) == SelectionState()

    def test_select_category_resets_base(self, snapshot):
        state = select_category(initial_state(snapshot), snapshot, "hoodie")
        assert state.category == "hoodie"
        assert state.base_code == "18500"

    def test_select_unknown_category_is_ignored(self, snapshot):
        state = initial_state(snapshot)
        assert select_category(state, snapshot, "socks") is state

    def test_select_category_drops_unavailable_toggles(self, snapshot):
        state = toggle_feature(initial_state(snapshot), snapshot, "organic")
        assert "organic" in state.features
        state = select_category(state, snapshot, "hoodie")
        assert state.features == frozenset()

    def test_select_base_within_category(self, snapshot):
        state = select_base(initial_state(snapshot), snapshot, "STTU169")
        assert state.base_code == "STTU169"

    def test_select_base_from_other_category_is_ignored(self, snapshot):
        state = initial_state(snapshot)
        assert select_base(state, snapshot, "18500") is state

    def test_transitions_do_not_mutate(self, snapshot):
        state = initial_state(snapshot)
        toggle_feature(state, snapshot, "organic")
        select_category(state, snapshot, "hoodie")
        assert state == initial_state(snapshot)

    def test_toggle_on_and_off(self, snapshot):
        state = initial_state(snapshot)
        on = toggle_feature(state, snapshot, "organic")
        assert on.features == frozenset({"organic"})
        off = toggle_feature(on, snapshot, "organic")
        assert off.features == frozenset()

    def test_toggle_unavailable_feature_is_ignored(self, snapshot):
        state = select_category(initial_state(snapshot), snapshot, "hoodie")
        assert toggle_feature(state, snapshot, "organic") is state

    def test_toggle_on_inherent_feature_is_kept(self, snapshot):
        # 3001U is made in the USA already
        state = toggle_feature(initial_state(snapshot), snapshot, "usa_made")
        assert state.features == frozenset({"usa_made"})
        assert current_tags(state, snapshot) == ["std", "usa_made"]
        # the toggle follows the user to a base without the flag
        other = select_base(state, snapshot, "STTU169")
        assert current_tags(other, snapshot) == ["mid", "organic", "usa_made"]

    def test_toggle_off_keeps_inherent_tag(self, snapshot):
        state = toggle_feature(initial_state(snapshot), snapshot, "usa_made")
        off = toggle_feature(state, snapshot, "usa_made")
        assert off.features == frozenset()
        assert "usa_made" in current_tags(off, snapshot)

    def test_query_filters_bases(self, snapshot):
        state = set_query(initial_state(snapshot), "  STANLEY ")
        assert [b.code for b in filtered_bases(state, snapshot)] == ["STTU169"]
        assert len(filtered_bases(set_query(state, ""), snapshot)) == 4


class TestDerivedViews:
    def test_feature_options(self, snapshot):
        options = feature_options(initial_state(snapshot), snapshot)
        assert options["usa_made"] == {"available": True, "on": True, "locked": True}
        assert options["organic"] == {"available": True, "on": False, "locked": False}
        assert options["triblend"]["available"] is True

    def test_feature_options_disabled_in_category(self, snapshot):
        state = select_category(initial_state(snapshot), snapshot, "hoodie")
        options = feature_options(state, snapshot)
        assert not any(o["available"] for o in options.values())

    def test_copy_text_with_toggle(self, snapshot):
        state = toggle_feature(initial_state(snapshot), snapshot, "organic")
        lines = copy_text(state, snapshot).split("\n")
        assert lines[:6] == [
            "Base Product Name: Standard Unisex Tee",
            "Base Product Code: 3001U",
            "Retail Price: $34.50",
            "Tier: Std",
            "Tags used: std, organic, usa_made",
            "",
        ]
        # authored description, normalized
        assert lines[6] == (
            "A soft, everyday unisex tee that pairs with anything. "
            "Clean and comfy without the fuss."
        )
        assert lines[7] == ""
        assert lines[8] == "- 100% combed ring-spun cotton (heathers vary)"

    def test_copy_text_blank_override_uses_fallback(self, snapshot):
        state = select_base(initial_state(snapshot), snapshot, "5001T")
        text = copy_text(state, snapshot)
        assert text.endswith('\n\n- Midweight, "clean drape"\n- AS Colour Staple Tee blank\n')

    def test_copy_text_without_selection(self, snapshot):
        assert copy_text(SelectionState(), snapshot) == ""


if __name__ == "__main__":
    import pytest

    pytest.main([__file__, "-v"])
