"""Unit tests for filter modes."""

import pytest

from client.app.sync.filters import FilterMode, FilterSelector, selected_constraint


def test_filter_modes_map_to_selected_constraint() -> None:
    """Test each filter mode maps to its selected constraint."""
    assert selected_constraint(FilterMode.ALL) is None
    assert selected_constraint(FilterMode.SELECTED) is True
    assert selected_constraint(FilterMode.UNSELECTED) is False


def test_filter_mode_accepts_string_values() -> None:
    """Test filter modes can be given as strings."""
    assert selected_constraint("selected") is True
    assert selected_constraint("unselected") is False


def test_unknown_filter_mode_rejected() -> None:
    """Test an unknown filter mode is rejected."""
    with pytest.raises(ValueError):
        selected_constraint("archived")


def test_selector_defaults_to_all() -> None:
    """Test the selector starts in the all mode."""
    assert FilterSelector().mode == FilterMode.ALL


def test_selector_tracks_active_mode() -> None:
    """Test the selector tracks the active mode."""
    selector = FilterSelector()

    assert selector.select("unselected") is False
    assert selector.mode == FilterMode.UNSELECTED

    assert selector.select(FilterMode.ALL) is None
    assert selector.mode == FilterMode.ALL


def test_selector_keeps_mode_on_invalid_input() -> None:
    """Test an invalid mode leaves the active mode unchanged."""
    selector = FilterSelector(FilterMode.SELECTED)

    with pytest.raises(ValueError):
        selector.select("bogus")

    assert selector.mode == FilterMode.SELECTED
