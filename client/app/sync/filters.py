"""Filter modes for the document list and their list-fetch constraint."""

from enum import Enum


class FilterMode(str, Enum):
    """Which documents the list fetch should return."""

    ALL = "all"
    SELECTED = "selected"
    UNSELECTED = "unselected"


_CONSTRAINTS: dict[FilterMode, bool | None] = {
    FilterMode.ALL: None,
    FilterMode.SELECTED: True,
    FilterMode.UNSELECTED: False,
}


def selected_constraint(mode: FilterMode | str) -> bool | None:
    """Map a filter mode to the ``selected`` constraint of the list fetch.

    Raises:
        ValueError: If mode is not a known filter mode
    """
    return _CONSTRAINTS[FilterMode(mode)]


class FilterSelector:
    """Holds the active filter mode for highlighting; never holds fetched data."""

    def __init__(self, mode: FilterMode = FilterMode.ALL) -> None:
        self._mode = mode

    @property
    def mode(self) -> FilterMode:
        return self._mode

    def select(self, mode: FilterMode | str) -> bool | None:
        """Activate a mode and return the constraint for the next fetch."""
        constraint = selected_constraint(mode)
        self._mode = FilterMode(mode)
        return constraint
