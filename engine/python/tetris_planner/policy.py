"""Base class for placement selection policies."""

from abc import ABC, abstractmethod

from tetris_planner.search import Placement, PlacementSet


class SelectionPolicy(ABC):
    """Abstract base class for choosing one placement out of a search result.

    The planner only enumerates legal placements; which one is worth
    playing is up to the policy plugged into the actuator.
    """

    def __init__(self, name: str):
        """Initialize policy with a name.

        Args:
            name: Human-readable name for this policy
        """
        self.name = name
        self.selections = 0

    @abstractmethod
    def choose(self, placements: PlacementSet) -> Placement:
        """Pick a placement.

        Args:
            placements: Non-empty result of a placement search

        Returns:
            One member of placements
        """
        pass

    def select(self, placements: PlacementSet) -> Placement:
        """Pick a placement and count the selection.

        Raises:
            ValueError: If the placement set is empty
        """
        if not placements:
            raise ValueError("Cannot select from an empty placement set")
        self.selections += 1
        return self.choose(placements)

    def get_stats(self) -> dict:
        return {"name": self.name, "selections": self.selections}

    def reset_stats(self) -> None:
        self.selections = 0

    def __repr__(self) -> str:
        return f"SelectionPolicy(name='{self.name}', selections={self.selections})"
