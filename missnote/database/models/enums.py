"""
Enumeration Types
------------------

Enum classes for the MissNote database models and queries.

Enums:
    - Importance: How much a mistake matters (low, mid, high)
    - SortMode: Ordering applied by the query engine
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from enum import Enum, IntEnum
from typing import List


class Importance(IntEnum):
    """
    Enumeration of importance levels, stored as integers.
    - LOW: 1
    - MID: 2 (default)
    - HIGH: 3
    """

    LOW = 1
    MID = 2
    HIGH = 3

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        return self.name.title()


class SortMode(str, Enum):
    """
    Enumeration of result orderings.
    - DATE: Newest first
    - IMPORTANCE: Most important first, then newest
    - SUBJECT: Subject name A-Z, then newest
    - REVIEW: Most important first, then oldest
    """

    DATE = "date"
    IMPORTANCE = "importance"
    SUBJECT = "subject"
    REVIEW = "review"

    @classmethod
    def choices(cls) -> List[str]:
        """Get all available sort mode choices."""
        return [mode.value for mode in cls]

    @property
    def display_name(self) -> str:
        """Get human-readable display name."""
        display_map = {
            self.DATE: "Newest first",
            self.IMPORTANCE: "By importance",
            self.SUBJECT: "By subject",
            self.REVIEW: "Review queue",
        }
        return display_map.get(self, self.value.title())
