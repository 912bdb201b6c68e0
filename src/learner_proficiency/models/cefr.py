"""CEFR proficiency levels."""

from enum import StrEnum


class CEFRLevel(StrEnum):
    """Common European Framework level, ordered A1 (lowest) to C2 (highest).

    Comparisons use the position in the progression, never the string value.
    """

    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @property
    def is_highest(self) -> bool:
        return self.rank == len(type(self)) - 1

    @classmethod
    def from_rank(cls, rank: int) -> "CEFRLevel":
        """Level at the given position, clamped to the A1..C2 range."""
        levels = list(cls)
        return levels[max(0, min(len(levels) - 1, rank))]

    @classmethod
    def lowest(cls) -> "CEFRLevel":
        return cls.A1

    def successor(self) -> "CEFRLevel | None":
        """Next level up, or None at C2."""
        if self.is_highest:
            return None
        return type(self).from_rank(self.rank + 1)

    def predecessor(self) -> "CEFRLevel | None":
        """Next level down, or None at A1."""
        if self.rank == 0:
            return None
        return type(self).from_rank(self.rank - 1)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank >= other.rank


# Ascending progression, A1 first
LEVEL_PROGRESSION: tuple[CEFRLevel, ...] = tuple(CEFRLevel)
