"""
Display-name enumerations.

Every status, category and type in the records layer pairs a stable symbolic
member name (what gets stored) with a human readable label, and optionally a
UI color and a longer description.
"""

from enum import Enum
from typing import List, Optional, Tuple, Type, TypeVar

E = TypeVar("E", bound="DisplayEnum")


class DisplayEnum(Enum):
    """
    Enum whose members carry presentation metadata.

    Members are declared as ``NAME = ("Label",)``, ``NAME = ("Label", "red")``
    or ``NAME = ("Label", "red", "Longer description")``.
    """

    def __new__(
        cls, label: str, color: Optional[str] = None, description: Optional[str] = None
    ):
        obj = object.__new__(cls)
        # Sequential values keep members with identical labels from aliasing.
        obj._value_ = len(cls.__members__) + 1
        obj.label = label
        obj.color = color
        obj.description = description
        return obj

    @property
    def display_name(self) -> str:
        return self.label

    def __str__(self) -> str:
        return self.label

    @classmethod
    def choices(cls: Type[E]) -> List[Tuple[str, str]]:
        """(stored name, label) pairs in declaration order."""
        return [(member.name, member.label) for member in cls]

    @classmethod
    def from_label(cls: Type[E], label: Optional[str]) -> Optional[E]:
        if not label:
            return None
        wanted = label.strip().lower()
        for member in cls:
            if member.label.lower() == wanted:
                return member
        return None

    @classmethod
    def parse(cls: Type[E], text: str) -> E:
        """
        Resolve a member from its name (case-insensitive, dashes allowed) or label.

        Raises:
            ValueError: If nothing matches
        """
        key = text.strip().upper().replace("-", "_").replace(" ", "_")
        if key in cls.__members__:
            return cls.__members__[key]
        member = cls.from_label(text)
        if member is None:
            valid = ", ".join(cls.__members__)
            raise ValueError(f"Unknown {cls.__name__} '{text}'. Expected one of: {valid}")
        return member


def display(member: Optional[DisplayEnum], default: str = "N/A") -> str:
    """Label of an optional enum member."""
    return member.label if member is not None else default
