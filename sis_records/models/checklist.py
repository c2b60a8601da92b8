"""
Checklist aggregation for records that track a fixed set of completion flags.

A record type lists its items once in ``CHECKLIST``; every item is a nullable
boolean column where ``None`` means "not done". Totals are always derived from
the flags. Record types that also persist ``total_items``/``cleared_items``/
``all_cleared`` for reporting get those columns refreshed by
``recompute_completion()`` and again at flush time.
"""

from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Tuple

from sqlalchemy import Boolean, event
from sqlalchemy.orm import Mapped, mapped_column

from sis_records.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChecklistItem:
    """A single named completion flag and where it is displayed."""

    name: str
    label: str
    category: str


@dataclass(frozen=True)
class ChecklistCompletion:
    total: int
    completed: int

    @property
    def all_complete(self) -> bool:
        return self.completed == self.total

    @property
    def outstanding(self) -> int:
        return self.total - self.completed

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.completed * 100.0 / self.total, 1)


def checklist_flag() -> Mapped[Optional[bool]]:
    return mapped_column(Boolean, default=False)


class ChecklistMixin:
    CHECKLIST: ClassVar[Tuple[ChecklistItem, ...]] = ()
    __checklist_cache__: ClassVar[Tuple[str, str, str]] = (
        "total_items",
        "cleared_items",
        "all_cleared",
    )

    @classmethod
    def checklist_item(cls, name: str) -> ChecklistItem:
        for item in cls.CHECKLIST:
            if item.name == name:
                return item
        raise ValueError(f"{cls.__name__} has no checklist item '{name}'")

    @classmethod
    def checklist_categories(cls) -> List[str]:
        categories: List[str] = []
        for item in cls.CHECKLIST:
            if item.category not in categories:
                categories.append(item.category)
        return categories

    def is_item_done(self, name: str) -> bool:
        return getattr(self, self.checklist_item(name).name, None) is True

    def set_item(self, name: str, value: bool = True) -> None:
        item = self.checklist_item(name)
        setattr(self, item.name, bool(value))

    def checklist_completion(self) -> ChecklistCompletion:
        completed = sum(
            1 for item in self.CHECKLIST if getattr(self, item.name, None) is True
        )
        return ChecklistCompletion(total=len(self.CHECKLIST), completed=completed)

    def recompute_completion(self) -> ChecklistCompletion:
        """Recount the flags and refresh the stored totals, if this record has them."""
        completion = self.checklist_completion()
        total_attr, completed_attr, all_attr = self.__checklist_cache__
        if hasattr(type(self), total_attr):
            setattr(self, total_attr, completion.total)
            setattr(self, completed_attr, completion.completed)
            setattr(self, all_attr, completion.all_complete)
        return completion

    def completion_percentage(self) -> float:
        return self.checklist_completion().percentage

    def outstanding_items(self) -> List[ChecklistItem]:
        return [
            item for item in self.CHECKLIST if getattr(self, item.name, None) is not True
        ]

    def category_completion(self) -> Dict[str, ChecklistCompletion]:
        totals: Dict[str, List[int]] = {}
        for item in self.CHECKLIST:
            counts = totals.setdefault(item.category, [0, 0])
            counts[0] += 1
            if getattr(self, item.name, None) is True:
                counts[1] += 1
        return {
            category: ChecklistCompletion(total=total, completed=completed)
            for category, (total, completed) in totals.items()
        }

    def checklist_problems(self) -> List[str]:
        total_attr, completed_attr, all_attr = self.__checklist_cache__
        if not hasattr(type(self), total_attr):
            return []
        actual = self.checklist_completion()
        stored = (
            getattr(self, total_attr, None),
            getattr(self, completed_attr, None),
            getattr(self, all_attr, None),
        )
        # Nothing cached yet: the totals are filled in at the first flush
        if stored == (None, None, None):
            return []
        if stored !=(actual.total, actual.completed, actual.all_complete):
            return [
                f"stored checklist totals {stored} do not match flags "
                f"({actual.total}, {actual.completed}, {actual.all_complete})"
            ]
        return []


@event.listens_for(ChecklistMixin, "before_insert", propagate=True)
@event.listens_for(ChecklistMixin, "before_update", propagate=True)
def _refresh_checklist_totals(mapper, connection, target: ChecklistMixin) -> None:
    completion = target.recompute_completion()
    logger.debug(
        f"{type(target).__name__} checklist at flush: "
        f"{completion.completed}/{completion.total}"
    )
