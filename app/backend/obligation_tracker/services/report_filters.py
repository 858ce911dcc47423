"""Filter stage of the reporting engine plus task-listing sort orders."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from obligation_tracker.domain.dates import parse_last_edit
from obligation_tracker.domain.status import AGGREGATED_SLOTS, ObligationSlot, is_finished
from obligation_tracker.domain.tasks import ObligationTask


class FilterContext(str, enum.Enum):
    ALL = "ALL"
    FISCAL = "FISCAL"
    CONTABIL = "CONTABIL"
    REINF = "REINF"
    LUCRO = "LUCRO"
    ECD = "ECD"
    ECF = "ECF"

    @property
    def slot(self) -> ObligationSlot | None:
        if self is FilterContext.ALL:
            return None
        return ObligationSlot(self.value.lower())


class StatusFilter(str, enum.Enum):
    ALL = "ALL"
    PENDING = "PENDING"
    FINISHED = "FINISHED"


@dataclass(frozen=True, slots=True)
class FilterSpec:
    context: FilterContext = FilterContext.ALL
    status: StatusFilter = StatusFilter.ALL
    regime: str = ""
    responsible: str = ""

    def as_dict(self) -> dict[str, str]:
        return {
            "context": self.context.value,
            "status": self.status.value,
            "regime": self.regime,
            "responsible": self.responsible,
        }


def _relevant_finished(task: ObligationTask, context: FilterContext) -> bool:
    slot = context.slot
    if slot is None:
        return all(is_finished(task.status_of(item)) for item in AGGREGATED_SLOTS)
    return is_finished(task.status_of(slot))


def matches(task: ObligationTask, spec: FilterSpec) -> bool:
    if spec.regime and task.regime != spec.regime:
        return False
    if spec.responsible and spec.responsible not in task.responsibles():
        return False
    if spec.status is StatusFilter.ALL:
        return True

    finished = _relevant_finished(task, spec.context)
    if spec.status is StatusFilter.PENDING:
        return not finished
    return finished


def filter_tasks(tasks: Iterable[ObligationTask], spec: FilterSpec) -> list[ObligationTask]:
    """Keep tasks satisfying every active constraint, preserving input order."""

    return [task for task in tasks if matches(task, spec)]


class TaskSortOrder(str, enum.Enum):
    ID_ASC = "ID_ASC"
    ID_DESC = "ID_DESC"
    NAME_ASC = "NAME_ASC"
    NAME_DESC = "NAME_DESC"
    LAST_MODIFIED_ASC = "LAST_MODIFIED_ASC"
    LAST_MODIFIED_DESC = "LAST_MODIFIED_DESC"


_NATURAL_CHUNK_RE = re.compile(r"(\d+)")


def _id_key(external_id: str) -> tuple:
    stripped = external_id.strip()
    if stripped.isdigit():
        return (0, int(stripped), ())
    chunks = _NATURAL_CHUNK_RE.split(stripped.lower())
    natural = tuple((0, int(chunk), "") if chunk.isdigit() else (1, 0, chunk) for chunk in chunks if chunk)
    return (1, 0, natural)


def _modified_key(task: ObligationTask) -> datetime:
    return parse_last_edit(task.last_editor) or datetime.min


def sort_tasks(tasks: Iterable[ObligationTask], order: TaskSortOrder = TaskSortOrder.ID_ASC) -> list[ObligationTask]:
    """Order tasks for listing screens.

    Numeric ids sort by value, others naturally. Tasks whose last edit cannot
    be read sort as the oldest.
    """

    items = list(tasks)
    if order is TaskSortOrder.NAME_ASC:
        return sorted(items, key=lambda task: task.name.casefold())
    if order is TaskSortOrder.NAME_DESC:
        return sorted(items, key=lambda task: task.name.casefold(), reverse=True)
    if order is TaskSortOrder.LAST_MODIFIED_ASC:
        return sorted(items, key=_modified_key)
    if order is TaskSortOrder.LAST_MODIFIED_DESC:
        return sorted(items, key=_modified_key, reverse=True)
    if order is TaskSortOrder.ID_DESC:
        return sorted(items, key=lambda task: _id_key(task.external_id), reverse=True)
    return sorted(items, key=lambda task: _id_key(task.external_id))
