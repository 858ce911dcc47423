"""Immutable task and collaborator values consumed by the reporting engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date

from obligation_tracker.domain.dates import days_until, parse_br_date
from obligation_tracker.domain.status import ObligationSlot

NO_REGIME_LABEL = "NENHUM INFORMADO"


class Priority(str, enum.Enum):
    ALTA = "ALTA"
    MEDIA = "MÉDIA"
    BAIXA = "BAIXA"


@dataclass(frozen=True, slots=True)
class SlotAssignment:
    responsible: str = ""
    status: str = ""


@dataclass(frozen=True, slots=True)
class ObligationTask:
    """One client company within one fiscal cycle year."""

    external_id: str
    name: str
    cycle_year: int
    cnpj: str = ""
    regime: str = ""
    priority: str = ""
    due_date: str | None = None
    last_editor: str | None = None
    active: bool = True
    fiscal: SlotAssignment = SlotAssignment()
    contabil: SlotAssignment = SlotAssignment()
    balanco: SlotAssignment = SlotAssignment()
    lucro: SlotAssignment = SlotAssignment()
    reinf: SlotAssignment = SlotAssignment()
    ecd: SlotAssignment = SlotAssignment()
    ecf: SlotAssignment = SlotAssignment()

    @property
    def identity(self) -> tuple[str, int]:
        return self.external_id, self.cycle_year

    def slot(self, slot: ObligationSlot) -> SlotAssignment:
        return getattr(self, slot.value)

    def status_of(self, slot: ObligationSlot) -> str:
        return self.slot(slot).status

    def responsibles(self) -> tuple[str, ...]:
        """Responsible names across every slot, Balanço included."""

        return tuple(self.slot(slot).responsible for slot in ObligationSlot)


@dataclass(frozen=True, slots=True)
class Collaborator:
    name: str
    department: str | None = None
    external_id: str = ""


def effective_priority(task: ObligationTask, today: date) -> Priority:
    """Manual priority when set, otherwise derived from the due date.

    Three days or less is ALTA, seven or less is MÉDIA. Tasks without a
    readable due date fall back to BAIXA.
    """

    manual = (task.priority or "").strip()
    if manual in {member.value for member in Priority}:
        return Priority(manual)

    due = parse_br_date(task.due_date)
    if due is None:
        return Priority.BAIXA
    remaining = days_until(due, today)
    if remaining <= 3:
        return Priority.ALTA
    if remaining <= 7:
        return Priority.MEDIA
    return Priority.BAIXA
