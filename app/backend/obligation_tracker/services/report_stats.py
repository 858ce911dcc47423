"""Aggregation stage: turns a filtered task list into a ReportStats snapshot.

Everything here is a pure function of its arguments. ``today`` and ``now``
default to the local clock when omitted.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta

from obligation_tracker.domain.dates import days_until, parse_br_date, parse_last_edit
from obligation_tracker.domain.status import (
    AGGREGATED_SLOTS,
    DEADLINE_CLOSURE_SLOTS,
    TIER_ONE_SLOTS,
    TIER_TWO_SLOTS,
    ObligationSlot,
    is_finished,
)
from obligation_tracker.domain.tasks import NO_REGIME_LABEL, Collaborator, ObligationTask

DEFAULT_STALE_AFTER_DAYS = 5
DEFAULT_APPROACHING_WITHIN_DAYS = 3
DEFAULT_DEPARTMENT = "Geral"
HIGH_PRIORITY_TAG = "ALTA"

# Substrings checked in this order; the first hit wins.
BREAKDOWN_REGIMES: tuple[str, ...] = ("REAL", "PRESUMIDO", "SIMPLES")


@dataclass(frozen=True, slots=True)
class OperationCount:
    total: int = 0
    finished: int = 0


@dataclass(frozen=True, slots=True)
class DepartmentProgress:
    label: str
    sublabel: str
    percentage: int
    finished: int
    total: int


@dataclass(frozen=True, slots=True)
class RegimeProgress:
    regime: str
    total: int
    ops_count: int
    percentage: int


@dataclass(frozen=True, slots=True)
class RegimeBreakdown:
    real: OperationCount
    presumido: OperationCount
    simples: OperationCount


@dataclass(frozen=True, slots=True)
class CollaboratorProductivity:
    name: str
    department: str
    total: int
    finished: int
    percentage: int
    breakdown: RegimeBreakdown


@dataclass(frozen=True, slots=True)
class DeadlineBuckets:
    overdue_count: int
    approaching_count: int
    on_track_count: int
    no_date_count: int

    @property
    def total(self) -> int:
        return self.overdue_count + self.approaching_count + self.on_track_count + self.no_date_count


@dataclass(frozen=True, slots=True)
class BottleneckCount:
    name: str
    value: int


@dataclass(frozen=True, slots=True)
class ReportStats:
    total_companies: int
    pending_companies_count: int
    global_progress: int
    high_priority_pending: int
    department_stats: tuple[DepartmentProgress, ...]
    regime_stats: tuple[RegimeProgress, ...]
    team_stats: tuple[CollaboratorProductivity, ...]
    deadlines: DeadlineBuckets
    bottlenecks: tuple[BottleneckCount, ...]

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


def percentage(finished: int, total: int) -> int:
    """Rounded share in [0, 100], halves rounding up; 0 when total is 0."""

    if total <= 0:
        return 0
    return (200 * finished + total) // (2 * total)


def slot_done(task: ObligationTask, slot: ObligationSlot) -> bool:
    """Gated completion: tier-2 slots only count once Fiscal is finished too."""

    own = is_finished(task.status_of(slot))
    if slot in TIER_TWO_SLOTS:
        return own and is_finished(task.status_of(ObligationSlot.FISCAL))
    return own


def closed_for_deadline(task: ObligationTask) -> bool:
    """Fiscal, Contábil, Reinf and Lucro all finished, each on its own status."""

    return all(is_finished(task.status_of(slot)) for slot in DEADLINE_CLOSURE_SLOTS)


def _count_done(task: ObligationTask, slots: Sequence[ObligationSlot]) -> int:
    return sum(1 for slot in slots if slot_done(task, slot))


def _department_stats(tasks: Sequence[ObligationTask]) -> tuple[DepartmentProgress, DepartmentProgress]:
    fiscal_total = len(TIER_ONE_SLOTS) * len(tasks)
    fiscal_finished = sum(_count_done(task, TIER_ONE_SLOTS) for task in tasks)
    accounting_total = len(TIER_TWO_SLOTS) * len(tasks)
    accounting_finished = sum(_count_done(task, TIER_TWO_SLOTS) for task in tasks)
    return (
        DepartmentProgress(
            label="Fiscal",
            sublabel="(Fiscal + Reinf)",
            percentage=percentage(fiscal_finished, fiscal_total),
            finished=fiscal_finished,
            total=fiscal_total,
        ),
        DepartmentProgress(
            label="Contábil",
            sublabel="(Cont + Lucro + ECD/ECF)",
            percentage=percentage(accounting_finished, accounting_total),
            finished=accounting_finished,
            total=accounting_total,
        ),
    )


def _regime_stats(tasks: Sequence[ObligationTask], regimes: Sequence[str]) -> tuple[RegimeProgress, ...]:
    rows: list[RegimeProgress] = []
    for regime in [*regimes, NO_REGIME_LABEL]:
        members = [task for task in tasks if (task.regime or NO_REGIME_LABEL) == regime]
        if not members:
            continue
        ops = len(AGGREGATED_SLOTS) * len(members)
        done = sum(_count_done(task, AGGREGATED_SLOTS) for task in members)
        rows.append(
            RegimeProgress(
                regime=regime,
                total=len(members),
                ops_count=ops,
                percentage=percentage(done, ops),
            )
        )
    return tuple(rows)


def _breakdown_key(regime: str) -> str | None:
    upper = (regime or "").upper()
    for key in BREAKDOWN_REGIMES:
        if key in upper:
            return key
    return None


def _collaborator_stats(
    tasks: Sequence[ObligationTask],
    collaborators: Sequence[Collaborator],
) -> tuple[CollaboratorProductivity, ...]:
    rows: list[CollaboratorProductivity] = []
    for collaborator in collaborators:
        total = 0
        finished = 0
        buckets: dict[str, list[int]] = {key: [0, 0] for key in BREAKDOWN_REGIMES}

        for task in tasks:
            bucket = buckets.get(_breakdown_key(task.regime) or "")
            for slot in AGGREGATED_SLOTS:
                if task.slot(slot).responsible != collaborator.name:
                    continue
                done = slot_done(task, slot)
                total += 1
                finished += int(done)
                if bucket is not None:
                    bucket[0] += 1
                    bucket[1] += int(done)

        if total == 0:
            continue
        rows.append(
            CollaboratorProductivity(
                name=collaborator.name,
                department=collaborator.department or DEFAULT_DEPARTMENT,
                total=total,
                finished=finished,
                percentage=percentage(finished, total),
                breakdown=RegimeBreakdown(
                    real=OperationCount(*buckets["REAL"]),
                    presumido=OperationCount(*buckets["PRESUMIDO"]),
                    simples=OperationCount(*buckets["SIMPLES"]),
                ),
            )
        )
    rows.sort(key=lambda row: row.total, reverse=True)
    return tuple(rows)


def _deadline_buckets(
    tasks: Sequence[ObligationTask],
    *,
    today: date,
    approaching_within_days: int,
) -> DeadlineBuckets:
    overdue = approaching = on_track = no_date = 0
    for task in tasks:
        if closed_for_deadline(task):
            on_track += 1
            continue
        due = parse_br_date(task.due_date)
        if due is None:
            no_date += 1
            continue
        remaining = days_until(due, today)
        if remaining < 0:
            overdue += 1
        elif remaining <= approaching_within_days:
            approaching += 1
        else:
            on_track += 1
    return DeadlineBuckets(
        overdue_count=overdue,
        approaching_count=approaching,
        on_track_count=on_track,
        no_date_count=no_date,
    )


def _bottlenecks(
    tasks: Sequence[ObligationTask],
    *,
    now: datetime,
    stale_after_days: int,
) -> tuple[BottleneckCount, ...]:
    threshold = now - timedelta(days=stale_after_days)
    counts = {slot: 0 for slot in AGGREGATED_SLOTS}
    for task in tasks:
        last_edit = parse_last_edit(task.last_editor)
        if last_edit is None or last_edit >= threshold:
            continue
        for slot in AGGREGATED_SLOTS:
            if not is_finished(task.status_of(slot)):
                counts[slot] += 1
    return tuple(BottleneckCount(name=slot.label, value=counts[slot]) for slot in AGGREGATED_SLOTS)


def aggregate(
    tasks: Sequence[ObligationTask],
    collaborators: Sequence[Collaborator],
    regimes: Sequence[str],
    *,
    today: date | None = None,
    now: datetime | None = None,
    stale_after_days: int = DEFAULT_STALE_AFTER_DAYS,
    approaching_within_days: int = DEFAULT_APPROACHING_WITHIN_DAYS,
) -> ReportStats | None:
    """Compute every report view for an already filtered task list.

    Returns ``None`` when there is nothing to report, which callers must keep
    distinct from a snapshot full of zeros.
    """

    if not tasks:
        return None

    now = now or datetime.now()
    today = today or now.date()

    departments = _department_stats(tasks)
    finished_ops = sum(row.finished for row in departments)
    total_ops = sum(row.total for row in departments)

    pending_companies = sum(
        1 for task in tasks if not all(is_finished(task.status_of(slot)) for slot in AGGREGATED_SLOTS)
    )
    high_priority_pending = sum(
        1
        for task in tasks
        if task.priority == HIGH_PRIORITY_TAG
        and (
            not is_finished(task.status_of(ObligationSlot.FISCAL))
            or not is_finished(task.status_of(ObligationSlot.CONTABIL))
        )
    )

    return ReportStats(
        total_companies=len(tasks),
        pending_companies_count=pending_companies,
        global_progress=percentage(finished_ops, total_ops),
        high_priority_pending=high_priority_pending,
        department_stats=departments,
        regime_stats=_regime_stats(tasks, regimes),
        team_stats=_collaborator_stats(tasks, collaborators),
        deadlines=_deadline_buckets(tasks, today=today, approaching_within_days=approaching_within_days),
        bottlenecks=_bottlenecks(tasks, now=now, stale_after_days=stale_after_days),
    )
