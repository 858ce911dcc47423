from __future__ import annotations

from datetime import date, datetime

import pytest

from obligation_tracker.domain.status import ObligationSlot
from obligation_tracker.domain.tasks import Collaborator, ObligationTask, SlotAssignment
from obligation_tracker.services.report_filters import FilterSpec, filter_tasks
from obligation_tracker.services.report_stats import aggregate, closed_for_deadline, percentage, slot_done

TODAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 19, 12, 0)
REGIMES = ["LUCRO PRESUMIDO", "LUCRO REAL", "SIMPLES NACIONAL"]

FINISHED_SLOTS = {
    "fiscal": "FINALIZADA",
    "contabil": "FINALIZADA",
    "reinf": "EFD ENVIADA",
    "lucro": "LUCRO LANÇADO",
    "ecd": "ENVIADA",
    "ecf": "ENVIADA",
}


def _task(
    external_id: str = "1",
    *,
    regime: str = "",
    priority: str = "",
    due_date: str | None = None,
    last_editor: str | None = None,
    **slots: object,
) -> ObligationTask:
    assignments = {
        slot: value if isinstance(value, SlotAssignment) else SlotAssignment(status=str(value))
        for slot, value in slots.items()
    }
    return ObligationTask(
        external_id=external_id,
        name=f"Empresa {external_id}",
        cycle_year=2026,
        regime=regime,
        priority=priority,
        due_date=due_date,
        last_editor=last_editor,
        **assignments,
    )


def _stats(tasks: list[ObligationTask], collaborators: list[Collaborator] | None = None):
    return aggregate(tasks, collaborators or [], REGIMES, today=TODAY, now=NOW)


def test_empty_input_yields_no_snapshot() -> None:
    assert aggregate([], [Collaborator(name="Ana")], REGIMES, today=TODAY, now=NOW) is None


@pytest.mark.parametrize(
    ("finished", "total", "expected"),
    [(0, 0, 0), (0, 5, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 2, 50), (5, 5, 100)],
)
def test_percentage_rounds_half_up(finished: int, total: int, expected: int) -> None:
    assert percentage(finished, total) == expected


def test_fully_finished_task_past_due_is_on_track() -> None:
    stats = _stats([_task(due_date="18/10/2026", **FINISHED_SLOTS)])

    assert stats is not None
    assert stats.total_companies == 1
    assert stats.pending_companies_count == 0
    assert stats.global_progress == 100
    assert stats.deadlines.on_track_count == 1
    assert stats.deadlines.overdue_count == 0


def test_open_fiscal_gates_accounting_slots() -> None:
    task = _task(
        due_date="21/10/2026",
        fiscal="EM ABERTO",
        contabil="FINALIZADA",
        reinf="EFD ENVIADA",
        lucro="LUCRO LANÇADO",
        ecd="ENVIADA",
        ecf="ENVIADA",
    )

    stats = _stats([task])

    assert stats is not None
    fiscal, accounting = stats.department_stats
    assert (fiscal.label, fiscal.sublabel) == ("Fiscal", "(Fiscal + Reinf)")
    assert (fiscal.finished, fiscal.total, fiscal.percentage) == (1, 2, 50)
    assert (accounting.label, accounting.sublabel) == ("Contábil", "(Cont + Lucro + ECD/ECF)")
    assert (accounting.finished, accounting.total, accounting.percentage) == (0, 4, 0)
    assert stats.global_progress == 17
    assert stats.deadlines.approaching_count == 1


def test_slot_done_and_deadline_closure() -> None:
    gated = _task(fiscal="EM ABERTO", contabil="FINALIZADA")
    closed = _task(fiscal="FINALIZADA", contabil="FINALIZADA", reinf="EFD ENVIADA", lucro="LUCRO LANÇADO")

    assert slot_done(gated, ObligationSlot.CONTABIL) is False
    assert slot_done(closed, ObligationSlot.CONTABIL) is True
    assert closed_for_deadline(closed) is True
    assert closed_for_deadline(gated) is False


def test_deadline_closure_ignores_ecd_and_ecf() -> None:
    task = _task(
        due_date="01/10/2026",
        fiscal="FINALIZADA",
        contabil="FINALIZADA",
        reinf="EFD ENVIADA",
        lucro="NÃO HÁ DISTRIBUIÇÃO",
        ecd="PENDENTE",
        ecf="PENDENTE",
    )

    stats = _stats([task])

    assert stats is not None
    assert stats.deadlines.on_track_count == 1
    assert stats.pending_companies_count == 1


def test_deadline_buckets_partition_tasks() -> None:
    tasks = [
        _task("1", due_date="18/10/2026"),
        _task("2", due_date="19/10/2026"),
        _task("3", due_date="22/10/2026"),
        _task("4", due_date="23/10/2026"),
        _task("5"),
        _task("6", due_date="31/02/2026"),
        _task("7", due_date="amanhã"),
    ]

    stats = _stats(tasks)

    assert stats is not None
    deadlines = stats.deadlines
    assert deadlines.overdue_count == 1
    assert deadlines.approaching_count == 2
    assert deadlines.on_track_count == 1
    assert deadlines.no_date_count == 3
    assert deadlines.total == stats.total_companies


def test_bottlenecks_count_stale_unfinished_slots() -> None:
    tasks = [
        _task("1", last_editor="Ana em 10/10/2026 09:00:00", fiscal="FINALIZADA", contabil="FINALIZADA"),
        _task("2", last_editor="Ana em 18/10/2026 09:00:00"),
        _task("3", last_editor="importado sem data"),
        _task("4", last_editor="Bruno em 14/10/2026 12:00:00"),
        _task("5", last_editor="Bruno em 14/10/2026 11:59:00", reinf="EFD ENVIADA"),
    ]

    stats = _stats(tasks)

    assert stats is not None
    counts = {row.name: row.value for row in stats.bottlenecks}
    assert list(counts) == ["Fiscal", "Contábil", "Reinf", "Lucro", "ECD", "ECF"]
    assert counts == {"Fiscal": 1, "Contábil": 1, "Reinf": 1, "Lucro": 2, "ECD": 2, "ECF": 2}


def test_bottlenecks_use_raw_status_not_gated_completion() -> None:
    task = _task(last_editor="Ana em 01/10/2026 10:00", fiscal="EM ABERTO", contabil="FINALIZADA")

    stats = _stats([task])

    assert stats is not None
    counts = {row.name: row.value for row in stats.bottlenecks}
    assert counts["Fiscal"] == 1
    assert counts["Contábil"] == 0


def test_high_priority_pending_requires_exact_tag() -> None:
    tasks = [
        _task("1", priority="ALTA", fiscal="FINALIZADA", contabil="EM ABERTO"),
        _task("2", priority="ALTA", fiscal="FINALIZADA", contabil="FINALIZADA"),
        _task("3", priority="alta"),
        _task("4", priority="MÉDIA"),
    ]

    stats = _stats(tasks)

    assert stats is not None
    assert stats.high_priority_pending == 1


def test_regime_rollup_follows_catalog_order_and_skips_empty_regimes() -> None:
    tasks = [
        _task("1", regime="SIMPLES NACIONAL", **FINISHED_SLOTS),
        _task("2", regime="LUCRO PRESUMIDO"),
        _task("3", regime="SIMPLES NACIONAL"),
        _task("4"),
    ]

    stats = _stats(tasks)

    assert stats is not None
    rows = [(row.regime, row.total, row.ops_count, row.percentage) for row in stats.regime_stats]
    assert rows == [
        ("LUCRO PRESUMIDO", 1, 6, 0),
        ("SIMPLES NACIONAL", 2, 12, 50),
        ("NENHUM INFORMADO", 1, 6, 0),
    ]


def test_regime_filter_scenario() -> None:
    tasks = [
        _task(str(index), regime="SIMPLES NACIONAL" if index <= 3 else "LUCRO REAL")
        for index in range(1, 11)
    ]

    filtered = filter_tasks(tasks, FilterSpec(regime="SIMPLES NACIONAL"))
    stats = _stats(filtered)

    assert stats is not None
    assert stats.total_companies == 3
    assert [(row.regime, row.total, row.ops_count) for row in stats.regime_stats] == [("SIMPLES NACIONAL", 3, 18)]


def test_collaborator_productivity_counts_gated_operations() -> None:
    tasks = [
        _task("1", regime="LUCRO REAL", fiscal=SlotAssignment(responsible="Ana", status="FINALIZADA")),
        _task("2", regime="SIMPLES NACIONAL", fiscal=SlotAssignment(responsible="Ana", status="EM ABERTO")),
        _task(
            "3",
            regime="MEI",
            fiscal=SlotAssignment(responsible="Bruno", status="EM ABERTO"),
            contabil=SlotAssignment(responsible="Ana", status="FINALIZADA"),
        ),
    ]
    collaborators = [
        Collaborator(name="Bruno", department="Fiscal"),
        Collaborator(name="Ana"),
        Collaborator(name="Carla", department="Contábil"),
    ]

    stats = _stats(tasks, collaborators)

    assert stats is not None
    assert [row.name for row in stats.team_stats] == ["Ana", "Bruno"]
    ana = stats.team_stats[0]
    assert (ana.total, ana.finished, ana.percentage) == (3, 1, 33)
    assert ana.department == "Geral"
    assert (ana.breakdown.real.total, ana.breakdown.real.finished) == (1, 1)
    assert (ana.breakdown.simples.total, ana.breakdown.simples.finished) == (1, 0)
    assert (ana.breakdown.presumido.total, ana.breakdown.presumido.finished) == (0, 0)


def test_collaborator_ties_keep_catalog_order() -> None:
    tasks = [
        _task(
            "1",
            fiscal=SlotAssignment(responsible="Bruno", status="FINALIZADA"),
            reinf=SlotAssignment(responsible="Ana", status="PENDENTE"),
        )
    ]

    stats = _stats(tasks, [Collaborator(name="Bruno"), Collaborator(name="Ana")])

    assert stats is not None
    assert [row.name for row in stats.team_stats] == ["Bruno", "Ana"]


def test_percentages_stay_in_range() -> None:
    tasks = [_task(str(index), fiscal="FINALIZADA" if index % 2 else "EM ABERTO") for index in range(1, 8)]

    stats = _stats(tasks)

    assert stats is not None
    values = [stats.global_progress]
    values += [row.percentage for row in stats.department_stats]
    values += [row.percentage for row in stats.regime_stats]
    assert all(0 <= value <= 100 for value in values)


def test_snapshot_serializes_to_plain_dict() -> None:
    stats = _stats([_task(due_date="20/10/2026")])

    assert stats is not None
    payload = stats.as_dict()
    assert payload["deadlines"]["approaching_count"] == 1
    assert payload["department_stats"][0]["label"] == "Fiscal"


def test_collaborator_totals_cover_each_aggregated_slot_once() -> None:
    everywhere = {
        slot: SlotAssignment(responsible="Ana", status="PENDENTE")
        for slot in ("fiscal", "contabil", "balanco", "lucro", "reinf", "ecd", "ecf")
    }
    tasks = [_task(str(index), **everywhere) for index in range(1, 5)]

    stats = _stats(tasks, [Collaborator(name="Ana"), Collaborator(name="Bruno")])

    assert stats is not None
    assert sum(row.total for row in stats.team_stats) == 6 * len(tasks)
    assert [row.name for row in stats.team_stats] == ["Ana"]
