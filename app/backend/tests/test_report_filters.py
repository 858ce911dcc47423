from __future__ import annotations

from obligation_tracker.domain.tasks import ObligationTask, SlotAssignment
from obligation_tracker.services.report_filters import (
    FilterContext,
    FilterSpec,
    StatusFilter,
    TaskSortOrder,
    filter_tasks,
    sort_tasks,
)

DONE = "FINALIZADA"


def _task(
    external_id: str,
    *,
    regime: str = "",
    last_editor: str | None = None,
    name: str = "",
    **slots: object,
) -> ObligationTask:
    assignments = {
        slot: value if isinstance(value, SlotAssignment) else SlotAssignment(status=str(value))
        for slot, value in slots.items()
    }
    return ObligationTask(
        external_id=external_id,
        name=name or f"Empresa {external_id}",
        cycle_year=2026,
        regime=regime,
        last_editor=last_editor,
        **assignments,
    )


def _all_finished(external_id: str, **overrides: object) -> ObligationTask:
    statuses: dict[str, object] = {
        "fiscal": DONE,
        "contabil": DONE,
        "reinf": "EFD ENVIADA",
        "lucro": "LUCRO LANÇADO",
        "ecd": "ENVIADA",
        "ecf": "NÃO SE APLICA",
    }
    statuses.update(overrides)
    return _task(external_id, **statuses)


def test_default_spec_is_identity() -> None:
    tasks = [_task("1"), _all_finished("2"), _task("3", regime="LUCRO REAL")]

    assert filter_tasks(tasks, FilterSpec()) == tasks


def test_filter_is_idempotent() -> None:
    tasks = [_task("1", fiscal=DONE), _task("2"), _all_finished("3")]
    spec = FilterSpec(context=FilterContext.FISCAL, status=StatusFilter.PENDING)

    once = filter_tasks(tasks, spec)

    assert filter_tasks(once, spec) == once


def test_regime_filter_keeps_only_matching_tasks_in_order() -> None:
    tasks = [
        _task(str(index), regime="SIMPLES NACIONAL" if index in (2, 5, 9) else "LUCRO PRESUMIDO")
        for index in range(1, 11)
    ]

    filtered = filter_tasks(tasks, FilterSpec(regime="SIMPLES NACIONAL"))

    assert [task.external_id for task in filtered] == ["2", "5", "9"]


def test_responsible_filter_considers_balanco() -> None:
    tasks = [
        _task("1", balanco=SlotAssignment(responsible="Ana", status="EM ABERTO")),
        _task("2", fiscal=SlotAssignment(responsible="Bruno", status=DONE)),
    ]

    filtered = filter_tasks(tasks, FilterSpec(responsible="Ana"))

    assert [task.external_id for task in filtered] == ["1"]


def test_context_status_filter_looks_at_one_slot() -> None:
    tasks = [_task("1", fiscal=DONE), _task("2", fiscal="EM ABERTO", contabil=DONE)]

    pending = filter_tasks(tasks, FilterSpec(context=FilterContext.FISCAL, status=StatusFilter.PENDING))
    finished = filter_tasks(tasks, FilterSpec(context=FilterContext.FISCAL, status=StatusFilter.FINISHED))

    assert [task.external_id for task in pending] == ["2"]
    assert [task.external_id for task in finished] == ["1"]


def test_all_context_requires_every_aggregated_slot() -> None:
    tasks = [
        _all_finished("1", balanco="EM ABERTO"),
        _all_finished("2", ecf="PENDENTE"),
        _task("3"),
    ]

    finished = filter_tasks(tasks, FilterSpec(status=StatusFilter.FINISHED))
    pending = filter_tasks(tasks, FilterSpec(status=StatusFilter.PENDING))

    assert [task.external_id for task in finished] == ["1"]
    assert [task.external_id for task in pending] == ["2", "3"]


def test_filters_combine_conjunctively() -> None:
    tasks = [
        _task("1", regime="LUCRO REAL", fiscal=SlotAssignment(responsible="Ana", status="EM ABERTO")),
        _task("2", regime="LUCRO REAL", fiscal=SlotAssignment(responsible="Ana", status=DONE)),
        _task("3", regime="SIMPLES NACIONAL", fiscal=SlotAssignment(responsible="Ana", status="EM ABERTO")),
    ]
    spec = FilterSpec(
        context=FilterContext.FISCAL,
        status=StatusFilter.PENDING,
        regime="LUCRO REAL",
        responsible="Ana",
    )

    assert [task.external_id for task in filter_tasks(tasks, spec)] == ["1"]


def test_sort_by_id_is_numeric_then_natural() -> None:
    tasks = [_task("10"), _task("2"), _task("A-3"), _task("1"), _task("A-12")]

    ascending = sort_tasks(tasks, TaskSortOrder.ID_ASC)
    descending = sort_tasks(tasks, TaskSortOrder.ID_DESC)

    assert [task.external_id for task in ascending] == ["1", "2", "10", "A-3", "A-12"]
    assert [task.external_id for task in descending] == ["A-12", "A-3", "10", "2", "1"]


def test_sort_by_name_ignores_case() -> None:
    tasks = [_task("1", name="beta"), _task("2", name="Alfa"), _task("3", name="Gama")]

    assert [task.name for task in sort_tasks(tasks, TaskSortOrder.NAME_ASC)] == ["Alfa", "beta", "Gama"]
    assert [task.name for task in sort_tasks(tasks, TaskSortOrder.NAME_DESC)] == ["Gama", "beta", "Alfa"]


def test_sort_by_last_modified_puts_unreadable_edits_oldest() -> None:
    tasks = [
        _task("1", last_editor="Ana em 10/10/2026 09:00:00"),
        _task("2", last_editor="sem registro"),
        _task("3", last_editor="Bruno em 18/10/2026 16:30:00"),
    ]

    newest_first = sort_tasks(tasks, TaskSortOrder.LAST_MODIFIED_DESC)
    oldest_first = sort_tasks(tasks, TaskSortOrder.LAST_MODIFIED_ASC)

    assert [task.external_id for task in newest_first] == ["3", "1", "2"]
    assert [task.external_id for task in oldest_first] == ["2", "1", "3"]
