"""Workbook and CSV rendering for filtered obligation reports."""

from __future__ import annotations

import csv
import enum
import io
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from obligation_tracker.domain.status import AGGREGATED_SLOTS, ObligationSlot, is_finished
from obligation_tracker.domain.tasks import ObligationTask
from obligation_tracker.services.report_filters import FilterContext, FilterSpec, StatusFilter
from obligation_tracker.services.report_stats import percentage

NAME_MAX_LENGTH = 35
EMPTY_CELL = "-"
FOOTER_TEXT = "L&M Controle - Assessoria Contábil"

HEADER_FILL = PatternFill(start_color="111827", end_color="111827", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")


class PageOrientation(str, enum.Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


@dataclass(frozen=True, slots=True)
class ReportConfig:
    title: str
    subtitle: str = ""
    include_charts: bool = False
    include_table: bool = True
    orientation: PageOrientation = PageOrientation.LANDSCAPE


# Column id -> header label, in table order.
AVAILABLE_COLUMNS: dict[str, str] = {
    "id": "ID",
    "name": "Empresa",
    "cnpj": "CNPJ",
    "regime": "Regime",
    "priority": "Prioridade",
    "due_date": "Vencimento",
    "resp_fiscal": "Resp. Fiscal",
    "status_fiscal": "Status Fiscal",
    "resp_contabil": "Resp. Contábil",
    "status_contabil": "Status Contábil",
    "resp_balanco": "Resp. Balanço",
    "status_balanco": "Status Balanço",
    "resp_reinf": "Resp. Reinf",
    "status_reinf": "Status Reinf",
    "resp_lucro": "Resp. Lucro",
    "status_lucro": "Status Lucro",
    "resp_ecd": "Resp. ECD",
    "status_ecd": "Status ECD",
    "resp_ecf": "Resp. ECF",
    "status_ecf": "Status ECF",
    "last_editor": "Última Edição",
}

CONTEXT_LABELS: dict[FilterContext, str] = {
    FilterContext.ALL: "Geral",
    FilterContext.FISCAL: "Fiscal",
    FilterContext.CONTABIL: "Contábil",
    FilterContext.REINF: "Reinf",
    FilterContext.LUCRO: "Lucro",
    FilterContext.ECD: "ECD",
    FilterContext.ECF: "ECF",
}

STATUS_LABELS: dict[StatusFilter, str] = {
    StatusFilter.ALL: "Todos",
    StatusFilter.PENDING: "Pendentes",
    StatusFilter.FINISHED: "Finalizados",
}


def columns_for_context(context: FilterContext) -> list[str]:
    slot = context.slot
    if slot is None:
        selected = {"id", "name", "regime", "priority"} | {f"status_{item.value}" for item in AGGREGATED_SLOTS}
    else:
        selected = {"id", "name", "cnpj", "regime", "priority", "due_date", f"resp_{slot.value}", f"status_{slot.value}"}
    return [column for column in AVAILABLE_COLUMNS if column in selected]


def _raw_value(task: ObligationTask, column: str) -> str:
    if column == "id":
        return task.external_id
    if column.startswith("resp_"):
        return task.slot(ObligationSlot(column.removeprefix("resp_"))).responsible
    if column.startswith("status_"):
        return task.slot(ObligationSlot(column.removeprefix("status_"))).status
    return getattr(task, column) or ""


def format_cell(task: ObligationTask, column: str) -> str:
    value = _raw_value(task, column)
    if column == "regime" and value:
        # "LUCRO PRESUMIDO" -> "PRESUMIDO", "SIMPLES NACIONAL" -> "SIMPLES"; other names pass through trimmed.
        return value.replace("LUCRO ", "").replace("NACIONAL", "").strip()
    if column == "name":
        return value[:NAME_MAX_LENGTH]
    return value or EMPTY_CELL


def table_rows(tasks: Sequence[ObligationTask], context: FilterContext) -> tuple[list[str], list[list[str]]]:
    columns = columns_for_context(context)
    header = [AVAILABLE_COLUMNS[column] for column in columns]
    body = [[format_cell(task, column) for column in columns] for task in tasks]
    return header, body


def estimated_completion(tasks: Sequence[ObligationTask]) -> tuple[int, int]:
    """Tasks with Fiscal and Contábil both finished, and the rounded share of them."""

    done = sum(
        1
        for task in tasks
        if is_finished(task.status_of(ObligationSlot.FISCAL)) and is_finished(task.status_of(ObligationSlot.CONTABIL))
    )
    return done, percentage(done, len(tasks))


def _write_summary(
    sheet: Worksheet,
    tasks: Sequence[ObligationTask],
    config: ReportConfig,
    spec: FilterSpec,
    generated_at: datetime,
) -> None:
    done, progress = estimated_completion(tasks)
    high_priority = sum(1 for task in tasks if task.priority == "ALTA")

    sheet.append([config.title.upper()])
    sheet["A1"].font = Font(bold=True, size=16)
    if config.subtitle:
        sheet.append([config.subtitle])
    sheet.append([f"Gerado em: {generated_at.strftime('%d/%m/%Y %H:%M:%S')}"])
    sheet.append([])
    sheet.append(["FILTROS APLICADOS"])
    sheet.append(["Contexto", CONTEXT_LABELS[spec.context]])
    sheet.append(["Status", STATUS_LABELS[spec.status]])
    sheet.append(["Regime", spec.regime or "Todos"])
    sheet.append(["Responsável", spec.responsible or "Todos"])
    sheet.append([])
    sheet.append(["TOTAL LISTADO", f"{len(tasks)} Empresas"])
    sheet.append(["PRIORIDADE ALTA", f"{high_priority} Casos"])
    sheet.append(["ESTIMATIVA DE CONCLUSÃO", f"{progress}% Concluído"])
    sheet.append(["Concluídas (Fiscal + Contábil)", done])
    sheet.append([])
    sheet.append([FOOTER_TEXT])
    sheet.column_dimensions["A"].width = 32
    sheet.column_dimensions["B"].width = 28


def _write_charts(sheet: Worksheet, tasks: Sequence[ObligationTask]) -> None:
    done, _ = estimated_completion(tasks)
    high = sum(1 for task in tasks if task.priority == "ALTA")
    medium = sum(1 for task in tasks if task.priority == "MÉDIA")
    low = sum(1 for task in tasks if task.priority in ("BAIXA", ""))

    sheet.append(["Status", "Empresas"])
    sheet.append(["Concluído", done])
    sheet.append(["Pendente", len(tasks) - done])
    sheet.append([])
    sheet.append(["Prioridade", "Empresas"])
    sheet.append(["Alta", high])
    sheet.append(["Média", medium])
    sheet.append(["Baixa", low])

    status_chart = BarChart()
    status_chart.title = "Status Geral"
    status_chart.add_data(Reference(sheet, min_col=2, min_row=1, max_row=3), titles_from_data=True)
    status_chart.set_categories(Reference(sheet, min_col=1, min_row=2, max_row=3))
    sheet.add_chart(status_chart, "D2")

    priority_chart = BarChart()
    priority_chart.title = "Distribuição por Prioridade"
    priority_chart.add_data(Reference(sheet, min_col=2, min_row=5, max_row=8), titles_from_data=True)
    priority_chart.set_categories(Reference(sheet, min_col=1, min_row=6, max_row=8))
    sheet.add_chart(priority_chart, "D18")


def _write_table(sheet: Worksheet, tasks: Sequence[ObligationTask], context: FilterContext) -> None:
    header, body = table_rows(tasks, context)
    sheet.append(header)
    for cell in sheet[1]:
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
    for row in body:
        sheet.append(row)
    sheet.freeze_panes = "A2"


def render_report_workbook(
    tasks: Sequence[ObligationTask],
    config: ReportConfig,
    spec: FilterSpec,
    *,
    generated_at: datetime | None = None,
) -> bytes:
    workbook = Workbook()
    summary = workbook.active
    summary.title = "Resumo"
    _write_summary(summary, tasks, config, spec, generated_at or datetime.now())

    if config.include_charts:
        _write_charts(workbook.create_sheet("Gráficos"), tasks)
    if config.include_table:
        _write_table(workbook.create_sheet("Empresas"), tasks, spec.context)

    for sheet in workbook.worksheets:
        sheet.page_setup.orientation = config.orientation.value

    output = io.BytesIO()
    workbook.save(output)
    return output.getvalue()


def render_report_csv(tasks: Sequence[ObligationTask], spec: FilterSpec) -> bytes:
    header, body = table_rows(tasks, spec.context)
    sio = io.StringIO()
    writer = csv.writer(sio)
    writer.writerow(header)
    writer.writerows(body)
    return sio.getvalue().encode("utf-8")
