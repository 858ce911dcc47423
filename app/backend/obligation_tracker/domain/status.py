"""Obligation slots, per-slot status vocabularies and the finished-state check."""

from __future__ import annotations

import enum

FINISHED_STATUSES: frozenset[str] = frozenset(
    {
        "FINALIZADA",
        "ENVIADA",
        "LUCRO LANÇADO",
        "EFD ENVIADA",
        "EFD RETIFICADA",
        "DISPENSADA",
        "NÃO SE APLICA",
        "NÃO HÁ DISTRIBUIÇÃO",
    }
)


def is_finished(status: str | None) -> bool:
    """Whether a raw status string is terminal for any obligation slot.

    Case-insensitive and slot-agnostic. Absent or empty values are pending.
    """

    if not status:
        return False
    return status.upper() in FINISHED_STATUSES


class _SlotStatusMixin:
    @property
    def is_finished(self) -> bool:
        return is_finished(self.value)  # type: ignore[attr-defined]


class FiscalStatus(_SlotStatusMixin, str, enum.Enum):
    EM_ABERTO = "EM ABERTO"
    FINALIZADA = "FINALIZADA"


class ContabilStatus(_SlotStatusMixin, str, enum.Enum):
    EM_ABERTO = "EM ABERTO"
    FINALIZADA = "FINALIZADA"


class BalancoStatus(_SlotStatusMixin, str, enum.Enum):
    EM_ABERTO = "EM ABERTO"
    FINALIZADA = "FINALIZADA"


class LucroStatus(_SlotStatusMixin, str, enum.Enum):
    PENDENTE = "PENDENTE"
    LUCRO_LANCADO = "LUCRO LANÇADO"
    NAO_HA_DISTRIBUICAO = "NÃO HÁ DISTRIBUIÇÃO"


class ReinfStatus(_SlotStatusMixin, str, enum.Enum):
    PENDENTE = "PENDENTE"
    EFD_ENVIADA = "EFD ENVIADA"
    AGUARDANDO_RETIFICACAO = "AGUARDANDO RETIFICAÇÃO"
    EFD_RETIFICADA = "EFD RETIFICADA"


class EcdStatus(_SlotStatusMixin, str, enum.Enum):
    PENDENTE = "PENDENTE"
    ENVIADA = "ENVIADA"
    DISPENSADA = "DISPENSADA"


class EcfStatus(_SlotStatusMixin, str, enum.Enum):
    PENDENTE = "PENDENTE"
    ENVIADA = "ENVIADA"
    NAO_SE_APLICA = "NÃO SE APLICA"


SlotStatus = FiscalStatus | ContabilStatus | BalancoStatus | LucroStatus | ReinfStatus | EcdStatus | EcfStatus


class ObligationSlot(str, enum.Enum):
    """Filing tracks carried by every company task."""

    FISCAL = "fiscal"
    CONTABIL = "contabil"
    BALANCO = "balanco"
    LUCRO = "lucro"
    REINF = "reinf"
    ECD = "ecd"
    ECF = "ecf"

    @property
    def label(self) -> str:
        return SLOT_LABELS[self]

    @property
    def tier(self) -> int | None:
        """1 for independent slots, 2 for slots gated by Fiscal, None when not aggregated."""

        if self in TIER_ONE_SLOTS:
            return 1
        if self in TIER_TWO_SLOTS:
            return 2
        return None

    @property
    def vocabulary(self) -> type[enum.Enum]:
        return SLOT_VOCABULARIES[self]


SLOT_LABELS: dict[ObligationSlot, str] = {
    ObligationSlot.FISCAL: "Fiscal",
    ObligationSlot.CONTABIL: "Contábil",
    ObligationSlot.BALANCO: "Balanço",
    ObligationSlot.LUCRO: "Lucro",
    ObligationSlot.REINF: "Reinf",
    ObligationSlot.ECD: "ECD",
    ObligationSlot.ECF: "ECF",
}

SLOT_VOCABULARIES: dict[ObligationSlot, type[enum.Enum]] = {
    ObligationSlot.FISCAL: FiscalStatus,
    ObligationSlot.CONTABIL: ContabilStatus,
    ObligationSlot.BALANCO: BalancoStatus,
    ObligationSlot.LUCRO: LucroStatus,
    ObligationSlot.REINF: ReinfStatus,
    ObligationSlot.ECD: EcdStatus,
    ObligationSlot.ECF: EcfStatus,
}

TIER_ONE_SLOTS: tuple[ObligationSlot, ...] = (ObligationSlot.FISCAL, ObligationSlot.REINF)
TIER_TWO_SLOTS: tuple[ObligationSlot, ...] = (
    ObligationSlot.CONTABIL,
    ObligationSlot.LUCRO,
    ObligationSlot.ECD,
    ObligationSlot.ECF,
)

# Slots that take part in filters, progress and bottleneck accounting, in report order.
AGGREGATED_SLOTS: tuple[ObligationSlot, ...] = (
    ObligationSlot.FISCAL,
    ObligationSlot.CONTABIL,
    ObligationSlot.REINF,
    ObligationSlot.LUCRO,
    ObligationSlot.ECD,
    ObligationSlot.ECF,
)

# Narrower closure used only by deadline bucketing. Balanço, ECD and ECF are left out.
DEADLINE_CLOSURE_SLOTS: tuple[ObligationSlot, ...] = (
    ObligationSlot.FISCAL,
    ObligationSlot.CONTABIL,
    ObligationSlot.REINF,
    ObligationSlot.LUCRO,
)


def default_status(slot: ObligationSlot) -> str:
    """Status assumed when the data source has none stored."""

    if slot in (ObligationSlot.FISCAL, ObligationSlot.CONTABIL, ObligationSlot.BALANCO):
        return "EM ABERTO"
    return "PENDENTE"


def coerce_slot_status(slot: ObligationSlot, value: str) -> SlotStatus:
    """Resolve a raw value against the slot's own vocabulary.

    Raises ``ValueError`` when the value does not belong to the slot.
    """

    normalized = (value or "").strip().upper()
    vocabulary = SLOT_VOCABULARIES[slot]
    for member in vocabulary:
        if member.value == normalized:
            return member  # type: ignore[return-value]
    allowed = ", ".join(member.value for member in vocabulary)
    raise ValueError(f"Status '{value}' is not valid for slot {slot.label}. Allowed: {allowed}.")
