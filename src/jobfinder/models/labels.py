"""Spanish display labels for the enum values shown on job cards."""

from enum import StrEnum
from typing import TypeVar

from jobfinder.models.job import ApplicationStatus, ContractType, ExperienceLevel, WorkModality


__all__ = [
    "APPLICATION_STATUS_LABELS",
    "CONTRACT_TYPE_LABELS",
    "EXPERIENCE_LEVEL_LABELS",
    "WORK_MODALITY_LABELS",
    "label_for",
    "value_for_label",
]

E = TypeVar("E", bound=StrEnum)

APPLICATION_STATUS_LABELS: dict[ApplicationStatus, str] = {
    ApplicationStatus.PENDING: "Pendiente",
    ApplicationStatus.SENT: "Enviada",
    ApplicationStatus.UNDER_REVIEW: "En revisión",
    ApplicationStatus.PRE_SELECTED: "Preseleccionado",
    ApplicationStatus.REJECTED: "Rechazada",
    ApplicationStatus.HIRED: "Oferta recibida",
}

CONTRACT_TYPE_LABELS: dict[ContractType, str] = {
    ContractType.FULL_TIME: "Tiempo completo",
    ContractType.PART_TIME: "Medio tiempo",
    ContractType.INTERNSHIP: "Prácticas",
    ContractType.VOLUNTEER: "Voluntariado",
    ContractType.FREELANCE: "Freelance",
}

EXPERIENCE_LEVEL_LABELS: dict[ExperienceLevel, str] = {
    ExperienceLevel.NO_EXPERIENCE: "Sin experiencia",
    ExperienceLevel.ENTRY_LEVEL: "Principiante",
    ExperienceLevel.MID_LEVEL: "Intermedio",
    ExperienceLevel.SENIOR_LEVEL: "Avanzado",
}

WORK_MODALITY_LABELS: dict[WorkModality, str] = {
    WorkModality.ON_SITE: "Presencial",
    WorkModality.REMOTE: "Remoto",
    WorkModality.HYBRID: "Híbrido",
}

_TABLES: dict[type[StrEnum], dict] = {
    ApplicationStatus: APPLICATION_STATUS_LABELS,
    ContractType: CONTRACT_TYPE_LABELS,
    ExperienceLevel: EXPERIENCE_LEVEL_LABELS,
    WorkModality: WORK_MODALITY_LABELS,
}


def label_for(value: StrEnum | str | None) -> str:
    """Display label for an enum value; unknown values are shown verbatim."""
    if value is None:
        return ""
    if isinstance(value, StrEnum):
        return _TABLES.get(type(value), {}).get(value, value.value)
    for table in _TABLES.values():
        for member, label in table.items():
            if member.value == value:
                return label
    return value


def value_for_label(enum_cls: type[E], label: str) -> E | None:
    """Reverse lookup of :func:`label_for`. Returns None for unknown labels."""
    for member, text in _TABLES[enum_cls].items():
        if text == label:
            return member
    return None
