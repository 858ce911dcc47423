"""ORM model package."""

from obligation_tracker.models.entities import (
    ChangeLogRecord,
    CollaboratorRecord,
    ObligationTaskRecord,
    TaxRegimeRecord,
)

__all__ = [
    "ChangeLogRecord",
    "CollaboratorRecord",
    "ObligationTaskRecord",
    "TaxRegimeRecord",
]
