from __future__ import annotations

from datetime import date

from ..core.exceptions import ValidationError
from ..store.repository import TardinessStore
from .model import ThresholdAlert
from .threshold import ThresholdEvaluator


class IncidentThresholdService:
    """Loads incident configuration and data from the store and evaluates it for a date range."""

    def __init__(self, store: TardinessStore, evaluator: ThresholdEvaluator | None = None):
        self._store = store
        self._evaluator = evaluator or ThresholdEvaluator()

    def check_thresholds(self, start: date, end: date) -> list[ThresholdAlert]:
        if end < start:
            raise ValidationError("end_date must be >= start_date")

        with self._store.transaction() as uow:
            incident_types = {t.incident_type_id: t for t in uow.list_incident_types()}
            configs = list(uow.list_incident_configs())
            incidents = list(uow.list_incidents(start=start, end=end))

        return self._evaluator.check_thresholds(
            configs=configs,
            incident_types=incident_types,
            incidents=incidents,
            start=start,
            end=end,
        )
