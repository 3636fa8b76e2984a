from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Sequence

from ..core.constants import THRESHOLD_EQ_TOLERANCE
from ..core.enums import CalculationMethod, ThresholdOperator
from ..core.exceptions import ConfigurationError
from .model import Incident, IncidentConfig, IncidentType, ThresholdAlert

logger = logging.getLogger(__name__)


def compare(value: float, operator: ThresholdOperator, threshold: float) -> bool:
    if operator == ThresholdOperator.GT:
        return value > threshold
    if operator == ThresholdOperator.LT:
        return value < threshold
    if operator == ThresholdOperator.GTE:
        return value >= threshold
    if operator == ThresholdOperator.LTE:
        return value <= threshold
    if operator == ThresholdOperator.EQ:
        return abs(value - threshold) < THRESHOLD_EQ_TOLERANCE
    raise ValueError(f"Unsupported threshold operator: {operator!r}")


def aggregate(values: Sequence[float], method: CalculationMethod) -> float:
    total = sum(values)
    if method == CalculationMethod.COUNT:
        return total
    # RATE and AVERAGE both average the period's values
    return total / len(values)


class ThresholdEvaluator:
    """Compares aggregated incident values against configured thresholds."""

    def check_thresholds(
        self,
        *,
        configs: Iterable[IncidentConfig],
        incident_types: Mapping[int, IncidentType],
        incidents: Iterable[Incident],
        start: date,
        end: date,
    ) -> list[ThresholdAlert]:
        in_period = [i for i in incidents if start <= i.date <= end]
        alerts: list[ThresholdAlert] = []

        for config in configs:
            if not config.is_active:
                continue
            incident_type = incident_types.get(config.incident_type_id)
            if incident_type is None:
                raise ConfigurationError(
                    f"Incident config {config.config_id} references unknown incident type {config.incident_type_id}"
                )

            values = [
                i.value
                for i in in_period
                if i.incident_type_id == config.incident_type_id
                and (config.department_id is None or i.department_id == config.department_id)
            ]
            if not values:
                continue

            calculated = aggregate(values, incident_type.calculation_method)
            if compare(calculated, config.threshold_operator, config.threshold_value):
                logger.info(
                    "Threshold exceeded for %s: %.4f %s %.4f",
                    incident_type.name,
                    calculated,
                    config.threshold_operator.value,
                    config.threshold_value,
                )
                alerts.append(
                    ThresholdAlert(
                        config=config,
                        incident_type=incident_type,
                        calculated_value=calculated,
                        threshold_value=config.threshold_value,
                        incidents=len(values),
                        message=f"{incident_type.name} exceeded the configured threshold",
                    )
                )
        return alerts
