from __future__ import annotations

from datetime import date

import pytest

from src.tardiness_system.tardiness_system.core.enums import CalculationMethod, PeriodType, ThresholdOperator
from src.tardiness_system.tardiness_system.core.exceptions import ConfigurationError
from src.tardiness_system.tardiness_system.incidents.model import Incident, IncidentConfig, IncidentType
from src.tardiness_system.tardiness_system.incidents.threshold import ThresholdEvaluator, aggregate, compare

START = date(2026, 3, 1)
END = date(2026, 3, 31)

TYPES = {
    1: IncidentType(1, "Late arrivals", CalculationMethod.COUNT),
    2: IncidentType(2, "Absence rate", CalculationMethod.RATE),
}


@pytest.mark.parametrize(
    "value, operator, threshold, expected",
    [
        (5, ThresholdOperator.GT, 4, True),
        (4, ThresholdOperator.GT, 4, False),
        (3, ThresholdOperator.LT, 4, True),
        (4, ThresholdOperator.GTE, 4, True),
        (4, ThresholdOperator.LTE, 4, True),
        (0.105, ThresholdOperator.EQ, 0.1, True),
        (0.12, ThresholdOperator.EQ, 0.1, False),
    ],
)
def test_compare(value, operator, threshold, expected):
    assert compare(value, operator, threshold) is expected


def test_aggregate_sums_counts_and_averages_rates():
    assert aggregate([1, 2, 3], CalculationMethod.COUNT) == 6
    assert aggregate([0.1, 0.3], CalculationMethod.RATE) == pytest.approx(0.2)
    assert aggregate([2, 4], CalculationMethod.AVERAGE) == 3


def test_alerts_only_for_exceeded_configs_in_period():
    configs = [
        IncidentConfig(10, 1, 2, ThresholdOperator.GT, PeriodType.MONTHLY),
        IncidentConfig(11, 2, 0.5, ThresholdOperator.GTE, PeriodType.MONTHLY),
        IncidentConfig(12, 1, 0, ThresholdOperator.GT, PeriodType.MONTHLY, is_active=False),
    ]
    incidents = [
        Incident(1, 1, date(2026, 3, 2), 1),
        Incident(2, 1, date(2026, 3, 9), 1),
        Incident(3, 1, date(2026, 3, 20), 1),
        Incident(4, 1, date(2026, 4, 1), 1),
        Incident(5, 2, date(2026, 3, 5), 0.2),
    ]

    alerts = ThresholdEvaluator().check_thresholds(
        configs=configs, incident_types=TYPES, incidents=incidents, start=START, end=END
    )

    assert [a.config.config_id for a in alerts] == [10]
    assert alerts[0].calculated_value == 3
    assert alerts[0].incidents == 3


def test_department_config_only_sees_its_department():
    configs = [IncidentConfig(10, 1, 1, ThresholdOperator.GT, PeriodType.MONTHLY, department_id=5)]
    incidents = [
        Incident(1, 1, date(2026, 3, 2), 1, department_id=5),
        Incident(2, 1, date(2026, 3, 3), 1, department_id=6),
    ]

    alerts = ThresholdEvaluator().check_thresholds(
        configs=configs, incident_types=TYPES, incidents=incidents, start=START, end=END
    )

    assert alerts == []


def test_unknown_incident_type_is_a_configuration_error():
    configs = [IncidentConfig(10, 99, 1, ThresholdOperator.GT, PeriodType.MONTHLY)]

    with pytest.raises(ConfigurationError):
        ThresholdEvaluator().check_thresholds(configs=configs, incident_types=TYPES, incidents=[], start=START, end=END)
