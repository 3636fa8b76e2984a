from __future__ import annotations

from datetime import date

import pytest

import config.testing as testing_settings
from src.tardiness_system.tardiness_system.core.enums import CalculationMethod, PeriodType, ThresholdOperator
from src.tardiness_system.tardiness_system.core.exceptions import ValidationError
from src.tardiness_system.tardiness_system.incidents.model import Incident, IncidentConfig, IncidentType
from src.tardiness_system.tardiness_system.incidents.service import IncidentThresholdService
from src.tardiness_system.tardiness_system.main import create_app
from src.tardiness_system.tardiness_system.store.memory_store import InMemoryTardinessStore


@pytest.fixture
def store():
    return InMemoryTardinessStore(
        incident_types=[IncidentType(1, "Late arrivals", CalculationMethod.COUNT)],
        incident_configs=[
            IncidentConfig(10, 1, 2, ThresholdOperator.GT, PeriodType.MONTHLY),
            IncidentConfig(11, 1, 0, ThresholdOperator.GT, PeriodType.MONTHLY, is_active=False),
        ],
        incidents=[
            Incident(1, 1, date(2026, 3, 2), 1),
            Incident(2, 1, date(2026, 3, 9), 1),
            Incident(3, 1, date(2026, 3, 20), 1),
            Incident(4, 1, date(2026, 4, 1), 1),
        ],
    )


def test_thresholds_are_checked_against_stored_incidents(store):
    alerts = IncidentThresholdService(store).check_thresholds(date(2026, 3, 1), date(2026, 3, 31))

    assert [a.config.config_id for a in alerts] == [10]
    assert alerts[0].calculated_value == 3
    assert alerts[0].incidents == 3


def test_range_outside_the_incidents_raises_no_alert(store):
    assert IncidentThresholdService(store).check_thresholds(date(2026, 4, 1), date(2026, 4, 30)) == []


def test_reversed_range_is_rejected(store):
    with pytest.raises(ValidationError):
        IncidentThresholdService(store).check_thresholds(date(2026, 3, 31), date(2026, 3, 1))


def test_threshold_alerts_route(store):
    client = create_app(testing_settings, store=store).test_client()

    resp = client.get("/api/incidents/threshold-alerts?start_date=2026-03-01&end_date=2026-03-31")

    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body) == 1
    assert body[0]["config_id"] == 10
    assert body[0]["incident_type"] == "Late arrivals"
    assert body[0]["operator"] == ThresholdOperator.GT.value
    assert body[0]["calculated_value"] == 3
    assert body[0]["incidents"] == 3


@pytest.mark.parametrize(
    "query",
    [
        "start_date=2026-03-01",
        "start_date=March&end_date=2026-03-31",
        "start_date=2026-03-31&end_date=2026-03-01",
    ],
)
def test_threshold_alerts_route_validates_dates(store, query):
    client = create_app(testing_settings, store=store).test_client()

    resp = client.get(f"/api/incidents/threshold-alerts?{query}")

    assert resp.status_code == 400
    assert resp.get_json()["type"] == "ValidationError"
