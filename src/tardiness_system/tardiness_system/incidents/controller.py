from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.incident_service

    def _date_arg(key: str):
        value = (request.args.get(key) or "").strip()
        if not value:
            raise ValidationError(f"{key} is required")
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{key} must be YYYY-MM-DD")

    @app.route("/api/incidents/threshold-alerts", methods=["GET"], endpoint="incident_threshold_alerts")
    def threshold_alerts():
        alerts = service.check_thresholds(_date_arg("start_date"), _date_arg("end_date"))
        return jsonify([a.as_dict() for a in alerts])
