from __future__ import annotations

import logging
from datetime import datetime

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime, to_naive_local
from ..core.enums import RecordStatus
from ..core.exceptions import (
    ConcurrencyConflict,
    ConfigurationError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..container import Container

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    InvalidStateError: 409,
    ConcurrencyConflict: 409,
    ConfigurationError: 500,
}


def _status_for(error: DomainError) -> int:
    for cls in type(error).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return 400


def register(app: Flask, container: Container) -> None:
    service = container.processing_service

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("JSON body required")
        return data

    def _required(data: dict, key: str):
        value = data.get(key)
        if value is None or value == "":
            raise ValidationError(f"{key} is required")
        return value

    def _parse_datetime_arg(value) -> datetime | None:
        if not value:
            return None
        try:
            parsed = parse_iso_datetime(str(value))
        except ValueError:
            raise ValidationError(f"Invalid datetime: {value!r}")
        # engine timestamps are naive local time
        return to_naive_local(parsed)

    def _int(value, key: str) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{key} must be an integer")

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        code = _status_for(error)
        if code >= 500:
            logger.error("Engine configuration error: %s", error)
        return jsonify({"success": False, "error": str(error), "type": type(error).__name__}), code

    @app.route("/api/tardiness/process", methods=["POST"], endpoint="process_tardiness")
    def process_tardiness():
        data = _json_body()
        check_in = _parse_datetime_arg(_required(data, "check_in_time"))
        scheduled = _parse_datetime_arg(_required(data, "scheduled_time"))
        attendance_id = data.get("attendance_id")

        result = service.process_tardiness(
            _int(_required(data, "employee_id"), "employee_id"),
            check_in,
            scheduled,
            _int(attendance_id, "attendance_id") if attendance_id is not None else None,
        )
        return jsonify({"success": True, **result.as_dict()})

    @app.route("/api/absences/process", methods=["POST"], endpoint="process_absence")
    def process_absence():
        data = _json_body()
        try:
            absence_date = parse_iso_date(str(_required(data, "absence_date")))
        except ValueError:
            raise ValidationError("absence_date must be YYYY-MM-DD")

        result = service.process_unjustified_absence(_int(_required(data, "employee_id"), "employee_id"), absence_date)
        return jsonify({"success": True, **result.as_dict()})

    @app.route("/api/employees/<int:employee_id>/accumulation", methods=["GET"], endpoint="employee_accumulation")
    def employee_accumulation(employee_id: int):
        month = request.args.get("month")
        year = request.args.get("year")
        snapshot = service.get_employee_accumulation(
            employee_id,
            _int(month, "month") if month is not None else None,
            _int(year, "year") if year is not None else None,
        )
        return jsonify(snapshot.as_dict())

    @app.route("/api/employees/<int:employee_id>/disciplinary-records", methods=["GET"], endpoint="employee_records")
    def employee_records(employee_id: int):
        status_arg = (request.args.get("status") or "").strip().upper()
        try:
            status = RecordStatus(status_arg) if status_arg else None
        except ValueError:
            raise ValidationError(f"Unknown status: {status_arg}")

        records = service.get_employee_disciplinary_records(
            employee_id,
            status=status,
            start_date=_parse_datetime_arg(request.args.get("start_date")),
            end_date=_parse_datetime_arg(request.args.get("end_date")),
        )
        return jsonify([r.as_dict() for r in records])

    @app.route("/api/employees/<int:employee_id>/disciplinary-stats", methods=["GET"], endpoint="employee_stats")
    def employee_stats(employee_id: int):
        stats = service.get_employee_disciplinary_stats(employee_id)
        return jsonify(
            {
                "total_records": stats.total_records,
                "active_records": stats.active_records,
                "last_30_days": stats.last_30_days,
                "last_90_days": stats.last_90_days,
                "administrative_acts": stats.administrative_acts,
                "suspensions": stats.suspensions,
                "recent_acts": stats.recent_acts,
                "at_risk_of_termination": stats.at_risk_of_termination,
            }
        )

    @app.route("/api/employees/at-risk", methods=["GET"], endpoint="employees_at_risk")
    def employees_at_risk():
        return jsonify([r.as_dict() for r in service.list_employees_at_risk()])

    @app.route("/api/disciplinary-records/pending", methods=["GET"], endpoint="pending_records")
    def pending_records():
        return jsonify([r.as_dict() for r in service.list_pending_records()])

    @app.route("/api/disciplinary-records/<int:record_id>/decision", methods=["POST"], endpoint="decide_record")
    def decide_record(record_id: int):
        data = _json_body()
        approved = data.get("approved")
        if not isinstance(approved, bool):
            raise ValidationError("approved must be true or false")
        notes = (data.get("notes") or "").strip() or None

        record = service.approve_disciplinary_record(
            record_id,
            _int(_required(data, "approver_id"), "approver_id"),
            approved,
            notes,
        )
        return jsonify({"success": True, "record": record.as_dict()})
