from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Mapping

from flask import Flask, jsonify, request

from ..core.enums import BadgeStatus, Role
from ..core.exceptions import (
    AttendanceError,
    AuthenticationError,
    AuthorizationError,
    DuplicateKeyError,
    ExternalServiceError,
    NotFoundError,
    StateError,
    ValidationError,
)
from ..logging_config import LogContext, get_logger

logger = get_logger(__name__)

# Most specific first.
_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateError, 409),
    (DuplicateKeyError, 409),
    (ValidationError, 400),
    (ExternalServiceError, 502),
)

_FIELD_ALIASES = {"radius_m": "radius", "artifact_url": "artifactUrl"}
_HIDDEN_FIELDS = {"claim_token", "claimed_at"}

_MEETING_FIELDS = {
    "title": "title",
    "description": "description",
    "startTime": "start_time",
    "endTime": "end_time",
    "lat": "lat",
    "lng": "lng",
    "radius": "radius_m",
    "checkInWindowBefore": "check_in_window_before",
    "checkInWindowAfter": "check_in_window_after",
}


def _camel(name: str) -> str:
    if name in _FIELD_ALIASES:
        return _FIELD_ALIASES[name]
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


def to_json(value: Any) -> Any:
    """Dataclasses to camelCase dicts, datetimes to ISO strings, enums to values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            _camel(f.name): to_json(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if f.name not in _HIDDEN_FIELDS
        }
    if isinstance(value, BadgeStatus):
        return value.public.value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def status_for(error: Exception) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400 if isinstance(error, AttendanceError) else 500


def _meeting_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return {snake: payload[camel] for camel, snake in _MEETING_FIELDS.items() if camel in payload}


def register(app: Flask, container: Any) -> None:
    """Mount the JSON action endpoint on ``/api``."""

    def set_user_role(email: str, payload: Dict[str, Any]):
        user = container.user_service.update_role(
            requestor_email=email, target_email=payload.get("email"), new_role=payload.get("role")
        )
        return {"success": True, "user": user}

    def set_user_streaks(email: str, payload: Dict[str, Any]):
        user = container.user_service.set_streaks(
            requestor_email=email,
            target_email=payload.get("email"),
            current_streak=payload.get("currentStreak"),
            longest_streak=payload.get("longestStreak"),
        )
        return {"success": True, "user": user}

    def create_meeting(email: str, payload: Dict[str, Any]):
        fields = _meeting_fields(payload)
        for required in ("title", "start_time", "end_time", "lat", "lng", "radius_m"):
            fields.setdefault(required, None)
        meeting = container.meeting_service.create_meeting(requestor_email=email, **fields)
        return {"success": True, "meetingId": meeting.meeting_id, "meeting": meeting}

    def edit_meeting(email: str, payload: Dict[str, Any]):
        updates = payload.get("updates") or {}
        if not isinstance(updates, Mapping):
            raise ValidationError("updates must be an object")
        renamed = {_MEETING_FIELDS.get(k, k): v for k, v in updates.items()}
        meeting = container.meeting_service.edit_meeting(
            requestor_email=email, meeting_id=payload.get("meetingId"), updates=renamed
        )
        return {"success": True, "meeting": meeting}

    def cancel_meeting(email: str, payload: Dict[str, Any]):
        meeting = container.meeting_service.cancel_meeting(requestor_email=email, meeting_id=payload.get("meetingId"))
        return {"success": True, "meeting": meeting}

    def upcoming_meetings(email: str, payload: Dict[str, Any]):
        return {"meetings": container.meeting_service.list_upcoming(requestor_email=email)}

    def check_in(email: str, payload: Dict[str, Any]):
        is_override = bool(payload.get("manualOverride"))
        target = payload.get("overrideEmail") if is_override else email
        if is_override and not target:
            raise ValidationError("overrideEmail is required for a manual override.")

        result = container.checkin_service.check_in(
            target_email=target,
            meeting_id=payload.get("meetingId"),
            lat=payload.get("lat"),
            lng=payload.get("lng"),
            is_override=is_override,
            acting_email=email,
        )
        return {
            "success": result.accepted,
            "created": result.created,
            "wasOnTime": result.was_on_time,
            "badgeId": result.job_id,
            "record": result.record,
        }

    def get_badge(email: str, payload: Dict[str, Any]):
        return container.badge_queue.get_badge(payload.get("badgeId"))

    def get_user_badges(email: str, payload: Dict[str, Any]):
        return {"badges": container.badge_queue.get_user_badges(payload.get("email") or email)}

    def get_all_badges(email: str, payload: Dict[str, Any]):
        if not container.permission_gate.check_permission(email, Role.ADMIN):
            raise AuthorizationError("Permission denied")
        return {"badges": container.badge_queue.get_all_badges()}

    actions: Dict[str, Callable[[str, Dict[str, Any]], Any]] = {
        "setUserRole": set_user_role,
        "setUserStreaks": set_user_streaks,
        "createMeeting": create_meeting,
        "editMeeting": edit_meeting,
        "cancelMeeting": cancel_meeting,
        "getUpcomingMeetings": upcoming_meetings,
        "checkIn": check_in,
        "getBadge": get_badge,
        "getUserBadges": get_user_badges,
        "getAllBadges": get_all_badges,
    }

    @app.route("/api", methods=["GET"], endpoint="api_health")
    def api_health():
        return jsonify({"status": "success", "data": {"message": "Attendance API is running"}})

    @app.route("/api", methods=["POST"], endpoint="api_dispatch")
    def api_dispatch():
        payload = request.get_json(silent=True)
        action = payload.get("action") if isinstance(payload, dict) else None
        try:
            if not isinstance(payload, dict):
                raise ValidationError("Invalid request: JSON body required.")

            email = container.token_verifier.verify_token(payload.get("token"))

            handler = actions.get(action)
            if handler is None:
                raise ValidationError(f"Invalid action: {action}")

            with LogContext(action=action, requestor=email):
                result = handler(email, payload)
            return jsonify({"status": "success", "data": to_json(result)})
        except AttendanceError as e:
            status = status_for(e)
            logger.info("api_request_rejected", action=action, status=status, error=str(e))
            return jsonify({"status": "error", "message": str(e)}), status
        except Exception as e:
            logger.exception("api_request_failed", action=action)
            return jsonify({"status": "error", "message": f"Internal error: {e.__class__.__name__}"}), 500
