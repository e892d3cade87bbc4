from __future__ import annotations

from typing import Any, Dict

import structlog

from ..core.constants import ASSIGNMENT_UPDATE_EVENT, SHIFT_TOPIC_PREFIX, STATUS_UPDATE_EVENT, TIMESHEET_TOPIC_PREFIX
from .publisher import Publisher

logger = structlog.get_logger(__name__)


def timesheet_topic(timesheet_id: int) -> str:
    return f"{TIMESHEET_TOPIC_PREFIX}{int(timesheet_id)}"


def shift_topic(shift_id: int) -> str:
    return f"{SHIFT_TOPIC_PREFIX}{int(shift_id)}"


class NotificationEmitter:
    """Announces completed transitions to realtime listeners.

    Delivery is at-most-once and never raises: the transition that triggered
    the event has already been committed when ``publish`` runs.
    """

    def __init__(self, publisher: Publisher):
        self._publisher = publisher

    def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> bool:
        try:
            self._publisher.publish(topic, event, payload)
        except Exception as e:
            logger.warning("notification_failed", topic=topic, notification_event=event, error=str(e))
            return False
        return True

    def timesheet_status_changed(self, timesheet) -> bool:
        return self.publish(
            timesheet_topic(timesheet.timesheet_id),
            STATUS_UPDATE_EVENT,
            {"id": timesheet.timesheet_id, "status": timesheet.status.value},
        )

    def assignment_changed(self, assignment) -> bool:
        return self.publish(
            shift_topic(assignment.shift_id),
            ASSIGNMENT_UPDATE_EVENT,
            {"assignment_id": assignment.assignment_id, "status": assignment.status.value},
        )
