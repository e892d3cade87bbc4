from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .assignments.closer import ShiftCloser
from .assignments.mysql_assignment_repository import MySQLAssignmentRepository
from .assignments.repository import AssignmentRepository
from .assignments.service import AssignmentService
from .authorization.policy import AuthorizationPolicy
from .core.constants import (
    DEFAULT_BULK_CLOSE_MAX_WORKERS,
    DEFAULT_DB_TIMEOUT_SECONDS,
    DEFAULT_MAX_TIME_ENTRIES,
    DEFAULT_REALTIME_TIMEOUT_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .notifications.emitter import NotificationEmitter
from .notifications.publisher import HttpRelayPublisher, InMemoryChannelHub, Publisher
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    shifts_repo: ShiftRepository
    assignments_repo: AssignmentRepository
    timesheets_repo: TimesheetRepository

    publisher: Publisher
    policy: AuthorizationPolicy
    notifier: NotificationEmitter

    auth_service: AuthService
    assignment_service: AssignmentService
    shift_closer: ShiftCloser
    timesheet_service: TimesheetService


def build_services(
    *,
    users_repo: UserRepository,
    shifts_repo: ShiftRepository,
    assignments_repo: AssignmentRepository,
    timesheets_repo: TimesheetRepository,
    publisher: Publisher,
    max_entries: int = DEFAULT_MAX_TIME_ENTRIES,
    bulk_close_max_workers: int = DEFAULT_BULK_CLOSE_MAX_WORKERS,
) -> Container:
    """Wire the services over any repository implementation."""

    policy = AuthorizationPolicy(assignments_repo)
    notifier = NotificationEmitter(publisher)

    assignment_service = AssignmentService(
        assignments_repo,
        shifts_repo,
        policy,
        notifier,
        max_entries=max_entries,
    )
    shift_closer = ShiftCloser(
        assignment_service,
        assignments_repo,
        shifts_repo,
        policy,
        max_workers=bulk_close_max_workers,
    )
    timesheet_service = TimesheetService(timesheets_repo, shifts_repo, assignments_repo, policy, notifier)

    return Container(
        users_repo=users_repo,
        shifts_repo=shifts_repo,
        assignments_repo=assignments_repo,
        timesheets_repo=timesheets_repo,
        publisher=publisher,
        policy=policy,
        notifier=notifier,
        auth_service=AuthService(users_repo),
        assignment_service=assignment_service,
        shift_closer=shift_closer,
        timesheet_service=timesheet_service,
    )


def build_container(
    *,
    db_config: dict,
    realtime_relay_url: Optional[str] = None,
    realtime_timeout: float = DEFAULT_REALTIME_TIMEOUT_SECONDS,
    max_entries: int = DEFAULT_MAX_TIME_ENTRIES,
    bulk_close_max_workers: int = DEFAULT_BULK_CLOSE_MAX_WORKERS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", DEFAULT_DB_TIMEOUT_SECONDS)),
    )
    conn = DatabaseConnection(config)

    if realtime_relay_url:
        publisher: Publisher = HttpRelayPublisher(realtime_relay_url, timeout=realtime_timeout)
    else:
        publisher = InMemoryChannelHub()

    return build_services(
        users_repo=MySQLUserRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        assignments_repo=MySQLAssignmentRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        publisher=publisher,
        max_entries=max_entries,
        bulk_close_max_workers=bulk_close_max_workers,
    )
