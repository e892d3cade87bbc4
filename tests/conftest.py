from __future__ import annotations

from dataclasses import dataclass

import pytest

from src.staffing_workflow.staffing_workflow.container import Container, build_services
from src.staffing_workflow.staffing_workflow.core.constants import CREW_CHIEF_ROLE_CODE
from src.staffing_workflow.staffing_workflow.core.enums import Role

from tests.fakes import (
    COMPANY_ID,
    CREW_CHIEF,
    CREW_CHIEF_ASSIGNMENT_ID,
    OPEN_SHIFT_ID,
    OTHER_COMPANY_ID,
    OTHER_CREW_CHIEF,
    OTHER_SHIFT_ID,
    SHIFT_ID,
    InMemoryAssignments,
    InMemoryShifts,
    InMemoryTimesheets,
    InMemoryUsers,
    RecordingPublisher,
)


@dataclass
class World:
    users: InMemoryUsers
    shifts: InMemoryShifts
    assignments: InMemoryAssignments
    timesheets: InMemoryTimesheets
    publisher: RecordingPublisher
    container: Container


@pytest.fixture
def world() -> World:
    users = InMemoryUsers()
    users.add(1, "admin", "admin123", Role.ADMIN)
    users.add(2, "crewchief", "crew123", Role.CREW_CHIEF)
    users.add(3, "otherchief", "crew123", Role.CREW_CHIEF)
    users.add(4, "staff", "staff123", Role.STAFF)
    users.add(5, "worker", "worker123", Role.EMPLOYEE)
    users.add(6, "client", "client123", Role.COMPANY_USER, company_id=COMPANY_ID)
    users.add(8, "otherclient", "client123", Role.COMPANY_USER, company_id=OTHER_COMPANY_ID)
    users.add(9, "retired", "retired123", Role.STAFF, is_active=False)

    shifts = InMemoryShifts()
    shifts.add(SHIFT_ID, COMPANY_ID)
    shifts.add(OTHER_SHIFT_ID, OTHER_COMPANY_ID)
    shifts.add(OPEN_SHIFT_ID, COMPANY_ID)

    assignments = InMemoryAssignments()
    assignments.add(CREW_CHIEF_ASSIGNMENT_ID, SHIFT_ID, CREW_CHIEF.user_id, role_code=CREW_CHIEF_ROLE_CODE)
    assignments.add(2001, OTHER_SHIFT_ID, OTHER_CREW_CHIEF.user_id, role_code=CREW_CHIEF_ROLE_CODE)

    timesheets = InMemoryTimesheets(assignments, shifts)
    publisher = RecordingPublisher()

    container = build_services(
        users_repo=users,
        shifts_repo=shifts,
        assignments_repo=assignments,
        timesheets_repo=timesheets,
        publisher=publisher,
        max_entries=3,
        bulk_close_max_workers=4,
    )
    return World(users, shifts, assignments, timesheets, publisher, container)
