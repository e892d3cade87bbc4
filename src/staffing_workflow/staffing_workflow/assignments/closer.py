"""End every open assignment of a shift in one request.

Each assignment is closed in its own transaction on a small thread pool. A
failure is recorded against its assignment and the rest keep going; nothing
already committed is undone, including when the batch is cancelled.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from ..authorization.identity import Actor
from ..authorization.policy import Action, AuthorizationPolicy, ShiftResource
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_BULK_CLOSE_MAX_WORKERS
from ..core.enums import TERMINAL_ASSIGNMENT_STATUSES
from ..core.exceptions import DomainError, NotFoundError
from ..shifts.repository import ShiftRepository
from .model import TransitionOutcome
from .repository import AssignmentRepository
from .service import AssignmentService

logger = structlog.get_logger(__name__)

_CANCELLED = object()


@dataclass(frozen=True)
class BulkFailure:
    assignment_id: int
    code: str
    error: str
    retryable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assignment_id": self.assignment_id,
            "code": self.code,
            "error": self.error,
            "retryable": self.retryable,
        }


@dataclass
class BulkCloseReport:
    shift_id: int
    attempted: int = 0
    succeeded: int = 0
    failures: List[BulkFailure] = field(default_factory=list)
    cancelled: List[int] = field(default_factory=list)
    results: List[TransitionOutcome] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shift_id": self.shift_id,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failures": [f.to_dict() for f in self.failures],
            "cancelled": list(self.cancelled),
            "workers": [r.to_dict() for r in self.results],
        }


class ShiftCloser:
    def __init__(
        self,
        lifecycle: AssignmentService,
        assignments: AssignmentRepository,
        shifts: ShiftRepository,
        policy: AuthorizationPolicy,
        *,
        max_workers: int = DEFAULT_BULK_CLOSE_MAX_WORKERS,
    ):
        self._lifecycle = lifecycle
        self._assignments = assignments
        self._shifts = shifts
        self._policy = policy
        self._max_workers = max(1, int(max_workers))

    def close_shift(
        self,
        *,
        actor: Actor,
        shift_id: int,
        cancel: Optional[threading.Event] = None,
        now: datetime | None = None,
    ) -> BulkCloseReport:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        self._policy.require(actor, Action.END_ALL_SHIFTS, ShiftResource(shift_id=shift.shift_id, company_id=shift.company_id))

        targets = self._assignments.list_for_shift(shift.shift_id, exclude_statuses=TERMINAL_ASSIGNMENT_STATUSES)
        report = BulkCloseReport(shift_id=shift.shift_id)
        if not targets:
            logger.info("bulk_close_nothing_to_do", shift_id=shift.shift_id, user_id=actor.user_id)
            return report

        now = now or now_local()
        workers = min(self._max_workers, len(targets))
        outcomes: Dict[int, TransitionOutcome] = {}

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bulk-close") as pool:
            futures = {
                pool.submit(self._close_one, a.assignment_id, now, cancel): a.assignment_id
                for a in targets
            }
            for future in as_completed(futures):
                assignment_id = futures[future]
                try:
                    result = future.result()
                except DomainError as e:
                    report.attempted += 1
                    report.failures.append(BulkFailure(assignment_id, e.code, str(e), e.retryable))
                    logger.warning("bulk_close_failed", shift_id=shift.shift_id, assignment_id=assignment_id, code=e.code, error=str(e))
                    continue
                except Exception as e:
                    report.attempted += 1
                    report.failures.append(BulkFailure(assignment_id, "UNEXPECTED_FAILURE", "Internal server error"))
                    logger.exception("bulk_close_unexpected", shift_id=shift.shift_id, assignment_id=assignment_id, error=str(e))
                    continue

                if result is _CANCELLED:
                    report.cancelled.append(assignment_id)
                    continue
                report.attempted += 1
                report.succeeded += 1
                outcomes[assignment_id] = result

        report.results = [outcomes[k] for k in sorted(outcomes)]
        report.failures.sort(key=lambda f: f.assignment_id)
        report.cancelled.sort()
        logger.info(
            "bulk_close_finished",
            shift_id=shift.shift_id,
            user_id=actor.user_id,
            attempted=report.attempted,
            succeeded=report.succeeded,
            failed=len(report.failures),
            cancelled=len(report.cancelled),
        )
        return report

    def _close_one(self, assignment_id: int, now: datetime, cancel: Optional[threading.Event]):
        if cancel is not None and cancel.is_set():
            return _CANCELLED
        return self._lifecycle.apply_end_shift(assignment_id, now=now)
