from __future__ import annotations

from flask import Flask

from ..authorization.identity import Actor
from ..common.http import api_action, json_body, ok
from ..common.validators import require_positive_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _assignment_id() -> int:
        return require_positive_int(json_body().get("assignment_id"), "assignment_id")

    @app.route("/api/shifts/<int:shift_id>/clock-in", methods=["POST"], endpoint="clock_in")
    @api_action
    def clock_in(shift_id: int, *, actor: Actor):
        outcome = container.assignment_service.clock_in(
            actor=actor, shift_id=shift_id, assignment_id=_assignment_id()
        )
        return ok(message="Worker clocked in", **outcome.to_dict())

    @app.route("/api/shifts/<int:shift_id>/clock-out", methods=["POST"], endpoint="clock_out")
    @api_action
    def clock_out(shift_id: int, *, actor: Actor):
        outcome = container.assignment_service.clock_out(
            actor=actor, shift_id=shift_id, assignment_id=_assignment_id()
        )
        message = "Worker clocked out" if outcome.changed else "Worker is not clocked in"
        return ok(message=message, **outcome.to_dict())

    @app.route("/api/shifts/<int:shift_id>/mark-no-show", methods=["POST"], endpoint="mark_no_show")
    @api_action
    def mark_no_show(shift_id: int, *, actor: Actor):
        outcome = container.assignment_service.mark_no_show(
            actor=actor, shift_id=shift_id, assignment_id=_assignment_id()
        )
        message = "Worker marked as no show" if outcome.changed else "Worker shift is already closed"
        return ok(message=message, **outcome.to_dict())

    @app.route("/api/shifts/<int:shift_id>/end-worker-shift", methods=["POST"], endpoint="end_worker_shift")
    @api_action
    def end_worker_shift(shift_id: int, *, actor: Actor):
        outcome = container.assignment_service.end_shift(
            actor=actor, shift_id=shift_id, assignment_id=_assignment_id()
        )
        message = "Worker shift ended" if outcome.changed else "Worker shift is already closed"
        return ok(message=message, **outcome.to_dict())

    @app.route("/api/shifts/<int:shift_id>/end-all-shifts", methods=["POST"], endpoint="end_all_shifts")
    @api_action
    def end_all_shifts(shift_id: int, *, actor: Actor):
        report = container.shift_closer.close_shift(actor=actor, shift_id=shift_id)
        message = f"Ended {report.succeeded} of {report.attempted} worker shifts"
        return ok(message=message, **report.to_dict())
