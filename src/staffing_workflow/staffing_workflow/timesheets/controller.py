from __future__ import annotations

from flask import Flask

from ..authorization.identity import Actor
from ..common.http import api_action, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shifts/<int:shift_id>/submit-timesheet", methods=["POST"], endpoint="submit_timesheet")
    @api_action
    def submit_timesheet(shift_id: int, *, actor: Actor):
        timesheet = container.timesheet_service.submit_for_review(actor=actor, shift_id=shift_id)
        return ok(message="Timesheet submitted for approval", timesheet=timesheet.to_dict())

    @app.route(
        "/api/timesheets/<int:timesheet_id>/supervisor-approval",
        methods=["POST"],
        endpoint="approve_timesheet_supervisor",
    )
    @api_action
    def approve_supervisor(timesheet_id: int, *, actor: Actor):
        timesheet = container.timesheet_service.approve_supervisor_stage(
            actor=actor, timesheet_id=timesheet_id, notes=json_body().get("notes")
        )
        return ok(message="Timesheet approved", timesheet=timesheet.to_dict())

    @app.route(
        "/api/timesheets/<int:timesheet_id>/final-approval",
        methods=["POST"],
        endpoint="finalize_timesheet",
    )
    @api_action
    def final_approval(timesheet_id: int, *, actor: Actor):
        timesheet = container.timesheet_service.finalize(
            actor=actor, timesheet_id=timesheet_id, notes=json_body().get("notes")
        )
        return ok(message="Timesheet finalized", timesheet=timesheet.to_dict())

    @app.route("/api/timesheets/<int:timesheet_id>/reject", methods=["POST"], endpoint="reject_timesheet")
    @api_action
    def reject_timesheet(timesheet_id: int, *, actor: Actor):
        timesheet = container.timesheet_service.reject(
            actor=actor, timesheet_id=timesheet_id, reason=json_body().get("reason")
        )
        return ok(message="Timesheet rejected", timesheet=timesheet.to_dict())

    @app.route("/api/timesheets/<int:timesheet_id>", methods=["GET"], endpoint="get_timesheet")
    @api_action
    def get_timesheet(timesheet_id: int, *, actor: Actor):
        timesheet = container.timesheet_service.get(actor=actor, timesheet_id=timesheet_id)
        return ok(timesheet=timesheet.to_dict())
