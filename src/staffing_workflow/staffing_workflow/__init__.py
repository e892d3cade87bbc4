"""Staffing Workflow package.

Feature modules (assignments, timesheets, authorization, ...) each carry a
domain model, a repository Protocol with its MySQL implementation, a service
holding the state machine, and a thin Flask controller.
"""
