"""Audit trail for payroll actions."""

from salespay.persistence.event_log import EventKind, EventLog, PayrollEvent

__all__ = ["EventKind", "EventLog", "PayrollEvent"]
