"""
Audit sink for workflow transition events.

The workflow engine only ever writes audit events; it never reads them back.
A failed write must not undo or block the status mutation that produced the
event, so ``emit`` logs and swallows every failure.
"""

import json
import logging
from typing import Any, Dict, Protocol

from db.application_store import ApplicationStore
from utils.validation import get_current_utc_timestamp

logger = logging.getLogger(__name__)


class AuditEmitter(Protocol):
    """
    Anything that accepts structured audit events.

    Implementations should return False instead of raising; callers still go
    through ``emit_audit_event`` so a raising emitter cannot fail a saved
    transition.
    """

    def emit(self, event: Dict[str, Any]) -> bool:
        ...


class SqliteAuditEmitter:
    """
    Audit emitter that appends events to the ``audit_logs`` table.

    Usage:
        emitter = SqliteAuditEmitter(store)
        emitter.emit(build_status_change_event(...))
    """

    def __init__(self, store: ApplicationStore):
        """
        Initialize emitter on top of an application store.

        Args:
            store: Store whose database holds the audit_logs table
        """
        self.store = store

    def emit(self, event: Dict[str, Any]) -> bool:
        """
        Append one audit event.

        Args:
            event: Event dict built by utils.audit_events

        Returns:
            True if the event was written, False if the write failed
        """
        try:
            details = event.get("details") or {}
            timestamp = details.get("timestamp") or get_current_utc_timestamp()
            with self.store.connect() as conn:
                conn.execute(
                    """
                    INSERT INTO audit_logs (
                        actor, action, resource_type, resource_id,
                        description, details_json, timestamp
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(event["actor"]),
                        event["action"],
                        event["resource_type"],
                        event["resource_id"],
                        event["description"],
                        json.dumps(details, default=str),
                        timestamp,
                    ),
                )
        except Exception as e:
            logger.warning(
                f"Audit event {event.get('action')} for {event.get('resource_type')} "
                f"{event.get('resource_id')} was not recorded: {e}"
            )
            return False

        return True


def emit_audit_event(audit: AuditEmitter, event: Dict[str, Any]) -> bool:
    """
    Hand an event to any emitter without letting it fail the caller.

    Call sites run after the status mutation is saved, so an emitter that
    raises is logged and reported as an unrecorded event.

    Returns:
        True if the emitter accepted the event, False otherwise
    """
    try:
        return audit.emit(event) is not False
    except Exception as e:
        logger.warning(
            f"Audit emitter {type(audit).__name__} failed on {event.get('action')} "
            f"for {event.get('resource_type')} {event.get('resource_id')}: {e}"
        )
        return False
