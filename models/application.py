"""
Domain records for jobs, applications and their notes.

Records are built from joined database rows. ``Application.notes`` is an
append-only log: notes are only ever added through ``append_note`` and the
store never rewrites a persisted note.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.status import (
    ApplicationStatus,
    NoteActionType,
    RoleCategory,
    TERMINAL_STATUSES,
    WorkflowStage,
)


class Job(BaseModel):
    """Job posting as seen by the workflow engine (read-only input)."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    department: Optional[str] = None
    role_category: RoleCategory
    is_active: bool = True
    created_at: Optional[str] = None


class ApplicationNote(BaseModel):
    """A single entry in an application's note log."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    text: str
    added_by: str
    added_at: str
    processed_by: Optional[str] = None
    action_type: Optional[NoteActionType] = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


class Application(BaseModel):
    """Application record with its joined job fields and note log."""

    model_config = ConfigDict(extra="ignore")

    id: int
    job_id: int
    applicant_id: str
    cover_letter: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    workflow_stage: Optional[WorkflowStage] = None
    notes: List[ApplicationNote] = Field(default_factory=list)
    submitted_at: str
    last_updated: str

    # Joined from jobs; never written back through the application row
    job_title: Optional[str] = None
    role_category: RoleCategory

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def append_note(
        self,
        text: str,
        added_by: str,
        added_at: str,
        processed_by: Optional[str] = None,
        action_type: Optional[NoteActionType] = None,
    ) -> ApplicationNote:
        """Append an unsaved note to the log and return it."""
        note = ApplicationNote(
            text=text,
            added_by=added_by,
            added_at=added_at,
            processed_by=processed_by,
            action_type=action_type,
        )
        self.notes.append(note)
        return note

    def pending_notes(self) -> List[ApplicationNote]:
        """Notes appended since the record was loaded."""
        return [note for note in self.notes if not note.is_persisted]

    def to_response(self) -> dict[str, Any]:
        """JSON-ready representation for tool responses."""
        return self.model_dump(mode="json")
