"""
Shared fixtures for workflow engine tests.

Provides a temp-file SQLite database, a scripted random source, a manually
fired timer factory and an audit emitter that records events in memory.
"""

import pytest

from db.application_store import ApplicationStore, initialize_database
from models.status import ApplicationStatus, RoleCategory, WorkflowStage
from utils.application_locks import ApplicationLocks
from utils.status_updates import StatusUpdateService


class ScriptedRandom:
    """
    RandomSource returning pre-scripted draws.

    ``randoms`` feeds random(); once exhausted, ``default`` is returned.
    ``choices`` feeds choice(); each scripted value must be in the offered
    sequence. Once exhausted, the first element is returned.
    """

    def __init__(self, randoms=(), choices=(), default=0.99):
        self.randoms = list(randoms)
        self.choices = list(choices)
        self.default = default
        self.random_calls = 0
        self.choice_calls = 0

    def random(self):
        self.random_calls += 1
        if self.randoms:
            return self.randoms.pop(0)
        return self.default

    def choice(self, seq):
        self.choice_calls += 1
        if self.choices:
            value = self.choices.pop(0)
            assert value in seq, f"{value!r} not offered in {seq!r}"
            return value
        return seq[0]


class FakeTimer:
    """Timer handle that only fires when a test says so."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    @property
    def pending(self):
        return self.started and not self.cancelled and not self.fired

    def fire(self):
        self.fired = True
        self.callback()


class ManualTimerFactory:
    """TimerFactory recording every timer it creates."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [timer for timer in self.timers if timer.pending]

    def fire_next(self):
        pending = self.pending
        assert pending, "no pending timer to fire"
        pending[0].fire()


class RecordingAuditEmitter:
    """AuditEmitter keeping events in a list."""

    def __init__(self):
        self.events = []

    def emit(self, event):
        self.events.append(event)
        return True

    def actions(self):
        return [event["action"] for event in self.events]


class BrokenAuditEmitter:
    """AuditEmitter whose every emit raises."""

    def __init__(self):
        self.attempts = 0

    def emit(self, event):
        self.attempts += 1
        raise RuntimeError("audit sink offline")


@pytest.fixture
def db_path(tmp_path):
    """Path of a freshly bootstrapped database file."""
    return str(initialize_database(str(tmp_path / "ats.db")))


@pytest.fixture
def store(db_path):
    return ApplicationStore(db_path)


@pytest.fixture
def audit():
    return RecordingAuditEmitter()


@pytest.fixture
def locks():
    return ApplicationLocks()


@pytest.fixture
def timer_factory():
    return ManualTimerFactory()


@pytest.fixture
def service(store, audit, locks):
    return StatusUpdateService(store, audit, locks)


@pytest.fixture
def technical_job(store):
    return store.create_job("Backend Engineer", RoleCategory.TECHNICAL, department="Engineering")


@pytest.fixture
def non_technical_job(store):
    return store.create_job("Office Manager", RoleCategory.NON_TECHNICAL, department="Operations")


@pytest.fixture
def make_application(store):
    """Factory creating an application, optionally forced into a status/stage."""
    counter = {"n": 0}

    def _make(job, status=None, workflow_stage=None, applicant_id=None, submitted_at=None):
        counter["n"] += 1
        application = store.create_application(
            job.id,
            applicant_id or f"applicant-{counter['n']}",
            cover_letter="Hello",
            submitted_at=submitted_at or f"2020-01-01T00:00:{counter['n']:02d}.000Z",
        )
        if status is not None or workflow_stage is not None:
            if status is not None:
                application.status = ApplicationStatus(status)
            if workflow_stage is not None:
                application.workflow_stage = WorkflowStage(workflow_stage)
            store.save(application)
        return application

    return _make
