"""
Composition root for the workflow engine.

``WorkflowRuntime`` wires the record store, audit emitter, random source,
application locks, status update service, both bot processors and their
schedulers into one object owned by the server process. Nothing here is a
module-level singleton; tests build a runtime with fake timers and a
scripted random source.
"""

from enum import Enum
from typing import Any, Dict, Optional

from db.application_store import ApplicationStore
from db.audit_writer import AuditEmitter, SqliteAuditEmitter
from models.status import RoleCategory
from utils.application_locks import ApplicationLocks
from utils.bot_automation import BotAutomationProcessor
from utils.bot_mimic import BotMimicProcessor
from utils.pass_result import PassResult
from utils.random_source import RandomSource, SystemRandomSource
from utils.scheduler import PeriodicScheduler
from utils.status_updates import StatusUpdateService
from utils.timers import ThreadingTimerFactory, TimerFactory

DEFAULT_AUTOMATION_INTERVAL_SECONDS = 120.0
DEFAULT_MIMIC_INTERVAL_SECONDS = 180.0
DEFAULT_MIMIC_STARTUP_DELAY_SECONDS = 5.0


class SchedulerKind(str, Enum):
    """The two independently scheduled bot processors."""

    AUTOMATION = "automation"
    MIMIC = "mimic"


class WorkflowRuntime:
    """
    Owns every long-lived workflow component of one server process.

    Usage:
        runtime = WorkflowRuntime.from_config(get_config())
        runtime.start_all()
        ...
        runtime.stop_all()
    """

    def __init__(
        self,
        store: ApplicationStore,
        audit: Optional[AuditEmitter] = None,
        rng: Optional[RandomSource] = None,
        timer_factory: Optional[TimerFactory] = None,
        locks: Optional[ApplicationLocks] = None,
        automation_interval_seconds: float = DEFAULT_AUTOMATION_INTERVAL_SECONDS,
        mimic_interval_seconds: float = DEFAULT_MIMIC_INTERVAL_SECONDS,
        mimic_startup_delay_seconds: float = DEFAULT_MIMIC_STARTUP_DELAY_SECONDS,
    ):
        self.store = store
        self.audit = audit if audit is not None else SqliteAuditEmitter(store)
        self.rng = rng if rng is not None else SystemRandomSource()
        self.locks = locks if locks is not None else ApplicationLocks()
        timer_factory = timer_factory if timer_factory is not None else ThreadingTimerFactory()

        self.status_updates = StatusUpdateService(store, self.audit, self.locks)
        self.automation = BotAutomationProcessor(store, self.audit, self.rng, self.locks)
        self.mimic = BotMimicProcessor(store, self.audit, self.rng, self.locks)

        self.schedulers: Dict[SchedulerKind, PeriodicScheduler] = {
            SchedulerKind.AUTOMATION: PeriodicScheduler(
                "Bot Automation",
                self.automation.run_pass,
                automation_interval_seconds,
                timer_factory,
            ),
            SchedulerKind.MIMIC: PeriodicScheduler(
                "Bot Mimic",
                self.mimic.run_pass,
                mimic_interval_seconds,
                timer_factory,
                initial_delay_seconds=mimic_startup_delay_seconds,
            ),
        }

    @classmethod
    def from_config(cls, config, timer_factory: Optional[TimerFactory] = None) -> "WorkflowRuntime":
        """Build a runtime from a ``config.Config`` instance."""
        return cls(
            store=ApplicationStore(config.get_db_path_str()),
            rng=SystemRandomSource(config.random_seed),
            timer_factory=timer_factory,
            automation_interval_seconds=config.automation_interval_seconds,
            mimic_interval_seconds=config.mimic_interval_seconds,
            mimic_startup_delay_seconds=config.mimic_startup_delay_seconds,
        )

    def scheduler(self, kind) -> PeriodicScheduler:
        return self.schedulers[SchedulerKind(kind)]

    def start(self, kind) -> bool:
        """Start one scheduler; False if it was already running."""
        return self.scheduler(kind).start()

    def stop(self, kind) -> bool:
        """Stop one scheduler; False if it was already stopped."""
        return self.scheduler(kind).stop()

    def start_all(self) -> Dict[str, bool]:
        return {kind.value: scheduler.start() for kind, scheduler in self.schedulers.items()}

    def stop_all(self) -> Dict[str, bool]:
        return {kind.value: scheduler.stop() for kind, scheduler in self.schedulers.items()}

    def trigger(self, kind=SchedulerKind.MIMIC) -> PassResult:
        """Run one pass of the given processor synchronously."""
        return self.scheduler(kind).trigger()

    def scheduler_states(self) -> Dict[str, Dict[str, Any]]:
        states = {}
        for kind, scheduler in self.schedulers.items():
            last = scheduler.last_result
            states[kind.value] = {
                "is_running": scheduler.is_running,
                "interval_seconds": scheduler.interval_seconds,
                "last_result": last.to_dict() if last is not None else None,
            }
        return states

    def workflow_stats(self) -> Dict[str, Any]:
        """
        Stage distribution of technical applications plus scheduler state.

        ``is_running`` reports the Bot Mimic scheduler, whose workflow the
        distribution describes.
        """
        return {
            "total_technical_applications": self.store.count_by_category(RoleCategory.TECHNICAL),
            "stage_distribution": self.store.stage_distribution(RoleCategory.TECHNICAL),
            "is_running": self.schedulers[SchedulerKind.MIMIC].is_running,
            "schedulers": self.scheduler_states(),
        }
