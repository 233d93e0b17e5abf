"""
Tests for per-application locks and the processors sharing them.
"""

import threading

import pytest
from conftest import ScriptedRandom
from models.status import ApplicationStatus
from utils.application_locks import ApplicationLocks
from utils.bot_automation import BotAutomationProcessor
from utils.bot_mimic import BotMimicProcessor


class TestApplicationLocks:
    """Tests for the lock registry."""

    def test_lock_is_dropped_after_last_holder(self):
        locks = ApplicationLocks()

        with locks.hold(1):
            assert len(locks) == 1
        with locks.hold(1):
            pass
        with locks.hold(2):
            pass

        assert len(locks) == 0

    def test_hold_blocks_other_threads(self):
        locks = ApplicationLocks()
        holding = threading.Event()
        release = threading.Event()
        order = []

        def first_holder():
            with locks.hold(7):
                order.append("first in")
                holding.set()
                release.wait(timeout=5)
                order.append("first out")

        def second_holder():
            holding.wait(timeout=5)
            with locks.hold(7):
                order.append("second in")

        first = threading.Thread(target=first_holder)
        second = threading.Thread(target=second_holder)
        first.start()
        second.start()
        holding.wait(timeout=5)
        second.join(timeout=0.2)
        assert order == ["first in"]

        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert order == ["first in", "first out", "second in"]
        assert len(locks) == 0

    def test_different_applications_do_not_block(self):
        locks = ApplicationLocks()
        with locks.hold(1):
            with locks.hold(2):
                assert len(locks) == 2

    def test_failed_block_releases_the_lock(self):
        locks = ApplicationLocks()

        with pytest.raises(RuntimeError):
            with locks.hold(3):
                raise RuntimeError("save failed")

        assert len(locks) == 0
        with locks.hold(3):
            assert len(locks) == 1


class TestSharedLocksAcrossProcessors:
    """The two processors never both move the same pending application."""

    def test_second_processor_sees_first_processors_write(
        self, store, audit, locks, technical_job, make_application
    ):
        application = make_application(technical_job)
        automation = BotAutomationProcessor(
            store, audit, ScriptedRandom(choices=[ApplicationStatus.SHORTLISTED]), locks
        )
        mimic = BotMimicProcessor(store, audit, ScriptedRandom(), locks)
        automation.run_pass()
        result = mimic.progress_application(application.id)

        assert result is None
        reloaded = store.get_application(application.id)
        assert reloaded.status == ApplicationStatus.SHORTLISTED
        assert len(reloaded.notes) == 1
        assert audit.actions() == ["APPLICATION_STATUS_CHANGE"]

