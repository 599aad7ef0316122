"""Tests for browser sessions and trace logging."""

from __future__ import annotations

import logging
import threading

import pytest

from uipilot import tracing
from uipilot.automation.login import LoginLocators
from uipilot.automation.session import BrowserSession, create_engine
from uipilot.automation.types import LoginContext, LoginStatus

from tests.fake_engine import FakeEngine


def test_session_lifecycle(engine, config):
    with BrowserSession(engine, config, headless=False) as session:
        assert engine.started
        assert session.executor.engine is engine
        assert session.waiter.stop_event is session.stop_event

    assert engine.stopped
    assert session.stop_event.is_set()


def test_stop_before_start_does_not_touch_engine(engine, config):
    BrowserSession(engine, config).stop()
    assert not engine.stopped


def test_session_login(engine, config):
    engine.add(LoginLocators().landing)

    with BrowserSession(engine, config) as session:
        outcome = session.login.login(LoginContext("https://contoso.crm.dynamics.com/", session_id=session.session_id))

    assert outcome.status == LoginStatus.SUCCESS


def test_stopping_aborts_a_running_wait(make_config):
    engine = FakeEngine()
    session = BrowserSession(engine, make_config(landing_timeout=30)).start()
    results = []

    worker = threading.Thread(target=lambda: results.append(session.login.login(LoginContext("https://a.example/"))))
    worker.start()
    threading.Timer(0.05, session.stop).start()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert results[0].status == LoginStatus.FAILURE


def test_sessions_are_independent(config):
    first, second = BrowserSession(FakeEngine(), config), BrowserSession(FakeEngine(), config)

    assert first.session_id != second.session_id
    first.stop()
    assert not second.stop_event.is_set()


def test_unknown_engine():
    with pytest.raises(ValueError):
        create_engine("lynx")


def test_records_carry_component_and_session(caplog):
    log = tracing.get_logger("login", "abc123")

    with caplog.at_level(logging.INFO, logger=tracing.ROOT_LOGGER):
        log.info("hello")

    record = caplog.records[-1]
    assert record.name == "uipilot.login"
    assert record.component == "login"
    assert record.session == "abc123"


def test_bind_switches_session(caplog):
    log = tracing.get_logger("wait").bind("s-2")

    with caplog.at_level(logging.INFO, logger=tracing.ROOT_LOGGER):
        log.info("bound")

    assert caplog.records[-1].session == "s-2"


def test_configure_installs_single_handler():
    tracing.configure(debug=True)
    tracing.configure(debug=False)

    logger = logging.getLogger(tracing.ROOT_LOGGER)
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False
