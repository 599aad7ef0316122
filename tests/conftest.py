"""Shared pytest fixtures."""

from __future__ import annotations

import logging
import threading

import pytest

from tests.fake_engine import FakeEngine
from uipilot.automation.executor import CommandExecutor
from uipilot.automation.login import OnlineLogin
from uipilot.automation.wait import Waiter
from uipilot.config import AutomationConfig
from uipilot.tracing import ROOT_LOGGER


def fast_config(**overrides) -> AutomationConfig:
    """Settings with every wait short enough for unit tests."""
    values = dict(
        retry_attempts=2,
        retry_delay=0,
        poll_interval=0.01,
        default_timeout=0.2,
        page_settle_timeout=0.2,
        username_timeout=0.1,
        landing_timeout=0.2,
        stay_signed_in_timeout=0.03,
        redirect_pause=0,
        think_time=0,
        mfa_retry_attempts=2,
    )
    values.update(overrides)
    return AutomationConfig(**values)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo handler changes made by the CLI so caplog keeps working."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def engine():
    """Provide a fresh FakeEngine."""
    return FakeEngine()


@pytest.fixture
def make_config():
    return fast_config


@pytest.fixture
def config():
    return fast_config()


@pytest.fixture
def stop_event():
    return threading.Event()


@pytest.fixture
def executor(engine, config, stop_event):
    return CommandExecutor(engine, config, stop_event)


@pytest.fixture
def waiter(engine, config, stop_event):
    return Waiter(engine, config, stop_event)


@pytest.fixture
def online_login(executor, waiter, config):
    return OnlineLogin(executor, waiter, config)
