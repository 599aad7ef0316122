"""Tests for the form script helpers."""

from __future__ import annotations

import uuid

import pytest

from uipilot.automation.errors import CommandFailedError, FailureKind, PreconditionError, StaleElementError
from uipilot.automation.form_script import ERROR_DIALOG_SCRIPT, FormScript, RequiredLevel


@pytest.fixture
def form(executor, waiter):
    return FormScript(executor, waiter)


def test_get_attribute_value(form, engine):
    engine.script_result = "Contoso Ltd"

    assert form.get_attribute_value("name") == "Contoso Ltd"
    script, args = engine.scripts[-1]
    assert script == "return Xrm.Page.getAttribute('name').getValue()"
    assert args == ()
    assert engine.settled == 1


def test_set_attribute_passes_value_as_argument(form, engine):
    assert form.set_attribute_value("telephone1", "555-0100") is True

    script, args = engine.scripts[-1]
    assert "setValue(arguments[0])" in script
    assert args == ("555-0100",)


def test_clear(form, engine):
    assert form.clear("description") is True
    assert engine.scripts[-1][0].endswith("setValue(null)")


@pytest.mark.parametrize("attribute", ["", "name')", "1st", "a b"])
def test_attribute_names_are_validated(form, engine, attribute):
    with pytest.raises(PreconditionError):
        form.get_attribute_value(attribute)
    assert engine.scripts == []


def test_entity_id(form, engine):
    record = uuid.uuid4()
    engine.script_result = "{%s}" % str(record).upper()
    assert form.get_entity_id() == record

    engine.script_result = ""
    assert form.get_entity_id() is None


def test_flags_are_booleans(form, engine):
    engine.script_result = 1
    assert form.is_control_visible("name") is True

    engine.script_result = None
    assert form.is_dirty("name") is False


@pytest.mark.parametrize("raw, level", [
    ("required", RequiredLevel.REQUIRED),
    ("Recommended", RequiredLevel.RECOMMENDED),
    ("none", RequiredLevel.NONE),
    ("applicationrequired", RequiredLevel.UNKNOWN),
    (None, RequiredLevel.UNKNOWN),
])
def test_required_level(form, engine, raw, level):
    engine.script_result = raw
    assert form.get_required_level("name") == level


def test_scripts_are_not_retried(form, engine):
    calls = []

    def stale(script, *args):
        calls.append(script)
        raise StaleElementError("form reloaded")

    engine.script_result = stale

    with pytest.raises(CommandFailedError) as info:
        form.get_attribute_value("name")
    assert info.value.kind == FailureKind.STALE_REFERENCE
    assert len(calls) == 1


def test_error_dialog_absent(form, engine):
    assert form.check_for_error_dialog() is True
    assert engine.scripts[-1][0] == ERROR_DIALOG_SCRIPT


def test_error_dialog_present(form, engine):
    engine.script_result = "  The record could not be saved.  "

    with pytest.raises(CommandFailedError) as info:
        form.check_for_error_dialog()
    assert info.value.kind == FailureKind.APPLICATION_ERROR
    assert info.value.failure.attempts_made == 1
    assert "The record could not be saved." in str(info.value)
