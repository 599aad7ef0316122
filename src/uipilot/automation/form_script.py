"""Read and write form data through the application's client-side script API.

Attribute scripts are not retried: a script either runs against the loaded
form or it does not, so those commands use a spec with no extra attempts.
"""
import re
import uuid
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from .engine import AutomationEngine
from .errors import ApplicationError, PreconditionError
from .executor import CommandExecutor
from .wait import Waiter

T = TypeVar("T")

_ATTRIBUTE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ERROR_DIALOG_SCRIPT = (
    "var d = document.querySelector(\"[data-id*='errorDialogdialog'] [data-id*='errorDialog_subtitle']\");"
    " return d ? d.textContent : null;"
)


class RequiredLevel(str, Enum):
    UNKNOWN = "unknown"
    NONE = "none"
    REQUIRED = "required"
    RECOMMENDED = "recommended"

    @classmethod
    def parse(cls, value: Any) -> "RequiredLevel":
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


def _checked(attribute: str) -> str:
    if not attribute or not _ATTRIBUTE_NAME.match(attribute):
        raise PreconditionError(f"Invalid attribute name: {attribute!r}")
    return attribute


def _parse_id(value: Any) -> Optional[uuid.UUID]:
    if not value:
        return None
    try:
        return uuid.UUID(str(value).strip("{}"))
    except ValueError:
        return None


class FormScript:
    def __init__(self, executor: CommandExecutor, waiter: Waiter):
        self.executor = executor
        self.waiter = waiter

    def execute_js(self, name: str, code: str, *args: Any, converter: Optional[Callable[[Any], T]] = None) -> T:
        """Run ``code`` (a function body using ``return``/``arguments``) on the page."""
        def operation(engine: AutomationEngine) -> Any:
            self.waiter.wait_for_page_settled()
            result = engine.evaluate(code, *args)
            return converter(result) if converter is not None else result

        return self.executor.run(name, operation, max_attempts=0)

    def get_attribute_value(self, attribute: str) -> Any:
        attribute = _checked(attribute)
        return self.execute_js(
            f"Get Attribute Value via Form JS: {attribute}",
            f"return Xrm.Page.getAttribute('{attribute}').getValue()",
        )

    def set_attribute_value(self, attribute: str, value: Any) -> bool:
        attribute = _checked(attribute)
        self.execute_js(
            f"Set Attribute Value via Form JS: {attribute}",
            f"return Xrm.Page.getAttribute('{attribute}').setValue(arguments[0])",
            value,
        )
        return True

    def clear(self, attribute: str) -> bool:
        attribute = _checked(attribute)
        self.execute_js(
            f"Clear Attribute via Form JS: {attribute}",
            f"return Xrm.Page.getAttribute('{attribute}').setValue(null)",
        )
        return True

    def get_entity_id(self) -> Optional[uuid.UUID]:
        return self.execute_js(
            "Get Entity Id via Form JS",
            "return Xrm.Page.data.entity.getId()",
            converter=_parse_id,
        )

    def is_control_visible(self, attribute: str) -> bool:
        attribute = _checked(attribute)
        return self.execute_js(
            f"Get Control Visibility via Form JS: {attribute}",
            f"return Xrm.Page.getControl('{attribute}').getVisible()",
            converter=bool,
        )

    def is_dirty(self, attribute: str) -> bool:
        attribute = _checked(attribute)
        return self.execute_js(
            f"Get Attribute IsDirty via Form JS: {attribute}",
            f"return Xrm.Page.getAttribute('{attribute}').getIsDirty()",
            converter=bool,
        )

    def get_required_level(self, attribute: str) -> RequiredLevel:
        attribute = _checked(attribute)
        return self.execute_js(
            f"Get Attribute RequiredLevel via Form JS: {attribute}",
            f"return Xrm.Page.getAttribute('{attribute}').getRequiredLevel()",
            converter=RequiredLevel.parse,
        )

    def check_for_error_dialog(self) -> bool:
        """Fail with kind ``application-error`` if the application shows an error dialog."""
        def operation(engine: AutomationEngine) -> bool:
            message = engine.evaluate(ERROR_DIALOG_SCRIPT)
            if message and str(message).strip():
                raise ApplicationError(str(message).strip())
            return True

        return self.executor.run("Check Error Dialog", operation)
