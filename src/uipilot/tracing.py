"""Diagnostic logging for the automation core.

Records go through the ``uipilot`` logger. Each component gets a
``LoggerAdapter`` that stamps the record with the component name and the
browser session id, so interleaved output from parallel sessions can be told
apart.
"""
import logging
from typing import Any, MutableMapping, Optional, Tuple

from rich.logging import RichHandler

ROOT_LOGGER = "uipilot"
LOG_FORMAT = "[%(thread)5d] [%(session)s] [%(component)s] - %(message)s"

logger = logging.getLogger(ROOT_LOGGER)


class TraceAdapter(logging.LoggerAdapter):
    """Adds ``component`` and ``session`` to every record it emits."""

    def __init__(self, base: logging.Logger, component: str, session_id: Optional[str] = None):
        super().__init__(base, {"component": component, "session": session_id or "-"})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        try:
            super().log(level, msg, *args, **kwargs)
        except Exception:
            # logging failures never reach the automation flow
            pass

    def bind(self, session_id: str) -> "TraceAdapter":
        return TraceAdapter(self.logger, self.extra["component"], session_id)


def get_logger(component: str, session_id: Optional[str] = None) -> TraceAdapter:
    return TraceAdapter(logger.getChild(component), component, session_id)


class _DefaultsFilter(logging.Filter):
    """Fill in trace fields for records logged without an adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = record.name
        if not hasattr(record, "session"):
            record.session = "-"
        return True


def configure(debug: bool = False) -> None:
    """Install a rich console handler on the ``uipilot`` logger."""
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="[%X]"))
    handler.addFilter(_DefaultsFilter())
    logger.handlers = [handler]
    logger.propagate = False
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
