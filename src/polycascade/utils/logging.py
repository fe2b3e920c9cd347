"""Structured logging for polycascade.

A design run is traced with :class:`RunTracer`, which binds a run id and
the three process inputs (N, gamma_0, T2) to every record emitted while it
is active. Per-stage messages go through :class:`StageLogger`, so the stage
number, iteration count and stirring power travel as record fields rather
than being parsed back out of the message text.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Any

PACKAGE_LOGGER = "polycascade"

# Record attributes set by _RunContextFilter (run-level) and StageLogger (stage-level)
RUN_FIELDS = ("run_id", "n_reactors", "feed", "coolant")
STAGE_FIELDS = ("stage", "iterations", "power")

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s%(context)s"


@dataclass(frozen=True)
class RunContext:
    """Identity and process inputs of the design run being traced."""

    run_id: str
    n_reactors: int | None = None
    feed: float | None = None
    coolant: float | None = None

    def fields(self) -> dict[str, Any]:
        values = {
            "run_id": self.run_id,
            "n_reactors": self.n_reactors,
            "feed": self.feed,
            "coolant": self.coolant,
        }
        return {key: value for key, value in values.items() if value is not None}


_run_context: ContextVar[RunContext | None] = ContextVar("run_context", default=None)


def current_run() -> RunContext | None:
    """Context of the active :class:`RunTracer`, if any."""
    return _run_context.get()


class RunTracer:
    """Context manager that tags log records with the current design run.

    The process inputs are usually parsed after the run has started, so they
    are attached later with :meth:`bind`.

    Usage::

        with RunTracer() as tracer:
            n, feed, coolant = read_inputs(sys.stdin)
            tracer.bind(n_reactors=n, feed=feed, coolant=coolant)
            plant.compute_all()
    """

    def __init__(
        self,
        run_id: str | None = None,
        n_reactors: int | None = None,
        feed: float | None = None,
        coolant: float | None = None,
    ):
        self.context = RunContext(
            run_id=run_id or uuid.uuid4().hex[:12],
            n_reactors=n_reactors,
            feed=feed,
            coolant=coolant,
        )
        self._token: Token[RunContext | None] | None = None

    @property
    def run_id(self) -> str:
        return self.context.run_id

    def bind(
        self,
        n_reactors: int | None = None,
        feed: float | None = None,
        coolant: float | None = None,
    ) -> RunContext:
        """Attach process inputs to the run; unset arguments are left unchanged."""
        updates = {"n_reactors": n_reactors, "feed": feed, "coolant": coolant}
        self.context = replace(self.context, **{k: v for k, v in updates.items() if v is not None})
        if self._token is not None:
            _run_context.set(self.context)
        return self.context

    def __enter__(self) -> RunTracer:
        self._token = _run_context.set(self.context)
        return self

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _run_context.reset(self._token)
            self._token = None


class StageLogger(logging.LoggerAdapter):
    """Logger adapter that stamps records with a 1-based stage number.

    Call-site ``extra`` (e.g. ``iterations``, ``power``) is merged with the
    stage instead of replacing it.
    """

    def __init__(self, logger: logging.Logger, stage: int):
        super().__init__(logger, {"stage": stage})

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


class _RunContextFilter(logging.Filter):
    """Copies the active run context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _run_context.get()
        if context is not None:
            for key, value in context.fields().items():
                if not hasattr(record, key):
                    setattr(record, key, value)
        return True


def _record_fields(record: logging.LogRecord, names: tuple[str, ...]) -> dict[str, Any]:
    return {name: getattr(record, name) for name in names if getattr(record, name, None) is not None}


class JSONFormatter(logging.Formatter):
    """Single-line JSON records with ``run`` and ``stage`` sub-objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run = _record_fields(record, RUN_FIELDS)
        context = _run_context.get()
        if not run and context is not None:
            # formatter used without the filter
            run = context.fields()
        if run:
            log_entry["run"] = run

        stage = _record_fields(record, STAGE_FIELDS)
        if stage:
            log_entry["stage"] = stage

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable records with a bracketed ``key=value`` context suffix.

    Example::

        ... | WARNING  | polycascade.reactors.plant | Reactor #1 diverged [run_id=3f2a9c1b0e4d stage=1 iterations=4]
    """

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        fields = {**_record_fields(record, RUN_FIELDS), **_record_fields(record, STAGE_FIELDS)}
        if "power" in fields:
            fields["power"] = f"{fields['power']:.4g}"
        record.context = (
            " [" + " ".join(f"{key}={value}" for key, value in fields.items()) + "]" if fields else ""
        )
        return super().format(record)


def setup_logging(
    level: str = "WARNING",
    log_format: str = "text",
    log_file: str | None = None,
    module_levels: dict[str, str] | None = None,
) -> None:
    """Configure the ``polycascade`` logger tree.

    Logs go to stderr so that the report on stdout stays clean.

    Args:
        level: Package log level (e.g. 'DEBUG', 'INFO', 'WARNING').
        log_format: 'text' for human-readable or 'json' for structured output.
        log_file: Optional file path to write logs to, in the same format.
        module_levels: Per-module log levels (e.g. {'polycascade.reactors.solver': 'DEBUG'}).
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = JSONFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_RunContextFilter())
        package_logger.addHandler(handler)

    for module, mod_level in (module_levels or {}).items():
        logging.getLogger(module).setLevel(getattr(logging, mod_level.upper(), logging.INFO))

    package_logger.debug(f"Logging configured: level={level}, format={log_format}")


__all__ = [
    "RunContext",
    "RunTracer",
    "StageLogger",
    "JSONFormatter",
    "TextFormatter",
    "current_run",
    "setup_logging",
]
