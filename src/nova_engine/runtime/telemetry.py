"""Telemetry services for the editing core, built on telelog.

The rest of the engine only touches four helpers:

``configure(...)`` -- adopt a preset or explicit telelog configuration
``get_logger(name)`` -- fetch (and cache) a configured logger
``record_event(name, ...)`` -- emit a structured event at a chosen level
``span(name, ...)`` -- profile a block and track it under a component
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "NOVA_ENGINE_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "nova_engine")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None


def env_value(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env_value(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _stringify(value)) for key, value in data.items()]


_PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {"level": "DEBUG", "console": True, "color": True},
    "production": {
        "level": "WARNING",
        "console": False,
        "file": "nova_engine.log",
        "buffered": True,
    },
    "performance": {
        "level": "DEBUG",
        "console": False,
        "json": True,
        "file": "nova_engine-performance.log",
        "buffered": True,
    },
}


def _build_config(options: Dict[str, Any]) -> Any:
    """Translate a flat options dict into a ``telelog.Config``."""

    config = tl.Config()
    config.with_min_level(str(options.get("level", "WARNING")).upper())
    console = bool(options.get("console", True))
    config.with_console_output(console)
    if console:
        config.with_colored_output(bool(options.get("color", False)))
    if options.get("json"):
        config.with_json_format(True)
    if options.get("file"):
        config.with_file_output(options["file"])
    if options.get("buffered"):
        config.with_buffering(True)
        if options.get("buffer_size"):
            config.with_buffer_size(int(options["buffer_size"]))
    return config


def _preset_options(preset: str) -> Dict[str, Any]:
    try:
        options = dict(_PRESETS[preset.lower()])
    except KeyError:
        raise ValueError(
            f"Unknown preset '{preset}', expected one of {', '.join(_PRESETS)}."
        ) from None
    if "file" in options:
        options["file"] = env_value("LOG_FILE") or options["file"]
    return options


def _env_options() -> Dict[str, Any]:
    return {
        "level": env_value("LOG_LEVEL") or "WARNING",
        "console": not env_flag("DISABLE_CONSOLE", False),
        "color": not env_flag("NO_COLOR", False),
        "json": env_flag("LOG_JSON", False),
        "file": env_value("LOG_FILE"),
        "buffered": env_flag("LOG_BUFFERED", False),
        "buffer_size": env_value("LOG_BUFFER_SIZE") or "2048",
    }


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active telelog configuration.

    ``config`` is an explicit ``telelog.Config``; ``preset`` names one of
    ``development``, ``production`` or ``performance``. Passing neither
    rebuilds the configuration from ``NOVA_ENGINE_*`` environment variables.
    Cached loggers are dropped so the next ``get_logger`` call picks up the
    new settings.
    """

    global _ACTIVE_CONFIG
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        config = _build_config(_preset_options(preset))
    elif config is None:
        config = _build_config(_env_options())

    config.with_profiling(env_flag("PROFILE", True))
    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached ``telelog.Logger`` bound to the active configuration."""

    global _ACTIVE_CONFIG
    if _ACTIVE_CONFIG is None:
        configure()
    logger_name = name or DEFAULT_LOGGER_NAME
    logger = _LOGGER_CACHE.get(logger_name)
    if logger is None:
        logger = tl.Logger.with_config(logger_name, _ACTIVE_CONFIG)
        _LOGGER_CACHE[logger_name] = logger
    return logger


def _level_method(logger: Any, level: str) -> Tuple[Any, bool]:
    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        return structured, True
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return plain, False


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method, structured = _level_method(logger, level)
    if structured:
        method(message, _pairs(payload))
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "debug",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>`` with ``data`` attached as key/value pairs."""

    payload = {"event": name, **(data or {})}
    _emit(get_logger(logger_name), level, f"event::{name}", payload)


@dataclass
class SpanHandle:
    """Handle yielded by ``span`` for attaching metadata or reporting failure."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _payload(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if extra:
            payload.update(extra)
        return payload

    def fail(self, reason: str) -> None:
        _emit(self.logger, "error", "span::fail", self._payload({"reason": reason}))

    def cancel(self, reason: str | None = None) -> None:
        extra = {"reason": reason} if reason else None
        _emit(self.logger, "warning", "span::cancel", self._payload(extra))


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
    expected: Tuple[type[BaseException], ...] = (),
) -> Iterator[SpanHandle]:
    """Profile a block of engine work.

    ``component`` set to ``True`` tracks the block under its own name, a
    string tracks it under that component. ``metadata`` is pushed as logger
    context for the duration of the block. Exceptions listed in ``expected``
    propagate without being reported as span failures (for example
    ``NothingToUndo``, which is a normal outcome).
    """

    log = get_logger(logger_name)
    component_name: Optional[str] = None
    if component is True:
        component_name = name
    elif isinstance(component, str):
        component_name = component

    context_keys: list[str] = []
    serialized: Dict[str, str] = {}
    for key, value in (metadata or {}).items():
        serialized[key] = _stringify(value)
        log.add_context(key, serialized[key])
        context_keys.append(key)

    with ExitStack() as stack:
        if component_name:
            stack.enter_context(log.track_component(component_name))
        stack.enter_context(log.profile(name))
        handle = SpanHandle(
            logger=log,
            span_name=name,
            component_name=component_name,
            metadata=serialized,
        )
        try:
            yield handle
        except expected:
            raise
        except Exception as exc:
            handle.fail(f"{type(exc).__name__}: {exc}")
            raise
        finally:
            for key in context_keys:
                log.remove_context(key)


__all__ = [
    "SpanHandle",
    "configure",
    "env_flag",
    "env_value",
    "get_logger",
    "record_event",
    "span",
]
