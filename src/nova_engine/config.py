"""Editor settings consumed by the editing core.

The core never reads configuration files; the host hands an
``EditorSettings`` to the buffer (built in code or from the environment).
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from nova_engine.runtime.telemetry import env_flag, env_value


@dataclass(frozen=True, slots=True)
class EditorSettings:
    """Values that shape edits (tab expansion, indentation, history)."""

    tab_size: int = 4
    use_spaces: bool = True
    auto_indent: bool = True
    max_undo_entries: int = 1000
    coalesce_window: float = 1.0
    max_capacity: Optional[int] = None

    def __post_init__(self) -> None:
        if self.tab_size < 1:
            raise ValueError("tab_size must be at least 1")
        if self.max_undo_entries < 1:
            raise ValueError("max_undo_entries must be at least 1")
        if self.coalesce_window < 0:
            raise ValueError("coalesce_window cannot be negative")

    @classmethod
    def from_env(cls) -> "EditorSettings":
        """Read ``NOVA_ENGINE_TAB_SIZE`` and friends, falling back to defaults."""

        defaults = cls()
        max_capacity = env_value("MAX_CAPACITY")
        return cls(
            tab_size=int(env_value("TAB_SIZE") or defaults.tab_size),
            use_spaces=env_flag("USE_SPACES", defaults.use_spaces),
            auto_indent=env_flag("AUTO_INDENT", defaults.auto_indent),
            max_undo_entries=int(
                env_value("MAX_UNDO_ENTRIES") or defaults.max_undo_entries
            ),
            coalesce_window=float(
                env_value("COALESCE_WINDOW") or defaults.coalesce_window
            ),
            max_capacity=int(max_capacity) if max_capacity else None,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EditorSettings":
        """Build settings from an already-parsed mapping, ignoring unknown keys."""

        known = {item.name for item in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def with_overrides(self, **changes: Any) -> "EditorSettings":
        return replace(self, **changes)


__all__ = ["EditorSettings"]
