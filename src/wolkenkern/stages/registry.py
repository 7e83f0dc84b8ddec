"""Stage registry and discovery."""

from __future__ import annotations

from typing import Any

from wolkenkern.stages.base import Stage


class StageRegistry:
    """Registry for stage classes, keyed by type name."""

    def __init__(self) -> None:
        self._stages: dict[str, type[Stage]] = {}

    def register(self, cls: type[Stage]) -> None:
        """Register a stage class."""
        self._stages[cls.type_name()] = cls

    def get(self, type_name: str, *args: Any, **options: Any) -> Stage:
        """Create a stage instance by type name.

        Filters take their upstream stage as the first positional argument.
        """
        if type_name not in self._stages:
            raise ValueError(
                f"Unknown stage '{type_name}'. "
                f"Available: {list(self._stages.keys())}"
            )
        return self._stages[type_name](*args, **options)

    @property
    def available(self) -> list[str]:
        """List of registered stage type names."""
        return list(self._stages.keys())


# Global registry
stage_registry = StageRegistry()

_registered = False


def _ensure_registered() -> None:
    """Lazy-register all built-in stages."""
    global _registered
    if _registered:
        return
    _registered = True

    # Built-in stages register themselves on import
    from wolkenkern.readers import faux as _faux  # noqa: F401
    from wolkenkern.filters import reprojection as _reprojection  # noqa: F401


def get_stage(type_name: str, *args: Any, **options: Any) -> Stage:
    """Get a stage instance by type name (convenience function)."""
    _ensure_registered()
    return stage_registry.get(type_name, *args, **options)
