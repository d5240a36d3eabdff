"""Recurrence operational modes system.

Provides different operational modes for Recurrence:
- Lite mode: In-memory fingerprint store, zero external dependencies
- Standard mode: Redis fingerprint store with persistent counters
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recurrence.modes.base import BaseMode, ModeConfig
from recurrence.modes.lite import LiteMode
from recurrence.modes.standard import StandardMode

if TYPE_CHECKING:
    from recurrence.config import StoreConfig

# Mode registry
_MODE_REGISTRY: dict[str, type[BaseMode]] = {
    "lite": LiteMode,
    "standard": StandardMode,
}


def get_mode(mode_name: str, store_config: StoreConfig | None = None) -> BaseMode:
    """Get mode instance by name.

    Args:
        mode_name: Name of the mode (lite, standard)
        store_config: Store settings; defaults to StoreConfig()

    Returns:
        Mode instance

    Raises:
        ValueError: If mode name is not recognized

    Examples:
        >>> get_mode("lite").mode_config.store_backend
        'memory'
    """
    mode_class = _MODE_REGISTRY.get(mode_name.lower())
    if not mode_class:
        valid_modes = ", ".join(_MODE_REGISTRY.keys())
        raise ValueError(f"Unknown mode: {mode_name}. Valid modes: {valid_modes}")

    if store_config is None:
        from recurrence.config import StoreConfig

        store_config = StoreConfig()
    return mode_class(store_config=store_config)


def list_modes() -> list[str]:
    """List all available mode names.

    Examples:
        >>> list_modes()
        ['lite', 'standard']
    """
    return list(_MODE_REGISTRY.keys())


__all__ = [
    "BaseMode",
    "LiteMode",
    "ModeConfig",
    "StandardMode",
    "get_mode",
    "list_modes",
]
