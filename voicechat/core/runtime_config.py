"""
Runtime configuration that can be modified during execution.
Thread-safe configuration store for tunable parameters.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable

from . import config

logger = logging.getLogger(__name__)


@dataclass
class RuntimeConfig:
    """
    Runtime-tunable configuration values.
    These can be changed while the application is running.
    """

    # Command pipeline
    confidence_threshold: float = config.CONFIDENCE_THRESHOLD

    # Audio level meter
    smoothing_time_constant: float = config.SMOOTHING_TIME_CONSTANT


class ConfigStore:
    """
    Thread-safe configuration store with change notifications.
    """

    def __init__(self, initial: RuntimeConfig | None = None):
        self._config = initial or RuntimeConfig()
        self._lock = threading.RLock()
        self._listeners: list[Callable[[RuntimeConfig], None]] = []

    def get(self) -> RuntimeConfig:
        """Get a copy of the current configuration."""
        with self._lock:
            return replace(self._config)

    def update(self, **kwargs) -> None:
        """
        Update configuration values.

        Args:
            **kwargs: Configuration fields to update

        Raises:
            ValueError: If a value is outside its valid range
        """
        with self._lock:
            candidate = replace(self._config)
            for key, value in kwargs.items():
                if hasattr(candidate, key):
                    setattr(candidate, key, value)
                else:
                    logger.warning("Ignoring unknown config field %r", key)
            _validate(candidate)
            self._config = candidate

            # Notify listeners
            config_copy = self.get()
            for listener in self._listeners:
                try:
                    listener(config_copy)
                except Exception:
                    logger.exception("Config listener failed")

    def add_listener(self, callback: Callable[[RuntimeConfig], None]) -> None:
        """Add a listener for configuration changes."""
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[RuntimeConfig], None]) -> None:
        """Remove a configuration change listener."""
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)


def _validate(cfg: RuntimeConfig) -> None:
    if not 0.0 <= cfg.confidence_threshold <= 1.0:
        raise ValueError(
            f"confidence_threshold must be in [0, 1], got {cfg.confidence_threshold}"
        )
    if not 0.0 <= cfg.smoothing_time_constant < 1.0:
        raise ValueError(
            "smoothing_time_constant must be in [0, 1), "
            f"got {cfg.smoothing_time_constant}"
        )
