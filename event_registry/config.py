"""Event registry configuration.

Dataclass-based configuration with environment variable overrides and
optional loading from YAML/JSON files.

Example registry.yaml:
    strict_event_names: true
    handler_errors: isolate
    close_orphan_coroutines: true
    log_dispatch: false

Every field can also be overridden with an ``EVENT_REGISTRY_`` prefixed
environment variable, e.g. ``EVENT_REGISTRY_HANDLER_ERRORS=isolate``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "EVENT_REGISTRY_"

HANDLER_ERROR_POLICIES = ("propagate", "isolate")

TRUE_STRINGS = ("true", "1", "yes", "on")
FALSE_STRINGS = ("false", "0", "no", "off")


def _env_override(key: str, default: Any) -> Any:
    """Get environment variable with type coercion."""
    env_key = f"{ENV_PREFIX}{key.upper()}"
    value = os.environ.get(env_key)

    if value is None:
        return default

    # Type coercion based on default type
    if isinstance(default, bool):
        return value.lower() in TRUE_STRINGS
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def _coerce(key: str, value: Any, default: Any) -> Any:
    """Coerce a file-provided value to the type of the field default."""
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in TRUE_STRINGS + FALSE_STRINGS:
            return value.lower() in TRUE_STRINGS
        raise ValueError(f"{key} must be a boolean, got {value!r}")
    if isinstance(default, str) and not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


@dataclass
class RegistryConfig:
    """Behavioural switches for an :class:`EventRegistry`.

    Attributes:
        strict_event_names: Reject names outside the declared vocabulary
            with ``UnknownEventError``.  Has no effect on open
            vocabularies.
        handler_errors: ``"propagate"`` lets a handler exception escape
            ``emit`` and end the pass; ``"isolate"`` logs it and moves on
            to the next handler.
        close_orphan_coroutines: Close coroutines returned by handlers
            when no event loop is running to schedule them.
        log_dispatch: Emit a DEBUG record for every dispatch.
    """

    strict_event_names: bool = True
    handler_errors: str = "propagate"
    close_orphan_coroutines: bool = True
    log_dispatch: bool = False

    def __post_init__(self):
        self.strict_event_names = _env_override("STRICT_EVENT_NAMES", self.strict_event_names)
        self.handler_errors = _env_override("HANDLER_ERRORS", self.handler_errors)
        self.close_orphan_coroutines = _env_override(
            "CLOSE_ORPHAN_COROUTINES", self.close_orphan_coroutines
        )
        self.log_dispatch = _env_override("LOG_DISPATCH", self.log_dispatch)

        if self.handler_errors not in HANDLER_ERROR_POLICIES:
            raise ValueError(
                f"handler_errors must be one of {HANDLER_ERROR_POLICIES}, "
                f"got {self.handler_errors!r}"
            )

    @property
    def isolate_handler_errors(self) -> bool:
        return self.handler_errors == "isolate"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistryConfig:
        """Create config from dictionary, ignoring unknown keys.

        Boolean fields accept booleans or true/false style strings; any
        other value raises ``ValueError``.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown registry config keys: %s", ", ".join(unknown))
        defaults = {f.name: f.default for f in fields(cls)}
        return cls(**{
            key: _coerce(key, value, defaults[key])
            for key, value in data.items()
            if key in known
        })

    @classmethod
    def from_file(cls, path: str | Path) -> RegistryConfig:
        """Load config from a YAML or JSON file.

        A missing file yields the defaults.
        """
        path = Path(path)
        if not path.exists():
            logger.debug("Registry config %s not found, using defaults", path)
            return cls()

        content = path.read_text()
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content) or {}
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)
