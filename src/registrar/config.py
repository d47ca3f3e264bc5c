"""Library configuration for registrar."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from registrar.exceptions import RegistrarConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class RegistrarConfig:
    """Process-wide model configuration.

    Parameters
    ----------
    id_attribute : str
        Attribute name used as identity by models that do not declare
        their own ``id_attribute``.
    cid_prefix : str
        Prefix of the client-side ids handed out to every model instance.
    trace_events : bool
        Log every event dispatch at DEBUG level.
    log_max_string : int
        Strings longer than this are truncated in debug logs.
    """

    id_attribute: str = "id"
    cid_prefix: str = "c"
    trace_events: bool = False
    log_max_string: int = 512

    def __post_init__(self) -> None:
        if not self.id_attribute:
            raise RegistrarConfigError("id_attribute must be non-empty")
        if not self.cid_prefix:
            raise RegistrarConfigError("cid_prefix must be non-empty")
        if self.log_max_string <= 0:
            raise RegistrarConfigError("log_max_string must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> RegistrarConfig:
        """Create configuration from environment variables.

        Reads ``REGISTRAR_ID_ATTRIBUTE``, ``REGISTRAR_CID_PREFIX``,
        ``REGISTRAR_TRACE_EVENTS`` and ``REGISTRAR_LOG_MAX_STRING``.
        Explicit keyword arguments override environment values.

        Raises
        ------
        RegistrarConfigError
            If a variable holds a value that cannot be used.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "REGISTRAR_ID_ATTRIBUTE": "id_attribute",
            "REGISTRAR_CID_PREFIX": "cid_prefix",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        if "trace_events" not in overrides:
            config_kwargs["trace_events"] = _env_bool(env.get("REGISTRAR_TRACE_EVENTS"), False)

        max_string_env = env.get("REGISTRAR_LOG_MAX_STRING")
        if max_string_env is not None and "log_max_string" not in overrides:
            try:
                config_kwargs["log_max_string"] = int(max_string_env)
            except ValueError as exc:
                raise RegistrarConfigError(f"REGISTRAR_LOG_MAX_STRING is not an integer: {max_string_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)


_config = RegistrarConfig()


def get_config() -> RegistrarConfig:
    """Return the active process-wide configuration."""
    return _config


def set_config(config: RegistrarConfig) -> RegistrarConfig:
    """Replace the process-wide configuration, returning the previous one."""
    global _config
    previous = _config
    _config = config
    return previous
