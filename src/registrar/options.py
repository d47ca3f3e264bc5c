"""Option records accepted by model operations.

Every mutating call (``set``, ``unset``, ``clear``, construction) normalizes
its options into a :class:`ModelOptions`. The recognized flags are typed
fields; anything else the caller passes is kept verbatim as an extra and
forwarded to hooks and listeners, so a persistence layer can tag a change
with its own keys.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from registrar.exceptions import InvalidOptionsError


class ModelOptions(BaseModel):
    """Normalized options for a single model operation."""

    model_config = ConfigDict(frozen=True, extra="allow", arbitrary_types_allowed=True)

    silent: bool = Field(default=False, description="Suppress event emission for this round")
    unset: bool = Field(default=False, description="Remove the given keys instead of assigning them")
    parse: bool = Field(default=False, description="Run the parse hook over constructor attributes")
    error: Callable[..., Any] | None = Field(
        default=None,
        description="Called with (model, error, options) when validation rejects a change",
    )

    @field_validator("silent", "unset", "parse", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    def get(self, key: str, default: Any = None) -> Any:
        """Mapping-style access covering both declared fields and extras."""
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key, default)

    @property
    def extras(self) -> dict[str, Any]:
        """Caller-supplied keys that are not recognized flags."""
        return dict(self.model_extra or {})


def coerce_options(options: ModelOptions | Mapping[str, Any] | None = None, **overrides: Any) -> ModelOptions:
    """Build a :class:`ModelOptions` from a mapping, an existing record, or keywords.

    Keyword *overrides* win over keys in *options*.

    Raises
    ------
    InvalidOptionsError
        If a recognized flag holds a value of the wrong type.
    """
    if isinstance(options, ModelOptions):
        if not overrides:
            return options
        data: dict[str, Any] = dict(options)
    elif options is None:
        data = {}
    elif isinstance(options, Mapping):
        data = dict(options)
    else:
        raise InvalidOptionsError(f"options must be a mapping, got {type(options).__name__}")

    data.update(overrides)
    try:
        return ModelOptions(**data)
    except ValidationError as exc:
        raise InvalidOptionsError(f"Invalid model options: {exc}", errors=exc.errors()) from exc
