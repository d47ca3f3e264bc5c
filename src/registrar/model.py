"""Observable attribute store.

A :class:`Model` holds a mutable mapping of attributes, remembers what the
mapping looked like before the latest mutation round, and notifies
listeners synchronously when attributes change.

Rounds
------
A *round* is one top-level ``set``/``unset``/``clear`` call together with any
mutation issued by listeners while that call is dispatching. At the start
of a round the attributes are snapshotted into ``previous_attributes()`` and
``changed`` is reset; nested calls reuse the running round, so their changes
accumulate into the same ``changed`` mapping and the same dispatch pass.

Within a round every changed key fires ``"change:<key>"`` once, in the order
the keys were processed, and a single ``"change"`` follows once the queue of
per-key events has drained. Silent mutations skip dispatch but keep the
bookkeeping; :meth:`Model.change` replays what they deferred.

Validation
----------
When a ``validate`` hook is present it sees the proposed attributes (for
``unset`` the keys are already gone). A truthy return value rejects the call
as a whole: nothing is written, nothing fires, the value is stored in
``validation_error`` and the call returns ``False``.
"""

from __future__ import annotations

import copy
import html
import itertools
import logging
import math
from collections.abc import Callable, Iterator, Mapping
from typing import Any, ClassVar, Literal, Self

from registrar._redact import redact_for_log
from registrar.config import get_config
from registrar.events import Events
from registrar.extend import Extendable
from registrar.options import ModelOptions, coerce_options

_logger = logging.getLogger(__name__)

_MISSING: Any = object()

_cid_counter = itertools.count(1)


def _is_equal(a: Any, b: Any) -> bool:
    """Structural equality that keeps ``True``/``1`` apart and treats NaN as equal to NaN."""
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(_is_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return type(a) is type(b) and len(a) == len(b) and all(_is_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return bool(a == b)


class Model(Extendable, Events):
    """Key/value record with change tracking and change events.

    Parameters
    ----------
    attributes : Mapping or Model, optional
        Initial attributes. Declared ``defaults`` fill in missing keys.
    options : Mapping or ModelOptions, optional
        ``parse=True`` runs :meth:`parse` over *attributes* first. Every
        other key is handed to :meth:`initialize` untouched.
    **kwargs
        Merged into *options*.
    """

    id_attribute: ClassVar[str | None] = None
    """Identity attribute; ``None`` defers to :attr:`RegistrarConfig.id_attribute`."""

    defaults: ClassVar[Mapping[str, Any] | Callable[[], Mapping[str, Any]] | None] = None
    """Attribute defaults, or a method returning them."""

    validate: ClassVar[Callable[..., Any] | None] = None
    """Optional ``validate(attrs, options)`` hook; a truthy return rejects the mutation."""

    def __init__(
        self,
        attributes: Mapping[str, Any] | Model | None = None,
        options: Mapping[str, Any] | ModelOptions | None = None,
        **kwargs: Any,
    ) -> None:
        opts = coerce_options(options, **kwargs)
        self.cid = f"{get_config().cid_prefix}{next(_cid_counter)}"
        self.changed: dict[str, Any] = {}
        self.validation_error: Any = None
        self._changing = False
        self._queue: list[tuple[str, ModelOptions]] = []
        self._fired: set[str] = set()
        self._silent: dict[str, None] = {}

        if isinstance(attributes, Model):
            attributes = attributes.attributes
        attrs: Mapping[str, Any] = dict(attributes or {})
        if opts.parse:
            attrs = self.parse(attrs, opts) or {}

        self.attributes: dict[str, Any] = {**self._defaults(), **attrs}
        self._previous_attributes: dict[str, Any] = dict(self.attributes)
        self.initialize(attributes if attributes is not None else {}, opts)

    def __repr__(self) -> str:
        redacted = redact_for_log(self.attributes, max_string=get_config().log_max_string)
        return f"<{type(self).__name__} {self.cid} {redacted!r}>"

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def keys(self) -> Iterator[str]:
        return iter(list(self.attributes))

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def initialize(self, attributes: Mapping[str, Any], options: ModelOptions) -> None:
        """Called once at the end of construction. No-op by default."""

    def parse(self, raw: Mapping[str, Any], options: ModelOptions) -> Mapping[str, Any]:
        """Turn raw constructor input into attributes. Identity by default."""
        return raw

    def _defaults(self) -> dict[str, Any]:
        defaults = self.defaults
        if callable(defaults):
            defaults = defaults()
        # Deep-copied so instances never share mutable default values.
        return copy.deepcopy(dict(defaults or {}))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def id(self) -> Any:
        """Value of the identity attribute, ``None`` when absent."""
        return self.attributes.get(self.get_id_attribute())

    def get_id_attribute(self) -> str:
        return self.id_attribute or get_config().id_attribute

    def get(self, key: str) -> Any:
        return self.attributes.get(key)

    def escape(self, key: str) -> str:
        """HTML-escaped string form of an attribute; ``""`` for ``None``."""
        value = self.attributes.get(key)
        return "" if value is None else html.escape(str(value))

    def has(self, key: str) -> bool:
        """``True`` when *key* holds a value other than ``None``."""
        return self.attributes.get(key) is not None

    def is_new(self) -> bool:
        """``True`` until the identity attribute holds a value (``0`` counts)."""
        return self.id is None

    def has_changed(self, key: str | None = None) -> bool:
        """Whether the latest round changed anything, or changed *key*."""
        if key is None:
            return bool(self.changed)
        return key in self.changed

    def changed_attributes(self, diff: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        """Return the latest round's changes, or the entries of *diff* that
        differ from the current attributes.

        ``None`` means there is nothing to report.
        """
        if diff is None:
            return dict(self.changed) if self.changed else None
        result = {
            key: value
            for key, value in diff.items()
            if not _is_equal(self.attributes.get(key, _MISSING), value)
        }
        return result or None

    def previous(self, key: str) -> Any:
        """Value of *key* before the latest round."""
        return self._previous_attributes.get(key)

    def previous_attributes(self) -> dict[str, Any]:
        return dict(self._previous_attributes)

    def to_dict(self) -> dict[str, Any]:
        """Shallow copy of the attributes, for persistence collaborators."""
        return dict(self.attributes)

    def clone(self) -> Self:
        return type(self)(dict(self.attributes))

    def is_valid(self) -> bool:
        """Run ``validate`` against the current attributes."""
        if self.validate is None:
            return True
        self.validation_error = self.validate(dict(self.attributes), coerce_options())
        return not self.validation_error

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set(
        self,
        key: str | Mapping[str, Any] | Model | None,
        value: Any = _MISSING,
        options: Mapping[str, Any] | ModelOptions | None = None,
        **kwargs: Any,
    ) -> Self | Literal[False]:
        """Assign one attribute or a mapping of attributes.

        Accepts ``set(key, value, options)`` and ``set(attrs, options)``;
        option keys may also be passed as keywords. Returns the model, or
        ``False`` when ``validate`` rejected the change.
        """
        if key is None:
            return self
        if isinstance(key, Model):
            key = key.attributes
        if isinstance(key, Mapping):
            if value is not _MISSING:
                if options is not None:
                    raise TypeError("set(attrs, options) takes no third positional argument")
                options = value
            attrs = dict(key)
        else:
            if value is _MISSING:
                raise TypeError(f"set({key!r}) requires a value")
            attrs = {key: value}
        return self._apply(attrs, coerce_options(options, **kwargs))

    def unset(
        self,
        key: str,
        options: Mapping[str, Any] | ModelOptions | None = None,
        **kwargs: Any,
    ) -> Self | Literal[False]:
        """Remove *key*. Always reported as a change, even if it was absent."""
        kwargs["unset"] = True
        return self._apply({key: None}, coerce_options(options, **kwargs))

    def clear(
        self,
        options: Mapping[str, Any] | ModelOptions | None = None,
        **kwargs: Any,
    ) -> Self | Literal[False]:
        """Remove every attribute in a single round."""
        kwargs["unset"] = True
        return self._apply(dict.fromkeys(self.attributes), coerce_options(options, **kwargs))

    def change(
        self,
        options: Mapping[str, Any] | ModelOptions | None = None,
        **kwargs: Any,
    ) -> Self:
        """Fire the notifications deferred by silent mutations.

        Pending ``"change:<key>"`` events fire first, then ``"change"``,
        which fires whenever the latest round changed something.
        """
        opts = coerce_options(options, **kwargs)
        pending = list(self._silent)
        self._silent = {}
        for attr in pending:
            self._enqueue(attr, opts)
        if self._changing:
            return self
        if not self._queue and not self.changed:
            return self

        self._changing = True
        try:
            self._dispatch(opts, force=True)
        finally:
            self._end_round()
        return self

    def _validate(self, attrs: dict[str, Any], opts: ModelOptions) -> bool:
        validate = self.validate
        if validate is None:
            return True

        proposed = dict(self.attributes)
        if opts.unset:
            for attr in attrs:
                proposed.pop(attr, None)
        else:
            proposed.update(attrs)

        error = validate(proposed, opts)
        if not error:
            self.validation_error = None
            return True

        self.validation_error = error
        max_string = get_config().log_max_string
        _logger.debug(
            "Validation rejected change on %s: error=%s attrs=%s",
            self.cid,
            redact_for_log(error, max_string=max_string),
            redact_for_log(attrs, max_string=max_string),
        )
        if opts.error is not None:
            opts.error(self, error, opts)
        return False

    def _apply(self, attrs: dict[str, Any], opts: ModelOptions) -> Self | Literal[False]:
        if not self._validate(attrs, opts):
            return False

        nested = self._changing
        self._changing = True
        if not nested:
            self._previous_attributes = dict(self.attributes)
            self.changed = {}
            self._silent = {}

        current = self.attributes
        previous = self._previous_attributes
        changes: list[str] = []
        for attr, value in attrs.items():
            if opts.unset:
                changes.append(attr)
                self.changed[attr] = None
                current.pop(attr, None)
                continue
            if not _is_equal(current.get(attr, _MISSING), value):
                changes.append(attr)
            if _is_equal(previous.get(attr, _MISSING), value):
                self.changed.pop(attr, None)
            else:
                self.changed[attr] = value
            current[attr] = value

        if opts.silent:
            for attr in changes:
                if not self._is_scheduled(attr):
                    self._silent[attr] = None
        else:
            for attr in changes:
                self._silent.pop(attr, None)
                self._enqueue(attr, opts)

        if nested:
            return self
        try:
            self._dispatch(opts)
        finally:
            self._end_round()
        return self

    def _is_scheduled(self, attr: str) -> bool:
        return attr in self._fired or any(queued == attr for queued, _ in self._queue)

    def _enqueue(self, attr: str, opts: ModelOptions) -> None:
        # A key notifies at most once per round.
        if not self._is_scheduled(attr):
            self._queue.append((attr, opts))

    def _dispatch(self, opts: ModelOptions, *, force: bool = False) -> None:
        change_fired = False
        while True:
            while self._queue:
                attr, attr_opts = self._queue.pop(0)
                self._fired.add(attr)
                self.trigger(f"change:{attr}", self, self.attributes.get(attr), attr_opts)
            if change_fired or not (self._fired or force):
                return
            change_fired = True
            # Handlers of "change" may mutate again; their per-key events
            # drain on the next pass without a second "change".
            self.trigger("change", self, opts)

    def _end_round(self) -> None:
        self._changing = False
        self._queue = []
        self._fired = set()
