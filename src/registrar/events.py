"""Synchronous event dispatch.

:class:`Events` is a mixin keeping an ordered registry of handlers per event
name. Dispatch runs on the caller's thread, in registration order, and any
exception raised by a handler propagates out of :meth:`Events.trigger`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from registrar._redact import redact_for_log
from registrar.config import get_config

_logger = logging.getLogger(__name__)

ALL_EVENTS = "all"
"""Handlers on this event run for every trigger, receiving the event name first."""

Callback = Callable[..., Any]


@dataclass(eq=False)
class _Handler:
    callback: Callback
    once: bool = False


def _split_names(name: str) -> list[str]:
    return name.split()


class Events:
    """Mixin providing ``on``/``once``/``off``/``trigger``."""

    def _handlers(self) -> dict[str, list[_Handler]]:
        registry: dict[str, list[_Handler]] | None = self.__dict__.get("_events")
        if registry is None:
            registry = {}
            self.__dict__["_events"] = registry
        return registry

    def _bind(self, name: str | Mapping[str, Callback], callback: Callback | None, *, once: bool) -> Events:
        if isinstance(name, Mapping):
            for event_name, event_callback in name.items():
                self._bind(event_name, event_callback, once=once)
            return self
        if callback is None:
            raise TypeError("callback is required when binding a single event name")
        registry = self._handlers()
        for event_name in _split_names(name):
            registry.setdefault(event_name, []).append(_Handler(callback, once=once))
        return self

    def on(self, name: str | Mapping[str, Callback], callback: Callback | None = None) -> Events:
        """Register *callback* for one or more space-separated event names."""
        return self._bind(name, callback, once=False)

    def once(self, name: str | Mapping[str, Callback], callback: Callback | None = None) -> Events:
        """Like :meth:`on`, but the handler is removed after its first call."""
        return self._bind(name, callback, once=True)

    def off(self, name: str | None = None, callback: Callback | None = None) -> Events:
        """Remove handlers.

        With no arguments every handler is removed. *name* limits removal to
        those events, *callback* to that function.
        """
        registry = self._handlers()
        if name is None and callback is None:
            registry.clear()
            return self

        names = _split_names(name) if name is not None else list(registry)
        for event_name in names:
            handlers = registry.get(event_name)
            if not handlers:
                continue
            kept = [h for h in handlers if callback is not None and h.callback is not callback]
            if kept:
                registry[event_name] = kept
            else:
                del registry[event_name]
        return self

    def has_listeners(self, name: str) -> bool:
        """Return ``True`` when at least one handler is bound to *name*."""
        return bool(self._handlers().get(name))

    def trigger(self, name: str, *args: Any) -> Events:
        """Dispatch one or more space-separated events synchronously.

        Handlers bound while a dispatch is running are first called on the
        next trigger.
        """
        registry = self._handlers()
        for event_name in _split_names(name):
            handlers = list(registry.get(event_name, ()))
            catch_all = list(registry.get(ALL_EVENTS, ())) if event_name != ALL_EVENTS else []
            if get_config().trace_events:
                _logger.debug(
                    "Dispatching %r to %d handler(s) (+%d catch-all) args=%s",
                    event_name,
                    len(handlers),
                    len(catch_all),
                    redact_for_log(list(args), max_string=get_config().log_max_string),
                )
            for handler in handlers:
                if handler.once:
                    self._forget(event_name, handler)
                handler.callback(*args)
            for handler in catch_all:
                if handler.once:
                    self._forget(ALL_EVENTS, handler)
                handler.callback(event_name, *args)
        return self

    def _forget(self, name: str, handler: _Handler) -> None:
        registry = self._handlers()
        handlers = registry.get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del registry[name]
