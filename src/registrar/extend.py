"""Subclass builder for models and other extensible types.

:func:`extend` derives a new class from a parent given two mappings:

* ``proto_props``: instance-level members (methods, hooks, class defaults
  read through ``self``). A ``"constructor"`` entry becomes ``__init__``;
  without one the parent's ``__init__`` receives every argument unchanged.
* ``static_props``: type-level members. The parent's statics, and the plain
  data attributes of its class body, are copied onto the child first, then
  these are applied on top. Plain functions become classmethods so they
  receive the class they are called on.

Instance members win when a name appears in both mappings, since both live
in the same class namespace.

Every class built here is itself extensible, and carries ``__super__``
pointing at its parent for explicit super calls::

    Book = Model.extend({"initialize": lambda self, attrs, options: ...})
    Novel = Book.extend({"parse": parse_novel}, {"kind": "novel"})
    Novel.__super__ is Book
"""

from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

_logger = logging.getLogger(__name__)

_T = TypeVar("_T", bound=type)


def _as_static(value: Any) -> Any:
    if isinstance(value, types.FunctionType):
        return classmethod(value)
    return value


def _class_data(parent: type) -> dict[str, Any]:
    """Public, non-descriptor class attributes visible on *parent*, nearest class winning."""
    data: dict[str, Any] = {}
    for klass in reversed(parent.__mro__[:-1]):
        for key, value in vars(klass).items():
            if not key.startswith("_") and not hasattr(value, "__get__"):
                data[key] = value
    return data


def extend(
    parent: _T,
    proto_props: Mapping[str, Any] | None = None,
    static_props: Mapping[str, Any] | None = None,
    *,
    name: str | None = None,
) -> _T:
    """Return a subclass of *parent* with the given overrides applied."""
    proto = dict(proto_props or {})
    statics = dict(static_props or {})
    parent_statics: frozenset[str] = getattr(parent, "__static_names__", frozenset())

    namespace: dict[str, Any] = {
        "__module__": parent.__module__,
        "__static_names__": parent_statics | frozenset(statics),
    }
    # Copies, not lookups through the MRO: rebinding a static or a class-body
    # data attribute on the parent afterwards must not change what the child sees.
    namespace.update(_class_data(parent))
    for key in parent_statics:
        namespace[key] = inspect.getattr_static(parent, key)
    for key, value in statics.items():
        namespace[key] = _as_static(value)

    if "constructor" in proto:
        namespace["__init__"] = proto.pop("constructor")
    namespace.update(proto)

    child = type(name or parent.__name__, (parent,), namespace)
    child.__super__ = parent  # type: ignore[attr-defined]
    _logger.debug(
        "Extended %s into %s (proto=%s, static=%s)",
        parent.__qualname__,
        child.__qualname__,
        sorted(proto),
        sorted(statics),
    )
    return child


class Extendable:
    """Mixin giving a class (and every class derived from it) ``extend``."""

    __super__: ClassVar[type | None] = None
    __static_names__: ClassVar[frozenset[str]] = frozenset()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Mixin bases such as Extendable itself are not meaningful parents.
        parents = [base for base in cls.__bases__ if issubclass(base, Extendable) and base is not Extendable]
        cls.__super__ = parents[0] if parents else None

    @classmethod
    def extend(
        cls,
        proto_props: Mapping[str, Any] | None = None,
        static_props: Mapping[str, Any] | None = None,
        *,
        name: str | None = None,
    ) -> Any:
        """Derive a subclass of this class; see :func:`extend`."""
        return extend(cls, proto_props, static_props, name=name)
