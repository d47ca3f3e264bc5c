from __future__ import annotations

from typing import Any

from registrar import Model, extend
from registrar.extend import Extendable


class _Base(Extendable):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.args = args
        self.kwargs = kwargs

    def greet(self) -> str:
        return "base"


def test_child_forwards_constructor_arguments() -> None:
    Child = _Base.extend()
    child = Child(1, 2, key="v")
    assert child.args == (1, 2)
    assert child.kwargs == {"key": "v"}


def test_constructor_entry_replaces_construction() -> None:
    def constructor(self: Any, value: int) -> None:
        self.value = value * 2

    Child = _Base.extend({"constructor": constructor})
    child = Child(21)
    assert child.value == 42
    assert not hasattr(child, "args")


def test_instance_overrides_win_and_super_is_reachable() -> None:
    def greet(self: Any) -> str:
        return "child+" + type(self).__super__.greet(self)

    Child = _Base.extend({"greet": greet, "flavor": "sweet"})
    child = Child()
    assert child.greet() == "child+base"
    assert child.flavor == "sweet"
    assert Child.__super__ is _Base


def test_instances_are_instances_of_parent() -> None:
    Child = Model.extend()
    Grandchild = Child.extend()
    instance = Grandchild({"a": 1})
    assert isinstance(instance, Child)
    assert isinstance(instance, Model)
    assert Grandchild.__super__ is Child
    assert instance.get("a") == 1


def test_statics_are_copied_then_overridden() -> None:
    Parent = _Base.extend(None, {"kind": "parent", "limits": {"max": 1}, "label": "p"})
    Child = Parent.extend(None, {"label": "c"})

    assert Child.kind == "parent"
    assert Child.label == "c"
    assert Parent.label == "p"

    Parent.kind = "changed"
    assert Child.kind == "parent"

    # Nested objects are shared, not deep-copied.
    Parent.limits["max"] = 2
    assert Child.limits["max"] == 2


def test_static_functions_receive_the_class() -> None:
    def create(cls: Any, *args: Any) -> Any:
        return cls(*args)

    Parent = _Base.extend(None, {"create": create})
    Child = Parent.extend()
    assert type(Parent.create(1)) is Parent
    assert type(Child.create(1)) is Child


def test_statics_are_not_visible_before_extend() -> None:
    Parent = _Base.extend(None, {"kind": "parent"})
    assert not hasattr(_Base, "kind")
    assert "kind" in Parent.__static_names__


def test_module_level_extend_and_name() -> None:
    Named = extend(_Base, {"greet": lambda self: "named"}, name="Named")
    assert Named.__name__ == "Named"
    assert Named().greet() == "named"
    assert Named.__module__ == _Base.__module__


def test_class_statement_subclass_records_super() -> None:
    class Book(Model):
        pass

    assert Book.__super__ is Model
    assert Book.extend().__super__ is Book


def test_class_body_attributes_are_copied_to_extended_child() -> None:
    class Book(Model):
        kind = "book"

    Novel = Book.extend()
    Book.kind = "changed"
    assert Novel.kind == "book"
    assert Novel({}).kind == "book"


def test_mixin_base_is_not_a_parent() -> None:
    assert Model.__super__ is None
    assert _Base.__super__ is None
    assert _Base.extend().__super__ is _Base
