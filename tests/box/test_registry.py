import pytest

from boxtype.box.boxed import TypeMismatchException
from boxtype.box.registry import BoxRegistry
from boxtype.box.registry import UnknownBoxKindException
from boxtype.typecheck.service import TypeService
from boxtype.typecheck.service import UnknownTypeException


def test_generic_kind_is_registered(types: TypeService) -> None:
    registry = BoxRegistry(types)
    assert "TypedValue" in registry
    assert registry.names() == ["TypedValue"]
    assert str(registry.type_with("int")(5)) == "[TypedValue int](5)"


def test_register_and_get(types: TypeService) -> None:
    registry = BoxRegistry(types)
    constructor = registry.register("Container")
    assert registry.get("Container") is constructor
    assert registry.box_with("Container") is constructor
    assert registry.get("Nope") is None
    assert str(constructor("int")(99)) == "[Container int](99)"


def test_box_with_unknown_kind(types: TypeService) -> None:
    registry = BoxRegistry(types)
    with pytest.raises(UnknownBoxKindException) as e:
        registry.box_with("BadBox")
    assert str(e.value) == "No box type \"BadBox\" exists"


def test_registered_kind_is_a_type(types: TypeService) -> None:
    registry = BoxRegistry(types)
    registry.register("Container")
    box = registry.box_with("Container")("int")(99)

    assert types.satisfies("Container<int>", box)
    assert types.satisfies("Container", box)
    assert types.satisfies("boxType", box)
    assert not types.satisfies("Container<str>", box)
    assert not types.satisfies("TypedValue<int>", box)
    assert not types.satisfies("Container", 99)
    assert types.satisfies("list<Container<int>>", [box, box])


def test_registered_kind_with_variant_content(types: TypeService) -> None:
    registry = BoxRegistry(types)
    registry.register("Container")
    box = registry.box_with("Container")("variant<int, str>")("a")

    assert str(box) == "[Container str](a)"
    assert types.satisfies("Container<variant<int, str>>", box)
    assert types.satisfies("Container<str>", box)
    assert not types.satisfies("Container<variant<int, float>>", box)


def test_re_registration_replaces_kind(types: TypeService) -> None:
    registry = BoxRegistry(types)
    registry.register("Age")
    assert registry.box_with("Age")()("old")() == "old"

    registry.register("Age", "int")
    with pytest.raises(TypeMismatchException) as e:
        registry.box_with("Age")()("old")
    assert str(e.value) == "Cannot cast value of type str to Age"
    assert registry.names() == ["TypedValue", "Age"]


def test_register_with_unknown_base_type(types: TypeService) -> None:
    registry = BoxRegistry(types)
    with pytest.raises(UnknownTypeException):
        registry.register("Bad", "Nope")
    assert "Bad" not in registry


def test_nested_boxes(types: TypeService) -> None:
    registry = BoxRegistry(types)
    inner = registry.type_with("int")(10)
    outer = registry.type_with("TypedValue<int>")(inner)

    assert outer() == 10
    assert outer(None, 1) is inner
    assert types.satisfies("TypedValue<int>", outer(None, 1))
    assert str(outer) == "[TypedValue TypedValue<int>](10)"

    with pytest.raises(TypeMismatchException) as e:
        registry.type_with("TypedValue<str>")(inner)
    assert str(e.value) == "Cannot cast value \"[TypedValue int](10)\" of type BoxedValue to TypedValue<str>"


def test_configured_kinds(types: TypeService) -> None:
    registry = BoxRegistry(types, generic_kind="Boxed", kinds={"Age": "int", "Tag": None})
    assert registry.names() == ["Boxed", "Age", "Tag"]
    assert str(registry.type_with("int")(1)) == "[Boxed int](1)"
    assert registry.box_with("Tag")()("x")() == "x"
    with pytest.raises(TypeMismatchException):
        registry.box_with("Age")()("x")
    with pytest.raises(UnknownBoxKindException):
        registry.box_with("TypedValue")


def test_registries_are_independent() -> None:
    first = BoxRegistry(TypeService())
    second = BoxRegistry(TypeService())
    first.register("Only")

    assert "Only" in first
    assert "Only" not in second
    assert first.types.is_type("Only")
    assert not second.types.is_type("Only")
