import tempfile
from typing import Optional, Union

from boxtype.box.boxed import BoxBuilder
from boxtype.box.monad import BoxKind
from boxtype.box.monad import either
from boxtype.box.monad import install_monad_types
from boxtype.box.monad import just
from boxtype.box.monad import kind_of
from boxtype.box.monad import maybe
from boxtype.box.monad import none
from boxtype.box.monad import some
from boxtype.typecheck.service import TypeService


def test_just() -> None:
    assert just(99)() == 99
    assert str(just("foo")) == "[Just str](foo)"
    assert just("bar").value_of() == "bar"
    assert just(None)() is None
    assert just(None).declared_type == "NoneType"


def test_just_copies_structured_values() -> None:
    original = {"a": 1}
    boxed = just(original)
    original["b"] = 2
    assert boxed() == {"a": 1}


def test_just_accepts_open_files() -> None:
    with tempfile.TemporaryFile() as handle:
        boxed = just(handle)
        assert boxed() is handle
        assert boxed.declared_type == type(handle).__name__


def test_maybe(types: TypeService) -> None:
    maybe_int = maybe(types, "int")
    assert maybe_int(5)() == 5
    assert maybe_int()() is none
    assert maybe_int(None)() is none
    assert maybe_int("5")() is none
    assert maybe_int(5).box_kind == "Maybe"
    assert maybe_int(5).declared_type == "int"
    assert str(maybe_int(5)) == "[Maybe int](5)"
    assert str(maybe_int("5")) == "[Maybe int](None)"


def test_maybe_holds_just_or_none(types: TypeService) -> None:
    assert kind_of(maybe(types, "int")(5)(None, 1)) is BoxKind.JUST
    assert maybe(types, "int")("5")(None, 1) is none


def test_maybe_with_python_types(types: TypeService) -> None:
    assert maybe(types, int)(5)() == 5
    assert maybe(types, int)(True)() is none
    assert maybe(types, Optional[int])(None)() is None
    assert maybe(types, Optional[int])(None).variant_tag == "NoneType"


def test_either(types: TypeService) -> None:
    either_int = either(types, "int", 1)
    assert either_int(10)() == 10
    assert either_int(False)() == 1
    assert either_int()() == 1
    assert str(either_int("x")) == "[Either int](1)"


def test_variant_tags(types: TypeService) -> None:
    maybe_variant = maybe(types, "variant<int, str>")
    assert maybe_variant("a").variant_tag == "str"
    assert str(maybe_variant("a")) == "[Maybe str](a)"
    assert maybe_variant(1.5).variant_tag is None
    assert str(maybe_variant(1.5)) == "[Maybe variant<int, str>](None)"

    either_union = either(types, Union[int, str], "default")
    assert either_union(1).variant_tag == "int"
    assert either_union(1.5).variant_tag is None
    assert either_union(1.5)() == "default"


def test_some() -> None:
    assert some(5) == 5
    assert some(None) is none
    assert some(none) is none
    assert some(just(just(99))) == 99
    items = [1]
    assert some(items) is items


def test_some_unwraps_typed_boxes(types: TypeService) -> None:
    assert some(BoxBuilder("TypedValue", types).with_declared_type("int").build(99)) == 99


def test_kind_of(types: TypeService) -> None:
    assert kind_of(none) is BoxKind.NONE
    assert kind_of(just(1)) is BoxKind.JUST
    assert kind_of(maybe(types, "int")(1)) is BoxKind.MAYBE
    assert kind_of(either(types, "int", 1)(1)) is BoxKind.EITHER
    assert kind_of(BoxBuilder("Container", types).build(1)) is BoxKind.OTHER


def test_monad_types() -> None:
    types = TypeService()
    install_monad_types(types)

    assert types.satisfies("None", none)
    assert not types.satisfies("None", just(1))
    assert not types.satisfies("None", None)

    assert types.satisfies("Just", just("a"))
    assert types.satisfies("Just<int>", just(1))
    assert not types.satisfies("Just<int>", just("a"))

    assert types.satisfies("Maybe<int>", maybe(types, "int")(1))
    assert types.satisfies("Maybe<int>", maybe(types, "int")(None))
    assert not types.satisfies("Maybe<int>", maybe(types, "str")("a"))
    assert not types.satisfies("Maybe<int>", just(1))

    assert types.satisfies("Either<int>", either(types, "int", 1)("x"))
    assert not types.satisfies("Either<int>", either(types, "str", "d")(5))
