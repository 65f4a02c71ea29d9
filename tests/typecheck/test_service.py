from typing import Any, List, Optional, Tuple, Union

import pytest

from boxtype.typecheck.service import NotAVariantTypeException
from boxtype.typecheck.service import TypeService
from boxtype.typecheck.service import UnknownTypeException

# (descriptor, values it accepts, values it rejects)
string_test_cases: List[Tuple[str, List[Any], List[Any]]] = [
    ("int", [1, -1], [True, 1.5, "1"]),
    ("float", [1.5, 1], [False, "1"]),
    ("bool", [True], [1]),
    ("str", ["a"], [1]),
    ("string", ["a"], [1]),  # alias
    ("number", [1.5, 2], ["1"]),  # alias
    ("NoneType", [None], [0]),
    ("*", [None, 1, "a"], []),
    ("any", [None, 1, "a"], []),
    ("callable", [len, lambda x: x], [1]),
    ("list", [[], [1, "a"]], [(1,)]),
    ("list<int>", [[], [1, 2]], [[1, "a"]]),
    ("list<list<int>>", [[[1], []]], [[1]]),
    ("dict<str, int>", [{"a": 1}], [{"a": "b"}, {1: 1}]),
    ("tuple<int, str>", [(1, "a")], [(1, 2), (1,)]),
    ("optional<int>", [None, 1], ["a"]),
    ("variant<int, str>", [1, "a"], [1.5, None]),
    ("isodate", ["2020-01-02"], ["2020-13-45", "not a date", 20200102]),
    ("isodatetime", ["2020-01-02T10:11:12", "2020-01-02"], ["yesterday", None]),
]


def test_string_descriptors(types: TypeService) -> None:
    for (descriptor, accepted, rejected) in string_test_cases:
        for value in accepted:
            assert types.satisfies(descriptor, value), "%s should accept %s" % (descriptor, repr(value))
        for value in rejected:
            assert not types.satisfies(descriptor, value), "%s should reject %s" % (descriptor, repr(value))


def test_python_type_descriptors(types: TypeService) -> None:
    assert types.satisfies(int, 1)
    assert not types.satisfies(int, "1")
    assert types.satisfies(List[int], [1, 2])
    assert types.satisfies(Optional[str], None)


def test_is_type_of_returns_a_predicate(types: TypeService) -> None:
    is_int = types.is_type_of("int")
    assert is_int(5)
    assert not is_int("5")


def test_unknown_types(types: TypeService) -> None:
    with pytest.raises(UnknownTypeException) as e:
        types.satisfies("Nope", 1)
    assert str(e.value) == "Unknown type \"Nope\""

    assert not types.is_type("Nope")
    assert not types.is_type("list<Nope>")
    assert not types.is_type("list<int")
    assert not types.is_type(5)
    assert types.is_type("list<int>")
    assert types.is_type(int)


def test_subtypes(types: TypeService) -> None:
    types.subtype("int")("positive", lambda value, _: value > 0)
    assert types.satisfies("positive", 5)
    assert not types.satisfies("positive", -5)
    # The parent check runs first, so the predicate never sees a string
    assert not types.satisfies("positive", "5")
    assert types.satisfies("list<positive>", [1, 2])
    assert types.has_subtype("positive")


def test_subtype_arguments(types: TypeService) -> None:
    received: List[List[str]] = []

    def between(value: int, args: List[str]) -> bool:
        received.append(args)
        return int(args[0]) <= value <= int(args[1])

    types.subtype("int")("between", between)
    assert types.satisfies("between<1, 10>", 5)
    assert not types.satisfies("between<1,10>", 11)
    assert received == [["1", "10"], ["1", "10"]]


def test_subtype_registration_overwrites(types: TypeService) -> None:
    types.subtype("int")("even", lambda value, _: value % 2 == 0)
    assert types.satisfies("even", 2)

    types.subtype("int")("even", lambda value, _: value % 2 == 1)
    assert not types.satisfies("even", 2)
    assert types.satisfies("even", 3)


def test_aliases() -> None:
    types = TypeService({"count": "natural", "natural": "int"})
    assert types.satisfies("count", 1)
    assert types.satisfies("list<count>", [1, 2])
    assert not types.satisfies("count", "1")


def test_is_variant(types: TypeService) -> None:
    assert types.is_variant("variant<int, str>")
    assert types.is_variant(Union[int, str])
    assert types.is_variant(Optional[int])
    assert not types.is_variant("int")
    assert not types.is_variant("list<variant<int, str>>")
    assert not types.is_variant(int)


def test_which_variant_type(types: TypeService) -> None:
    assert types.which_variant_type("variant<int, str>")("a") == "str"
    assert types.which_variant_type("variant<int, str>")(1) == "int"
    assert types.which_variant_type("variant<int, str>")(1.5) is None
    assert types.which_variant_type("variant<list<int>, *>")([1]) == "list<int>"
    assert types.which_variant_type(Union[int, str])("a") == "str"
    assert types.which_variant_type(Optional[int])(None) == "NoneType"


def test_which_variant_type_prefers_first_declared_alternative(types: TypeService) -> None:
    # 1 is both a float and an int; the alternative declared first wins
    assert types.which_variant_type("variant<float, int>")(1) == "float"
    assert types.which_variant_type("variant<int, float>")(1) == "int"


def test_which_variant_type_of_non_variant(types: TypeService) -> None:
    with pytest.raises(NotAVariantTypeException) as e:
        types.which_variant_type("int")
    assert str(e.value) == "Type \"int\" is not a variant type"
