from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from decimal import Decimal
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
from typing import cast

from dateutil import parser

from boxtype.macros.extractor import Extractor
from boxtype.macros.extractor import Resolved
from boxtype.typecheck.descriptor import descriptor_name


class TypeChecker(metaclass=ABCMeta):
    @abstractmethod
    def check(self, value: Any) -> bool:
        pass

    def __call__(self, value: Any) -> bool:
        return self.check(value)


@dataclass
class AnyChecker(TypeChecker):
    def check(self, value: Any) -> bool:
        return True


@dataclass
class InstanceChecker(TypeChecker):
    cls: type

    def check(self, value: Any) -> bool:
        return isinstance(value, self.cls)


@dataclass
class IntChecker(TypeChecker):
    def check(self, value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class FloatChecker(TypeChecker):
    # An int is acceptable where a float is expected (PEP 484 numeric tower)
    def check(self, value: Any) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class DecimalChecker(TypeChecker):
    def check(self, value: Any) -> bool:
        return isinstance(value, (int, Decimal)) and not isinstance(value, bool)


@dataclass
class DatetimeChecker(TypeChecker):
    def check(self, value: Any) -> bool:
        return isinstance(value, datetime)


@dataclass
class DateChecker(TypeChecker):
    # datetime is a subclass of date but is not a date
    def check(self, value: Any) -> bool:
        return isinstance(value, date) and not isinstance(value, datetime)


@dataclass
class NoneChecker(TypeChecker):
    def check(self, value: Any) -> bool:
        return value is None


@dataclass
class CallableChecker(TypeChecker):
    def check(self, value: Any) -> bool:
        return callable(value)


@dataclass
class IsoDateChecker(TypeChecker):
    """Accepts strings holding an ISO-8601 date."""

    def check(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            parser.isoparse(value).date()
            return True
        except ValueError:
            return False


@dataclass
class IsoDatetimeChecker(TypeChecker):
    """Accepts strings holding an ISO-8601 date-time."""

    def check(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            parser.isoparse(value)
            return True
        except ValueError:
            return False


@dataclass
class OptionalChecker(TypeChecker):
    inner_checker: TypeChecker

    def check(self, value: Any) -> bool:
        return value is None or self.inner_checker.check(value)


@dataclass
class ListChecker(TypeChecker):
    element_checker: TypeChecker

    def check(self, value: Any) -> bool:
        if not isinstance(value, list):
            return False
        return all(self.element_checker.check(element) for element in value)


@dataclass
class DictChecker(TypeChecker):
    key_checker: TypeChecker
    value_checker: TypeChecker

    def check(self, value: Any) -> bool:
        if not isinstance(value, dict):
            return False
        return all(self.key_checker.check(k) and self.value_checker.check(v) for k, v in value.items())


@dataclass
class TupleChecker(TypeChecker):
    field_checkers: List[TypeChecker]

    def check(self, value: Any) -> bool:
        if not isinstance(value, tuple):
            return False
        # Tuple[X, ...] checks every element against X
        if len(self.field_checkers) == 2 and isinstance(self.field_checkers[1], EllipsisChecker):
            return all(self.field_checkers[0].check(element) for element in value)
        if len(value) != len(self.field_checkers):
            return False
        return all(checker.check(element) for checker, element in zip(self.field_checkers, value))


@dataclass
class EllipsisChecker(TypeChecker):
    def check(self, value: Any) -> bool:
        return False


@dataclass
class VariantChecker(TypeChecker):
    # Alternatives in declaration order; the first one that accepts a value is the one it matched.
    branches: List[Tuple[str, TypeChecker]]

    def which(self, value: Any) -> Optional[str]:
        for name, checker in self.branches:
            if checker.check(value):
                return name
        return None

    def check(self, value: Any) -> bool:
        return self.which(value) is not None


@dataclass
class ObjectChecker(TypeChecker):
    cls: type
    field_checkers: Dict[str, TypeChecker]

    def check(self, value: Any) -> bool:
        if not isinstance(value, self.cls):
            return False
        for field_name, field_checker in self.field_checkers.items():
            if not hasattr(value, field_name):
                return False
            if not field_checker.check(getattr(value, field_name)):
                return False
        return True


@dataclass
class SubclassChecker(TypeChecker):
    cls: type
    branch_checkers: Dict[str, TypeChecker]

    def check(self, value: Any) -> bool:
        if not isinstance(value, self.cls):
            return False
        branch_checker = self.branch_checkers.get(type(value).__name__)
        return branch_checker is None or branch_checker.check(value)


@dataclass
class EnumChecker(TypeChecker):
    enum_name: str
    enum_values: Dict[str, Any]

    def check(self, value: Any) -> bool:
        return any(value is v for v in self.enum_values.values())


@dataclass
class SubtypeChecker(TypeChecker):
    """A named subtype: the parent check must hold before the subtype predicate is consulted."""
    name: str
    parent_checker: TypeChecker
    predicate: Callable[[Any, List[str]], bool]
    args: List[str]

    def check(self, value: Any) -> bool:
        return self.parent_checker.check(value) and bool(self.predicate(value, self.args))


class DeferredChecker(TypeChecker):
    """Stands in for a checker of a recursive type until that checker is complete."""
    resolve: Callable[[], TypeChecker]

    def __init__(self, resolve: Callable[[], TypeChecker]) -> None:
        self.resolve = resolve

    def check(self, value: Any) -> bool:
        return self.resolve().check(value)


class AutoTypeChecker(Extractor[TypeChecker]):
    any_checker = AnyChecker()
    int_checker = IntChecker()
    float_checker = FloatChecker()
    none_checker = NoneChecker()

    basic_checkers: Dict[Any, Resolved[TypeChecker]] = {
        object: Resolved(any_checker),
        cast(type, Any): Resolved(any_checker),
        bool: Resolved(InstanceChecker(bool)),
        str: Resolved(InstanceChecker(str)),
        bytes: Resolved(InstanceChecker(bytes)),
        int: Resolved(int_checker),
        float: Resolved(float_checker),
        Decimal: Resolved(DecimalChecker()),
        datetime: Resolved(DatetimeChecker()),
        date: Resolved(DateChecker()),
        type(None): Resolved(none_checker),
        cast(type, Ellipsis): Resolved(EllipsisChecker()),
        list: Resolved(ListChecker(any_checker)),
        dict: Resolved(DictChecker(any_checker, any_checker)),
        tuple: Resolved(InstanceChecker(tuple)),
        set: Resolved(InstanceChecker(set)),
        frozenset: Resolved(InstanceChecker(frozenset)),
    }

    @property
    def basics(self) -> Dict[Any, Resolved[TypeChecker]]:
        return self.basic_checkers

    def record_extractor(self, t: type, fields: Dict[str, TypeChecker]) -> TypeChecker:
        return ObjectChecker(t, fields)

    def tuple_extractor(self, items: List[TypeChecker]) -> TypeChecker:
        return TupleChecker(items)

    def hierarchy_extractor(self, t: type, branches: Dict[str, TypeChecker]) -> TypeChecker:
        return SubclassChecker(t, branches)

    def union_extractor(self, branches: List[Tuple[Any, TypeChecker]]) -> TypeChecker:
        return VariantChecker([(descriptor_name(b), c) for (b, c) in branches])

    def optional_extractor(self, t: TypeChecker) -> TypeChecker:
        return OptionalChecker(t)

    def list_extractor(self, item: TypeChecker) -> TypeChecker:
        return ListChecker(item)

    def dictionary_extractor(self, key: TypeChecker, value: TypeChecker) -> TypeChecker:
        return DictChecker(key, value)

    def enum_extractor(self, enum_type: type) -> TypeChecker:
        return EnumChecker(enum_type.__name__, dict(enum_type.__members__))  # type: ignore

    def class_extractor(self, t: type) -> TypeChecker:
        return InstanceChecker(t)

    def recursive_extractor(self, t: Any, resolve: Callable[[], TypeChecker]) -> TypeChecker:
        return DeferredChecker(resolve)
