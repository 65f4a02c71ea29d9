import logging
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

from boxtype.errors import BoxTypeException
from boxtype.macros.extractor import ExtractorAssignmentException
from boxtype.macros.extractor import UnknownExtractorException
from boxtype.macros.extractor import union_of
from boxtype.typecheck.checker import AnyChecker
from boxtype.typecheck.checker import AutoTypeChecker
from boxtype.typecheck.checker import CallableChecker
from boxtype.typecheck.checker import DictChecker
from boxtype.typecheck.checker import IsoDateChecker
from boxtype.typecheck.checker import IsoDatetimeChecker
from boxtype.typecheck.checker import ListChecker
from boxtype.typecheck.checker import OptionalChecker
from boxtype.typecheck.checker import SubtypeChecker
from boxtype.typecheck.checker import TupleChecker
from boxtype.typecheck.checker import TypeChecker
from boxtype.typecheck.checker import VariantChecker
from boxtype.typecheck.descriptor import TypeExpression
from boxtype.typecheck.descriptor import descriptor_name
from boxtype.typecheck.descriptor import format_descriptor
from boxtype.typecheck.descriptor import parse_descriptor

logger = logging.getLogger(__name__)

SubtypePredicate = Callable[[Any, List[str]], bool]

VARIANT = "variant"


@dataclass
class UnknownTypeException(BoxTypeException):
    name: str

    def message(self) -> str:
        return "Unknown type \"%s\"" % self.name


@dataclass
class NotAVariantTypeException(BoxTypeException):
    name: str

    def message(self) -> str:
        return "Type \"%s\" is not a variant type" % self.name


@dataclass
class Subtype:
    parent: str
    predicate: SubtypePredicate


class TypeService:
    """
        Answers "does this value satisfy this type descriptor" for Python types and type-expression strings.

        Named subtypes can be registered at runtime. A subtype `Name` is checked by first checking its parent
        and then calling its predicate with the value and the canonical strings of the arguments given to it
        (so `Name<int, str>` calls the predicate with `["int", "str"]`).

        Registration is not synchronized; callers sharing a service across threads must serialize it.
    """
    aliases: Dict[str, str]
    _subtypes: Dict[str, Subtype]
    _auto_checker: AutoTypeChecker
    _cache: Dict[TypeExpression, TypeChecker]

    basic_names: Dict[str, Any] = {
        "int": int,
        "float": float,
        "bool": bool,
        "str": str,
        "bytes": bytes,
        "decimal": Decimal,
        "date": date,
        "datetime": datetime,
        "NoneType": type(None),
        "set": set,
        "frozenset": frozenset,
    }

    def __init__(self, aliases: Optional[Dict[str, str]] = None) -> None:
        self.aliases = dict(aliases) if aliases is not None else {}
        self._subtypes = {}
        self._auto_checker = AutoTypeChecker()
        self._cache = {}

    def subtype(self, parent: str) -> Callable[[str, SubtypePredicate], None]:
        def register_subtype(name: str, predicate: SubtypePredicate) -> None:
            if name in self._subtypes:
                logger.warning("Type %s is already registered; replacing it", name)
            else:
                logger.debug("Registering type %s as a subtype of %s", name, parent)
            self._subtypes[name] = Subtype(parent, predicate)
            self._cache.clear()

        return register_subtype

    def has_subtype(self, name: str) -> bool:
        return name in self._subtypes

    def _resolve_name(self, name: str) -> str:
        seen: List[str] = []
        while name in self.aliases and name not in seen:
            seen.append(name)
            name = self.aliases[name]
        return name

    def _args(self, expression: TypeExpression, count: int) -> List[TypeChecker]:
        checkers = [self._expression_checker(arg) for arg in expression.args]
        while len(checkers) < count:
            checkers.append(AutoTypeChecker.any_checker)
        return checkers

    def _build_expression_checker(self, expression: TypeExpression) -> TypeChecker:
        name = self._resolve_name(expression.name)

        subtype = self._subtypes.get(name)
        if subtype is not None:
            return SubtypeChecker(
                name=name,
                parent_checker=self._expression_checker(parse_descriptor(subtype.parent)),
                predicate=subtype.predicate,
                args=[format_descriptor(arg) for arg in expression.args],
            )

        if name in ("any", "*"):
            return AnyChecker()
        if name == "callable":
            return CallableChecker()
        if name == "isodate":
            return IsoDateChecker()
        if name == "isodatetime":
            return IsoDatetimeChecker()
        if name == VARIANT:
            return VariantChecker([(format_descriptor(arg), self._expression_checker(arg)) for arg in expression.args])
        if name == "optional":
            return OptionalChecker(self._args(expression, 1)[0])
        if name == "list":
            return ListChecker(self._args(expression, 1)[0])
        if name == "dict":
            key_checker, value_checker = self._args(expression, 2)[:2]
            return DictChecker(key_checker, value_checker)
        if name == "tuple":
            return TupleChecker(self._args(expression, 0))
        if name in self.basic_names:
            return self._auto_checker.extract(self.basic_names[name])

        raise UnknownTypeException(expression.name)

    def _expression_checker(self, expression: TypeExpression) -> TypeChecker:
        checker = self._cache.get(expression)
        if checker is None:
            checker = self._build_expression_checker(expression)
            self._cache[expression] = checker
        return checker

    def checker(self, descriptor: Any) -> TypeChecker:
        """
        :param descriptor: A type-expression string, a parsed expression, a Python type or a typing construct.
        :return: A checker for values of that descriptor.
        """
        if isinstance(descriptor, str):
            return self._expression_checker(parse_descriptor(descriptor))
        if isinstance(descriptor, TypeExpression):
            return self._expression_checker(descriptor)
        try:
            return self._auto_checker.extract(descriptor)
        except (UnknownExtractorException, ExtractorAssignmentException):
            raise UnknownTypeException(descriptor_name(descriptor))

    def is_type(self, descriptor: Any) -> bool:
        try:
            self.checker(descriptor)
            return True
        except BoxTypeException:
            return False

    def satisfies(self, descriptor: Any, value: Any) -> bool:
        return self.checker(descriptor).check(value)

    def is_type_of(self, descriptor: Any) -> Callable[[Any], bool]:
        checker = self.checker(descriptor)
        return checker.check

    def _variant_branches(self, descriptor: Any) -> Optional[List[Tuple[str, Any]]]:
        if isinstance(descriptor, (str, TypeExpression)):
            expression = parse_descriptor(descriptor) if isinstance(descriptor, str) else descriptor
            if self._resolve_name(expression.name) != VARIANT:
                return None
            return [(format_descriptor(arg), arg) for arg in expression.args]

        union = union_of(descriptor)
        if union is None:
            return None
        branches: List[Tuple[str, Any]] = [(descriptor_name(b), b) for b in union.branches]
        if union.is_optional:
            branches.append(("NoneType", type(None)))
        return branches

    def is_variant(self, descriptor: Any) -> bool:
        return self._variant_branches(descriptor) is not None

    def which_variant_type(self, descriptor: Any) -> Callable[[Any], Optional[str]]:
        """
        :param descriptor: A `variant<...>` string or a Union type.
        :return: A function giving the name of the first declared alternative a value satisfies (or None).
        """
        branches = self._variant_branches(descriptor)
        if branches is None:
            raise NotAVariantTypeException(descriptor_name(descriptor))
        variant_checker = VariantChecker([(name, self.checker(branch)) for (name, branch) in branches])
        return variant_checker.which
