from abc import ABCMeta
from abc import abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from dataclasses import fields as dataclass_fields
from dataclasses import is_dataclass
from enum import Enum
from inspect import isclass
from typing import Any
from typing import Callable
from typing import Dict
from typing import ForwardRef
from typing import FrozenSet
from typing import Generic
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple
from typing import TypeVar
from typing import Union
from typing import get_type_hints
import types

from boxtype.errors import BoxTypeException

T = TypeVar("T")

Bindings = Dict[str, Any]
TypeKey = Tuple[Any, FrozenSet[Tuple[str, Any]]]


@dataclass
class UnknownExtractorException(BoxTypeException):
    t: Any

    def message(self) -> str:
        return "Automatic extraction not implemented for type %s" % str(self.t)


@dataclass
class ExtractorAssignmentException(BoxTypeException):
    bindings: Bindings
    name: str

    def message(self) -> str:
        return "Type variable %s is not assigned (known assignments: %s)" % (self.name, ", ".join(self.bindings))


@dataclass
class Resolved(Generic[T]):
    """A found value. Distinguishes "found `None`" from "not found"."""
    t: T


@dataclass
class _Pending:
    """Marks a type whose extraction is in progress, i.e. a type that refers to itself."""
    key: TypeKey


@dataclass
class UnionBranches:
    branches: List[Any]  # non-None branches, in declaration order
    is_optional: bool


_union_classes: Tuple[Any, ...] = (types.UnionType,) if hasattr(types, "UnionType") else ()


def union_of(t: Any) -> Optional[UnionBranches]:
    """Splits `Union[...]`, `Optional[...]` and `X | Y` into their non-None branches."""
    if getattr(t, "__origin__", None) is not Union and not isinstance(t, _union_classes):
        return None
    branches = [b for b in t.__args__ if b is not type(None)]  # noqa: E721
    return UnionBranches(branches, len(branches) < len(t.__args__))


def list_item_of(t: Any) -> Optional[Resolved[Any]]:
    if getattr(t, "__origin__", None) is not list:
        return None
    args = getattr(t, "__args__", ())
    return Resolved(args[0] if len(args) > 0 else Any)


def dict_items_of(t: Any) -> Optional[Resolved[Tuple[Any, Any]]]:
    if getattr(t, "__origin__", None) is not dict:
        return None
    args = getattr(t, "__args__", ())
    if len(args) != 2:
        return Resolved((Any, Any))
    return Resolved((args[0], args[1]))


def tuple_items_of(t: Any) -> Optional[List[Any]]:
    if getattr(t, "__origin__", None) is not tuple:
        return None
    return list(getattr(t, "__args__", ()))


def _annotations(t: type) -> Dict[str, Any]:
    try:
        return get_type_hints(t)
    except (NameError, TypeError, AttributeError):
        # Unresolvable forward references stay as strings
        raw: Dict[str, Any] = {}
        for klass in reversed(t.__mro__):
            raw.update(klass.__dict__.get("__annotations__", {}))
        return raw


def record_fields_of(t: Any) -> Optional[Dict[str, Any]]:
    """
    :return: Field names mapped to field types if `t` is a named tuple or a dataclass, None otherwise.
    """
    if not isclass(t):
        return None
    if issubclass(t, tuple) and hasattr(t, "_fields"):
        names = list(t._fields)  # type: ignore
    elif is_dataclass(t):
        names = [f.name for f in dataclass_fields(t)]
    else:
        return None

    annotations = _annotations(t)
    return {name: annotations.get(name, Any) for name in names}


def subclasses_of(t: Any) -> Optional[Dict[str, type]]:
    """
    :return: Direct subclasses of `t` by name, or None if `t` has none.
       Metaclasses never count.
    """
    if not isclass(t) or issubclass(t, type):
        return None
    branches = {b.__name__: b for b in t.__subclasses__()}
    if len(branches) <= 0:
        return None
    return branches


class Extractor(Generic[T], metaclass=ABCMeta):
    """
        Derives a `T` for a Python type from the `T`s of its parts.

        Results are memoized per type. A generic class is memoized once per assignment of its type
        variables: `G[int]` and `G[str]` give different results, and `G[X]` seen while extracting
        `H[int]` (where `H` passes `X = int` down) shares its result with `G[int]`.
    """
    memoized: Dict[TypeKey, Resolved[Any]]

    # Type variable assignments of the type currently being extracted. Not thread-safe.
    _bindings: Bindings

    def __init__(self) -> None:
        self.memoized = {}
        self._bindings = {}

    @property
    @abstractmethod
    def basics(self) -> Dict[Any, Resolved[T]]:
        pass

    @abstractmethod
    def record_extractor(self, t: type, fields: Dict[str, T]) -> T:
        pass

    @abstractmethod
    def tuple_extractor(self, items: List[T]) -> T:
        pass

    @abstractmethod
    def hierarchy_extractor(self, t: type, branches: Dict[str, T]) -> T:
        pass

    @abstractmethod
    def union_extractor(self, branches: List[Tuple[Any, T]]) -> T:
        pass

    @abstractmethod
    def optional_extractor(self, t: T) -> T:
        pass

    @abstractmethod
    def list_extractor(self, item: T) -> T:
        pass

    @abstractmethod
    def dictionary_extractor(self, key: T, value: T) -> T:
        pass

    @abstractmethod
    def enum_extractor(self, enum_type: type) -> T:
        pass

    @abstractmethod
    def class_extractor(self, t: type) -> T:
        pass

    @abstractmethod
    def recursive_extractor(self, t: Any, resolve: Callable[[], T]) -> T:
        # `resolve` only works once the extraction of `t` is finished
        pass

    def _lookup(self, name: str) -> Any:
        if name not in self._bindings:
            raise ExtractorAssignmentException(self._bindings.copy(), name)
        return self._bindings[name]

    def _concrete(self, arg: Any) -> Any:
        if isinstance(arg, TypeVar):
            return self._lookup(arg.__name__)
        parameters = getattr(arg, "__parameters__", ())
        if len(parameters) <= 0:
            return arg
        return arg[tuple(self._lookup(p.__name__) for p in parameters)]

    def _key(self, t: Any) -> Tuple[Any, FrozenSet[Tuple[str, Any]], Bindings]:
        """
        :return: The memoization key of `t` (its origin and the assignment of the origin's type variables)
           together with the bindings to use while extracting the parts of `t`.
        """
        origin = getattr(t, "__origin__", None)
        bindings = self._bindings
        if origin is None:
            origin = t
        elif hasattr(origin, "__parameters__") and hasattr(t, "__args__"):
            bindings = dict(self._bindings)
            for parameter, arg in zip(origin.__parameters__, t.__args__):
                bindings[parameter.__name__] = self._concrete(arg)
        else:
            # List[X], Dict[K, V], Union[...] and friends are keyed by themselves and their free type variables
            free = frozenset((p.__name__, self._lookup(p.__name__)) for p in getattr(t, "__parameters__", ()))
            return t, free, self._bindings

        assigned: List[Tuple[str, Any]] = []
        if isclass(origin):
            for parameter in getattr(origin, "__parameters__", ()):
                if parameter.__name__ not in bindings:
                    raise ExtractorAssignmentException(bindings, parameter.__name__)
                assigned.append((parameter.__name__, bindings[parameter.__name__]))

        if len(assigned) <= 0:
            return origin, frozenset(), self._bindings
        return origin, frozenset(assigned), bindings

    @contextmanager
    def _bound(self, bindings: Bindings) -> Iterator[None]:
        outer = self._bindings
        self._bindings = bindings
        try:
            yield
        finally:
            self._bindings = outer

    def _basic(self, t: Any) -> Optional[Resolved[T]]:
        return self.basics.get(t)

    def _union(self, t: Any) -> Optional[Resolved[T]]:
        union = union_of(t)
        if union is None:
            return None
        branches = [(b, self._make(b)) for b in union.branches]
        result = branches[0][1] if len(branches) == 1 else self.union_extractor(branches)
        if union.is_optional:
            result = self.optional_extractor(result)
        return Resolved(result)

    def _list(self, t: Any) -> Optional[Resolved[T]]:
        item = list_item_of(t)
        if item is None:
            return None
        return Resolved(self.list_extractor(self._make(item.t)))

    def _dictionary(self, t: Any) -> Optional[Resolved[T]]:
        items = dict_items_of(t)
        if items is None:
            return None
        key, value = items.t
        return Resolved(self.dictionary_extractor(self._make(key), self._make(value)))

    def _tuple(self, t: Any) -> Optional[Resolved[T]]:
        items = tuple_items_of(t)
        if items is None:
            return None
        return Resolved(self.tuple_extractor([self._make(i) for i in items]))

    def _record(self, t: Any) -> Optional[Resolved[T]]:
        record_fields = record_fields_of(t)
        if record_fields is None:
            return None
        return Resolved(self.record_extractor(t, {n: self._make(f) for (n, f) in record_fields.items()}))

    def _enum(self, t: Any) -> Optional[Resolved[T]]:
        if not (isclass(t) and issubclass(t, Enum)):
            return None
        return Resolved(self.enum_extractor(t))

    def _hierarchy(self, t: Any) -> Optional[Resolved[T]]:
        branches = subclasses_of(t)
        if branches is None:
            return None
        return Resolved(self.hierarchy_extractor(t, {n: self._make(b) for (n, b) in branches.items()}))

    def _plain_class(self, t: Any) -> Optional[Resolved[T]]:
        if not isclass(t):
            return None
        return Resolved(self.class_extractor(t))

    def _make(self, t: Any) -> T:
        if isinstance(t, (str, ForwardRef)):
            t = Any
        elif isinstance(t, TypeVar):
            t = self._lookup(t.__name__)

        origin, assigned, bindings = self._key(t)
        key = (origin, assigned)
        known = self.memoized.get(key)
        if known is not None:
            if isinstance(known.t, _Pending):
                return self.recursive_extractor(origin, lambda: self.memoized[key].t)
            return known.t

        self.memoized[key] = Resolved(_Pending(key))
        shapes = [
            self._basic, self._union, self._list, self._dictionary, self._tuple,
            self._record, self._enum, self._hierarchy, self._plain_class,
        ]
        result: Optional[Resolved[T]] = None
        try:
            with self._bound(bindings):
                for shape in shapes:
                    result = shape(origin)
                    if result is not None:
                        break
        finally:
            if result is None:
                del self.memoized[key]

        if result is None:
            raise UnknownExtractorException(origin)
        self.memoized[key] = result
        return result.t

    def extract(self, t: Any) -> T:
        """
        :param t: A Python type or typing construct.
        :return: The `T` derived for `t`.
        """
        self._bindings = {}
        return self._make(t)
