import sys
from dataclasses import dataclass
from dataclasses import replace
from typing import Any
from typing import Callable
from typing import Optional

from boxtype.box.snapshot import copy_for
from boxtype.errors import BoxTypeException
from boxtype.typecheck.descriptor import descriptor_name
from boxtype.typecheck.service import TypeService

# Unwrap through every nested box unless told otherwise.
UNBOUNDED_DEPTH = sys.maxsize

BOX_TYPE = "boxType"
NONE_KIND = "None"


@dataclass
class TypeMismatchException(BoxTypeException):
    value: Any
    value_type: str
    target: str
    show_value: bool = True

    def message(self) -> str:
        if self.show_value:
            return "Cannot cast value \"%s\" of type %s to %s" % (str(self.value), self.value_type, self.target)
        return "Cannot cast value of type %s to %s" % (self.value_type, self.target)


def value_type_name(value: Any) -> str:
    return type(value).__name__


@dataclass(frozen=True, eq=False, repr=False)
class BoxedValue:
    """
        A value wrapped together with the name of the kind of box it is in and the type it was declared with.

        The wrapped value is only reachable by calling the box. Mutable values are copied one level deep on
        the way in and again on every call, so neither the original value nor the results of calls share
        state with the box.

        Calling a box unwraps it: `box()` flattens every level of nested boxes, `box(None, n)` stops after
        `n` levels, and `box(f)` applies `f` to the result.
    """
    box_kind: str
    declared_type: str
    _content: Any
    variant_tag: Optional[str] = None

    @property
    def current_type(self) -> str:
        if self.variant_tag is None:
            return self.declared_type
        return self.variant_tag

    def __call__(self, transform: Optional[Callable[[Any], Any]] = None, unbox_depth: Optional[int] = None) -> Any:
        depth = UNBOUNDED_DEPTH if unbox_depth is None else unbox_depth
        content = self._content

        result: Any
        if isinstance(content, NoneValue):
            result = content
        elif isinstance(content, BoxedValue) and depth > 1:
            result = copy_for(content(None, depth - 1))
        else:
            result = copy_for(content)

        if callable(transform):
            return transform(result)
        return result

    def value_of(self) -> Any:
        return self()

    def __str__(self) -> str:
        return "[%s %s](%s)" % (self.box_kind, self.current_type, str(self()))

    def __repr__(self) -> str:
        return str(self)


class NoneValue(BoxedValue):
    """The empty box. Calling it, whatever the arguments, gives back the box itself."""

    def __call__(self, transform: Optional[Callable[[Any], Any]] = None, unbox_depth: Optional[int] = None) -> Any:
        return self

    def value_of(self) -> Any:
        return self

    def __str__(self) -> str:
        return NONE_KIND


none = NoneValue(box_kind=NONE_KIND, declared_type=NONE_KIND, _content=None)


def box_value(box_kind: str, declared_type: str, value: Any, variant_tag: Optional[str] = None) -> BoxedValue:
    return BoxedValue(box_kind=box_kind, declared_type=declared_type, _content=copy_for(value), variant_tag=variant_tag)


def install_box_type(types: TypeService) -> None:
    if not types.has_subtype(BOX_TYPE):
        types.subtype("callable")(BOX_TYPE, lambda value, _: isinstance(value, BoxedValue))


@dataclass(frozen=True)
class BoxBuilder:
    """
        Builds boxes of one kind. The base type (if any) is checked before the declared type (if any).
        Builders are immutable: `with_*` methods return new builders.
    """
    box_kind: str
    types: TypeService
    base_type: Optional[Any] = None
    declared_type: Optional[Any] = None

    def with_base_type(self, base_type: Optional[Any]) -> "BoxBuilder":
        return replace(self, base_type=base_type)

    def with_declared_type(self, declared_type: Optional[Any]) -> "BoxBuilder":
        return replace(self, declared_type=declared_type)

    def build(self, value: Any) -> BoxedValue:
        if self.base_type is not None and not self.types.satisfies(self.base_type, value):
            raise TypeMismatchException(value, value_type_name(value), self.box_kind, show_value=False)

        if self.declared_type is None:
            return box_value(self.box_kind, value_type_name(value), value)

        declared_type_name = descriptor_name(self.declared_type)
        if not self.types.satisfies(self.declared_type, value):
            raise TypeMismatchException(value, value_type_name(value), declared_type_name)

        variant_tag: Optional[str] = None
        if self.types.is_variant(self.declared_type):
            variant_tag = self.types.which_variant_type(self.declared_type)(value)

        return box_value(self.box_kind, declared_type_name, value, variant_tag)

    def __call__(self, value: Any) -> BoxedValue:
        return self.build(value)


@dataclass(frozen=True)
class BoxConstructor:
    """The registered constructor of a box kind; call it with an optional declared type to get a builder."""
    box_kind: str
    types: TypeService
    base_type: Optional[Any] = None

    def builder(self) -> BoxBuilder:
        return BoxBuilder(self.box_kind, self.types, self.base_type)

    def __call__(self, declared_type: Optional[Any] = None) -> BoxBuilder:
        return self.builder().with_declared_type(declared_type)
