from enum import Enum
from typing import Any
from typing import Callable
from typing import List
from typing import Optional

from boxtype.box.boxed import BOX_TYPE
from boxtype.box.boxed import NONE_KIND
from boxtype.box.boxed import BoxedValue
from boxtype.box.boxed import box_value
from boxtype.box.boxed import install_box_type
from boxtype.box.boxed import none
from boxtype.box.boxed import value_type_name
from boxtype.match import by_type
from boxtype.match import match
from boxtype.typecheck.descriptor import descriptor_name
from boxtype.typecheck.service import TypeService

JUST_KIND = "Just"
MAYBE_KIND = "Maybe"
EITHER_KIND = "Either"


class BoxKind(Enum):
    NONE = NONE_KIND
    JUST = JUST_KIND
    MAYBE = MAYBE_KIND
    EITHER = EITHER_KIND
    OTHER = "Other"


def kind_of(value: BoxedValue) -> BoxKind:
    try:
        return BoxKind(value.box_kind)
    except ValueError:
        return BoxKind.OTHER


def just(value: Any) -> BoxedValue:
    return box_value(JUST_KIND, value_type_name(value), value)


def _resolving_builder(
    types: TypeService,
    box_kind: str,
    descriptor: Any,
    fallback: BoxedValue
) -> Callable[..., BoxedValue]:
    is_expected = by_type(types, descriptor)
    declared_type = descriptor_name(descriptor)
    which_variant = types.which_variant_type(descriptor) if types.is_variant(descriptor) else None

    def build(value: Any = None) -> BoxedValue:
        content: BoxedValue = match(value, [(is_expected, just)], lambda _: fallback)
        variant_tag: Optional[str] = None
        if which_variant is not None and content is not fallback:
            variant_tag = which_variant(value)
        return box_value(box_kind, declared_type, content, variant_tag)

    return build


def maybe(types: TypeService, descriptor: Any) -> Callable[..., BoxedValue]:
    """
    :return: A function boxing a value as `Maybe`: it unwraps to the value if the value satisfies `descriptor`
        and to `none` otherwise.
    """
    return _resolving_builder(types, MAYBE_KIND, descriptor, none)


def either(types: TypeService, descriptor: Any, default_value: Any) -> Callable[..., BoxedValue]:
    """
    :return: A function boxing a value as `Either`: it unwraps to the value if the value satisfies `descriptor`
        and to `default_value` otherwise.
    """
    return _resolving_builder(types, EITHER_KIND, descriptor, just(default_value))


def some(value: Any) -> Any:
    if value is None:
        return none
    if isinstance(value, BoxedValue):
        return value()
    return value


def install_monad_types(types: TypeService) -> None:
    """Registers the `None`, `Just<X>`, `Maybe<X>` and `Either<X>` types with `types`."""
    install_box_type(types)

    def content_satisfies(value: BoxedValue, args: List[str]) -> bool:
        return len(args) <= 0 or types.satisfies(args[0], value())

    types.subtype(BOX_TYPE)(NONE_KIND, lambda value, _: kind_of(value) is BoxKind.NONE)
    types.subtype(BOX_TYPE)(
        JUST_KIND,
        lambda value, args: kind_of(value) is BoxKind.JUST and content_satisfies(value, args)
    )
    types.subtype(BOX_TYPE)(
        MAYBE_KIND,
        lambda value, args: kind_of(value) is BoxKind.MAYBE and (value() is none or content_satisfies(value, args))
    )
    types.subtype(BOX_TYPE)(
        EITHER_KIND,
        lambda value, args: kind_of(value) is BoxKind.EITHER and content_satisfies(value, args)
    )
